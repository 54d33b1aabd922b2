"""
Lowering of tree-sitter Rust function bodies into a closed set of
statement/expression variants.

The analyzer dispatches on these classes with isinstance() rather than on
raw node.type strings. Anything the lowering does not recognise becomes an
Opaque leaf, which contributes nothing to any metric.
"""

from dataclasses import dataclass, field

from tree_sitter import Node


# ── Variants ─────────────────────────────────────────────────────────────────

@dataclass
class Block:
    statements: list = field(default_factory=list)


@dataclass
class Let:
    value: "Expr | None" = None
    alternative: "Block | None" = None      # let-else


@dataclass
class ExprStmt:
    expr: "Expr"


@dataclass
class If:
    condition: "Expr"
    then_branch: Block
    else_branch: "Expr | None" = None       # Block, or If for `else if`


@dataclass
class While:
    condition: "Expr"
    body: Block


@dataclass
class For:
    iterable: "Expr"
    body: Block


@dataclass
class Loop:
    body: Block


@dataclass
class MatchArm:
    guard: "Expr | None"
    body: "Expr"


@dataclass
class Match:
    scrutinee: "Expr"
    arms: list[MatchArm] = field(default_factory=list)


@dataclass
class Call:
    func: "Expr"
    args: list = field(default_factory=list)


@dataclass
class MethodCall:
    receiver: "Expr"
    method: str
    args: list = field(default_factory=list)


@dataclass
class Binary:
    left: "Expr"
    right: "Expr"


@dataclass
class Unary:
    operand: "Expr"


@dataclass
class Reference:
    target: "Expr"


@dataclass
class FieldAccess:
    base: "Expr"
    member: str


@dataclass
class SelfRef:
    pass


@dataclass
class PathExpr:
    text: str                               # e.g. "Address::new", "crate::util::f"


@dataclass
class StructLit:
    type_name: str                          # e.g. "Address", "Self", "models::Address"
    initializers: list = field(default_factory=list)


@dataclass
class Closure:
    body: "Expr"


@dataclass
class Group:
    """Transparent wrapper: parentheses, return, `?`, index, tuples, ..."""
    parts: list = field(default_factory=list)


@dataclass
class Opaque:
    kind: str                               # tree-sitter node type, for debugging


Expr = (
    Block | If | While | For | Loop | Match | Call | MethodCall | Binary
    | Unary | Reference | FieldAccess | SelfRef | PathExpr | StructLit
    | Closure | Group | Opaque
)
Stmt = Let | ExprStmt


def children(node) -> list:
    """Direct sub-statements / sub-expressions of any variant, in source order."""
    if isinstance(node, Block):
        return list(node.statements)
    if isinstance(node, Let):
        return [n for n in (node.value, node.alternative) if n is not None]
    if isinstance(node, ExprStmt):
        return [node.expr]
    if isinstance(node, If):
        parts = [node.condition, node.then_branch]
        if node.else_branch is not None:
            parts.append(node.else_branch)
        return parts
    if isinstance(node, While):
        return [node.condition, node.body]
    if isinstance(node, For):
        return [node.iterable, node.body]
    if isinstance(node, Loop):
        return [node.body]
    if isinstance(node, Match):
        parts = [node.scrutinee]
        for arm in node.arms:
            parts.append(arm)
        return parts
    if isinstance(node, MatchArm):
        return [n for n in (node.guard, node.body) if n is not None]
    if isinstance(node, Call):
        return [node.func, *node.args]
    if isinstance(node, MethodCall):
        return [node.receiver, *node.args]
    if isinstance(node, Binary):
        return [node.left, node.right]
    if isinstance(node, Unary):
        return [node.operand]
    if isinstance(node, Reference):
        return [node.target]
    if isinstance(node, FieldAccess):
        return [node.base]
    if isinstance(node, StructLit):
        return list(node.initializers)
    if isinstance(node, Closure):
        return [node.body]
    if isinstance(node, Group):
        return list(node.parts)
    # SelfRef, PathExpr, Opaque
    return []


# ── Lowering ─────────────────────────────────────────────────────────────────

_TRIVIA = frozenset({"line_comment", "block_comment"})

# Statements inside a body that carry no expression of their own.
_SKIPPED_STATEMENTS = frozenset({
    "empty_statement", "use_declaration", "extern_crate_declaration",
    "macro_definition", "label", "inner_attribute_item",
})

_BLOCK_WRAPPERS = frozenset({
    "unsafe_block", "async_block", "const_block", "try_block", "gen_block",
})

# Expressions that only matter through their operands.
_TRANSPARENT = frozenset({
    "parenthesized_expression", "return_expression", "try_expression",
    "await_expression", "index_expression", "tuple_expression",
    "array_expression", "range_expression", "compound_assignment_expr",
    "break_expression", "yield_expression", "let_chain",
})


def node_text(node: Node) -> str:
    raw = node.text.decode("utf-8", errors="replace") if node.text else ""
    return " ".join(raw.split())


def _named(node: Node) -> list[Node]:
    return [c for c in node.named_children if c.type not in _TRIVIA]


def _child_of_type(node: Node, type_name: str) -> Node | None:
    for child in node.named_children:
        if child.type == type_name:
            return child
    return None


def lower_block(node: Node) -> Block:
    """Lower a `block` node (a function body or any `{ ... }`)."""
    statements: list = []
    for child in _named(node):
        kind = child.type
        if kind in _SKIPPED_STATEMENTS or kind.endswith("_item"):
            # nested fn/struct/impl items are not part of this body
            continue
        if kind == "let_declaration":
            value = child.child_by_field_name("value")
            alternative = child.child_by_field_name("alternative")
            statements.append(Let(
                value=lower_expr(value) if value is not None else None,
                alternative=lower_block(alternative) if alternative is not None else None,
            ))
        elif kind == "expression_statement":
            inner = _named(child)
            if inner:
                statements.append(ExprStmt(lower_expr(inner[0])))
        else:
            # trailing expression without a semicolon
            statements.append(ExprStmt(lower_expr(child)))
    return Block(statements)


def _lower_block_field(node: Node, name: str) -> Block:
    child = node.child_by_field_name(name)
    return lower_block(child) if child is not None else Block()


def lower_condition(node: Node | None) -> "Expr":
    """Conditions of `if` / `while` / match guards, including `let` forms."""
    if node is None:
        return Opaque("missing")
    if node.type == "let_condition":
        value = node.child_by_field_name("value")
        return lower_expr(value) if value is not None else Opaque("let_condition")
    if node.type == "let_chain":
        return Group([lower_condition(c) for c in _named(node)])
    return lower_expr(node)


def _lower_call(node: Node) -> "Expr":
    func = node.child_by_field_name("function")
    args_node = node.child_by_field_name("arguments")
    args = []
    if args_node is not None:
        args = [lower_expr(a) for a in _named(args_node) if a.type != "attribute_item"]
    if func is None:
        return Group(args)

    target = func
    if target.type == "generic_function":
        # x.collect::<Vec<_>>() / parse::<u32>()
        inner = target.child_by_field_name("function")
        if inner is not None:
            target = inner
    if target.type == "field_expression":
        receiver = target.child_by_field_name("value")
        method = target.child_by_field_name("field")
        return MethodCall(
            receiver=lower_expr(receiver) if receiver is not None else Opaque("missing"),
            method=node_text(method) if method is not None else "",
            args=args,
        )
    return Call(func=lower_expr(target), args=args)


def _lower_match(node: Node) -> Match:
    value = node.child_by_field_name("value")
    body = node.child_by_field_name("body")
    arms: list[MatchArm] = []
    if body is not None:
        for arm in _named(body):
            if arm.type != "match_arm":
                continue
            pattern = arm.child_by_field_name("pattern")
            guard = pattern.child_by_field_name("condition") if pattern is not None else None
            arm_value = arm.child_by_field_name("value")
            arms.append(MatchArm(
                guard=lower_condition(guard) if guard is not None else None,
                body=lower_expr(arm_value) if arm_value is not None else Opaque("missing"),
            ))
    return Match(
        scrutinee=lower_expr(value) if value is not None else Opaque("missing"),
        arms=arms,
    )


def _lower_struct_literal(node: Node) -> StructLit:
    name = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    initializers = []
    if body is not None:
        for init in _named(body):
            if init.type == "field_initializer":
                value = init.child_by_field_name("value")
                if value is not None:
                    initializers.append(lower_expr(value))
            elif init.type == "base_field_initializer":
                inner = _named(init)
                if inner:
                    initializers.append(lower_expr(inner[0]))
            # shorthand `Foo { x }` names a local binding
    return StructLit(type_name=node_text(name) if name is not None else "", initializers=initializers)


def lower_expr(node: Node) -> "Expr":
    """Lower a single expression node."""
    kind = node.type

    if kind == "self":
        return SelfRef()
    if kind == "block":
        return lower_block(node)
    if kind in _BLOCK_WRAPPERS:
        inner = _child_of_type(node, "block")
        return lower_block(inner) if inner is not None else Opaque(kind)

    if kind == "if_expression":
        else_branch = None
        else_clause = node.child_by_field_name("alternative")
        if else_clause is not None:
            inner = _named(else_clause)
            if inner:
                else_branch = lower_expr(inner[0])
        return If(
            condition=lower_condition(node.child_by_field_name("condition")),
            then_branch=_lower_block_field(node, "consequence"),
            else_branch=else_branch,
        )
    if kind == "while_expression":
        return While(
            condition=lower_condition(node.child_by_field_name("condition")),
            body=_lower_block_field(node, "body"),
        )
    if kind == "for_expression":
        value = node.child_by_field_name("value")
        return For(
            iterable=lower_expr(value) if value is not None else Opaque("missing"),
            body=_lower_block_field(node, "body"),
        )
    if kind == "loop_expression":
        return Loop(body=_lower_block_field(node, "body"))
    if kind == "match_expression":
        return _lower_match(node)

    if kind == "call_expression":
        return _lower_call(node)
    if kind == "binary_expression":
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        return Binary(
            left=lower_expr(left) if left is not None else Opaque("missing"),
            right=lower_expr(right) if right is not None else Opaque("missing"),
        )
    if kind == "unary_expression":
        operands = _named(node)
        return Unary(lower_expr(operands[-1]) if operands else Opaque("missing"))
    if kind == "reference_expression":
        value = node.child_by_field_name("value")
        return Reference(lower_expr(value) if value is not None else Opaque("missing"))
    if kind == "field_expression":
        value = node.child_by_field_name("value")
        member = node.child_by_field_name("field")
        return FieldAccess(
            base=lower_expr(value) if value is not None else Opaque("missing"),
            member=node_text(member) if member is not None else "",
        )
    if kind == "scoped_identifier":
        return PathExpr(node_text(node))
    if kind == "generic_function":
        func = node.child_by_field_name("function")
        return lower_expr(func) if func is not None else Opaque(kind)
    if kind == "struct_expression":
        return _lower_struct_literal(node)
    if kind == "closure_expression":
        body = node.child_by_field_name("body")
        return Closure(lower_expr(body) if body is not None else Opaque("missing"))

    if kind == "assignment_expression":
        # the left side is written, not read
        right = node.child_by_field_name("right")
        return Group([lower_expr(right)] if right is not None else [])
    if kind == "type_cast_expression":
        value = node.child_by_field_name("value")
        return Group([lower_expr(value)] if value is not None else [])
    if kind in _TRANSPARENT:
        return Group([lower_expr(c) for c in _named(node)])

    # identifiers, literals, macro invocations, ...
    return Opaque(kind)
