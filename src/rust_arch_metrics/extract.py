"""
Struct and method extraction from tree-sitter Rust ASTs.

Uses tree-walking (child_by_field_name, node.children) rather than the
Query API, which was removed in tree-sitter 0.25. Only top-level items are
considered; structs nested in functions or inline modules are not extracted.
"""

import logging
from pathlib import Path

from tree_sitter import Node, Tree

from .analyze import analyze_function
from .models import FieldRecord, FunctionRecord, TypeRecord
from .parse import parse_file
from .syntax import lower_block, node_text

log = logging.getLogger(__name__)


def _type_base_name(node: Node | None) -> str | None:
    """
    Last path segment of a type, generics stripped.

    Foo → "Foo",  Foo<T> → "Foo",  crate::model::Foo → "Foo"
    """
    if node is None:
        return None
    if node.type == "type_identifier":
        return node_text(node)
    if node.type == "generic_type":
        return _type_base_name(node.child_by_field_name("type"))
    if node.type == "scoped_type_identifier":
        return _type_base_name(node.child_by_field_name("name"))
    return None


def _struct_fields(node: Node) -> list[FieldRecord]:
    body = node.child_by_field_name("body")
    # tuple structs and unit structs have no named fields
    if body is None or body.type != "field_declaration_list":
        return []

    fields: list[FieldRecord] = []
    for decl in body.named_children:
        if decl.type != "field_declaration":
            continue
        name_node = decl.child_by_field_name("name")
        type_node = decl.child_by_field_name("type")
        if name_node is None or type_node is None:
            continue
        fields.append(FieldRecord(name=node_text(name_node), declared_type=node_text(type_node)))
    return fields


def _analyze_method(node: Node, record: TypeRecord) -> FunctionRecord | None:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None
    body_node = node.child_by_field_name("body")
    body = lower_block(body_node) if body_node is not None else None
    return analyze_function(node_text(name_node), body, record.field_names)


# ── Passes ───────────────────────────────────────────────────────────────────

def _collect_structs(root: Node, file_path: str) -> list[TypeRecord]:
    """Pass 1: every top-level struct, with its fields, in declaration order."""
    records: list[TypeRecord] = []
    for node in root.named_children:
        if node.type != "struct_item":
            continue
        name_node = node.child_by_field_name("name")
        if name_node is None:
            continue
        records.append(TypeRecord(
            name=node_text(name_node),
            fields=_struct_fields(node),
            file_path=file_path,
            line=node.start_point[0] + 1,
        ))
    return records


def _attach_impls(root: Node, records: list[TypeRecord]) -> None:
    """
    Pass 2: attach inherent-impl functions as methods and record trait
    impls. Mutates the records produced by pass 1.
    """
    by_name: dict[str, TypeRecord] = {}
    for record in records:
        by_name.setdefault(record.name, record)

    for node in root.named_children:
        if node.type != "impl_item":
            continue
        self_name = _type_base_name(node.child_by_field_name("type"))
        record = by_name.get(self_name) if self_name else None
        if record is None:
            log.debug("impl for unknown type %s ignored", self_name)
            continue

        trait_node = node.child_by_field_name("trait")
        if trait_node is not None:
            # Trait impl bodies are not extracted as methods.
            record.traits_implemented.add(_type_base_name(trait_node) or node_text(trait_node))
            continue

        body = node.child_by_field_name("body")
        if body is None:
            continue
        for item in body.named_children:
            if item.type != "function_item":
                continue
            method = _analyze_method(item, record)
            if method is not None:
                record.methods.append(method)


def extract_types(tree: Tree, file_path: str = "") -> list[TypeRecord]:
    """Extract the TypeRecords declared at the top level of one parsed file."""
    root = tree.root_node
    records = _collect_structs(root, file_path)
    if records:
        _attach_impls(root, records)
    log.debug("%s: %d structs", file_path or "<memory>", len(records))
    return records


def extract_file(path: str | Path, display_path: str | None = None) -> list[TypeRecord]:
    """Parse and extract one file. Raises ParseError on unparseable input."""
    tree, _source = parse_file(path)
    return extract_types(tree, display_path if display_path is not None else str(path))
