"""
Per-function body analysis: field reads through `self`, external type
references, and cyclomatic complexity.

All three walk the lowered body (see syntax.py) by structural recursion.
None of them can fail; shapes they do not care about contribute nothing.
"""

import logging
from typing import Iterable

from .models import FunctionRecord
from .syntax import (
    Block, FieldAccess, For, If, Loop, Match, PathExpr, SelfRef, StructLit,
    While, children,
)

log = logging.getLogger(__name__)

# Path roots that refer to the current type or crate, not an outside type.
_LOCAL_PATH_ROOTS = ("self", "crate")

_BRANCH_NODES = (If, While, For, Loop, Match)


def _is_external_path(text: str) -> bool:
    if "::" not in text:
        return False
    root = text.split("::", 1)[0].strip()
    return root not in _LOCAL_PATH_ROOTS


def _visit_field_reads(node, field_names: set[str], found: set[str]) -> None:
    if isinstance(node, FieldAccess) and isinstance(node.base, SelfRef):
        if node.member in field_names:
            found.add(node.member)
        return
    for child in children(node):
        _visit_field_reads(child, field_names, found)


def _visit_external_refs(node, field_names: list[str], found: set[str]) -> None:
    if isinstance(node, PathExpr):
        if _is_external_path(node.text):
            found.add(node.text)
    elif isinstance(node, StructLit):
        # Heuristic, not type resolution: a literal whose type name contains
        # one of our own field names is assumed to be local.
        if node.type_name and not any(name in node.type_name for name in field_names):
            found.add(node.type_name)
    for child in children(node):
        _visit_external_refs(child, field_names, found)


def _decision_points(node) -> int:
    own = 1 if isinstance(node, _BRANCH_NODES) else 0
    return own + sum(_decision_points(child) for child in children(node))


def collect_field_reads(body: Block | None, field_names: Iterable[str]) -> set[str]:
    """Declared field names read as `self.<field>` anywhere in the body."""
    found: set[str] = set()
    if body is not None:
        _visit_field_reads(body, set(field_names), found)
    return found


def collect_external_refs(body: Block | None, field_names: Iterable[str]) -> set[str]:
    """Raw qualified paths and struct-literal type names the body refers to."""
    found: set[str] = set()
    if body is not None:
        _visit_external_refs(body, list(field_names), found)
    return found


def cyclomatic_complexity(body: Block | None) -> int:
    """
    1 for the base path, plus one per if / while / for / loop / match
    anywhere in the body. A match counts once regardless of its arm count;
    `else if` counts as its own `if`.
    """
    if body is None:
        return 1
    return 1 + _decision_points(body)


def analyze_function(
    name: str, body: Block | None, field_names: Iterable[str]
) -> FunctionRecord:
    """Build the FunctionRecord for one associated function."""
    names = list(field_names)
    record = FunctionRecord(
        name=name,
        fields_accessed=collect_field_reads(body, names),
        external_type_refs=collect_external_refs(body, names),
        cyclomatic_complexity=cyclomatic_complexity(body),
    )
    log.debug(
        "fn %s: complexity=%d fields=%s refs=%s",
        name, record.cyclomatic_complexity,
        sorted(record.fields_accessed), sorted(record.external_type_refs),
    )
    return record
