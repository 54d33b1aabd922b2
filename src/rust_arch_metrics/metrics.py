"""
LCOM / CBO / WMC computation over extracted TypeRecords.

The records are treated as frozen here: nothing in this module mutates them,
so per-type computations can safely run on a thread pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from .models import AnalysisResult, TypeRecord

log = logging.getLogger(__name__)

_OPEN = "<([("
_CLOSE = ">)])"


# ── LCOM ─────────────────────────────────────────────────────────────────────

def lcom(record: TypeRecord) -> float:
    """
    Lack of Cohesion in Methods, Henderson-Sellers variant:

        LCOM = (m - sum(mA) / a) / (m - 1)

    m = methods, a = fields, mA = methods accessing a given field.
    Returns 0.0 for types with at most one method or no fields, and clamps
    the result to [0, 1].
    """
    method_count = len(record.methods)
    field_count = len(record.fields)
    if method_count <= 1 or field_count == 0:
        return 0.0

    sum_ma = 0
    for fld in record.fields:
        sum_ma += sum(1 for m in record.methods if fld.name in m.fields_accessed)

    avg_methods_per_field = sum_ma / field_count
    value = (method_count - avg_methods_per_field) / (method_count - 1)
    return min(max(value, 0.0), 1.0)


# ── CBO ──────────────────────────────────────────────────────────────────────

def _split_top_level(params: str) -> list[str]:
    """Split on commas that are not nested inside <>, (), or []."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    prev = ""
    for ch in params:
        if ch in _OPEN:
            depth += 1
        elif ch in _CLOSE and not (ch == ">" and prev == "-"):
            # "->" is an arrow, not a closing bracket
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            prev = ch
            continue
        current.append(ch)
        prev = ch
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def type_name_candidates(type_text: str) -> list[str]:
    """
    Names a declared field type may couple to, outermost first.

    "Vec<Address>"              → ["Vec", "Address"]
    "&mut String"               → ["String"]
    "HashMap<String, Vec<User>>" → ["HashMap", "String", "Vec", "User"]
    """
    ty = type_text.strip()
    if not ty:
        return []

    if ty.startswith("&"):
        inner = ty[1:].lstrip()
        if inner.startswith("'"):
            # &'a T
            _, _, inner = inner.partition(" ")
        inner = inner.lstrip()
        if inner.startswith("mut "):
            inner = inner[4:]
        return type_name_candidates(inner)

    if ty[0] in "([" and ty[-1] in ")]":
        # tuples (A, B), slices [T], arrays [T; N]
        body = ty[1:-1]
        if ty[0] == "[":
            body = body.split(";", 1)[0]
        names: list[str] = []
        for part in _split_top_level(body):
            names.extend(type_name_candidates(part))
        return names

    start = ty.find("<")
    if start != -1 and ty.endswith(">"):
        outer = ty[:start].strip()
        names = [outer] if outer else []
        for param in _split_top_level(ty[start + 1:-1]):
            names.extend(type_name_candidates(param))
        return names

    return [ty]


def _coupled_names(record: TypeRecord, known_names: set[str]) -> set[str]:
    coupled: set[str] = set()

    # (a) references in method bodies; no self exclusion
    for method in record.methods:
        for ref in method.external_type_refs:
            if ref in known_names:
                coupled.add(ref)

    # (b) field types, excluding the type itself
    for fld in record.fields:
        for name in type_name_candidates(fld.declared_type):
            if name in known_names and name != record.name:
                coupled.add(name)

    # (c) traits always count, known in the corpus or not
    coupled.update(record.traits_implemented)
    return coupled


def cbo(record: TypeRecord, all_records: list[TypeRecord]) -> int:
    """Coupling Between Objects: distinct known types and traits depended on."""
    known_names = {r.name for r in all_records}
    return len(_coupled_names(record, known_names))


# ── WMC ──────────────────────────────────────────────────────────────────────

def wmc(record: TypeRecord) -> int:
    """Weighted Methods per Class: sum of method cyclomatic complexities."""
    return sum(max(m.cyclomatic_complexity, 1) for m in record.methods)


# ── Engine ───────────────────────────────────────────────────────────────────

def _analyze(record: TypeRecord, known_names: set[str]) -> AnalysisResult:
    return AnalysisResult(
        type_name=record.name,
        lcom=lcom(record),
        cbo=len(_coupled_names(record, known_names)),
        wmc=wmc(record),
    )


def analyze_type(record: TypeRecord, all_records: list[TypeRecord]) -> AnalysisResult:
    """Compute all three metrics for one record against the full collection."""
    return _analyze(record, {r.name for r in all_records})


def analyze_all(records: list[TypeRecord], workers: int = 1) -> list[AnalysisResult]:
    """
    Metrics for every record, in the order given.

    Must only be called once extraction of every file has been merged into
    `records`, since CBO depends on the complete set of type names.
    """
    known_names = {r.name for r in records}
    if workers > 1 and len(records) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda r: _analyze(r, known_names), records))
    else:
        results = [_analyze(r, known_names) for r in records]

    log.info("Computed metrics for %d types", len(results))
    return results
