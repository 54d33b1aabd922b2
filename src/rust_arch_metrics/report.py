"""Rendering of analysis results as table, JSON or CSV, and of single types for inspection."""

import csv
import io
import json
import logging
import sys
from pathlib import Path

from .models import AnalysisResult, TypeRecord

log = logging.getLogger(__name__)

METRIC_NAMES = ("lcom", "cbo", "wmc")
FORMATS = ("table", "json", "csv")

_NAME_WIDTH = 30
_COL_WIDTH = 10

_LEGEND = {
    "lcom": "  LCOM (0-1): Lack of Cohesion in Methods (lower is better)",
    "cbo":  "  CBO:        Coupling Between Objects (lower is better)",
    "wmc":  "  WMC:        Weighted Methods per Class (complexity)",
}


def parse_metric_list(text: str) -> list[str]:
    """
    Parse a comma-separated metric selection.

    "all" → ["lcom", "cbo", "wmc"];  "wmc,lcom" → ["lcom", "wmc"]
    """
    wanted = [t.strip().lower() for t in text.split(",") if t.strip()]
    if not wanted or "all" in wanted:
        return list(METRIC_NAMES)
    unknown = [w for w in wanted if w not in METRIC_NAMES]
    if unknown:
        raise ValueError(f"Unknown metric: {', '.join(unknown)} (expected lcom, cbo, wmc or all)")
    return [m for m in METRIC_NAMES if m in wanted]


def _render_table(results: list[AnalysisResult], metrics: list[str]) -> str:
    if not results:
        return "No structs found to analyze."

    lines = []
    header = f"{'Struct Name':<{_NAME_WIDTH}}"
    for m in metrics:
        header += f" {m.upper():>{_COL_WIDTH}}"
    lines.append(header)
    lines.append("-" * (_NAME_WIDTH + (_COL_WIDTH + 1) * len(metrics)))

    for r in results:
        row = f"{r.type_name:<{_NAME_WIDTH}}"
        for m in metrics:
            if m == "lcom":
                row += f" {r.lcom:>{_COL_WIDTH}.3f}"
            else:
                row += f" {getattr(r, m):>{_COL_WIDTH}}"
        lines.append(row)

    lines.append("")
    lines.append("Metric Explanations:")
    lines.extend(_LEGEND[m] for m in metrics)
    return "\n".join(lines)


def _render_json(results: list[AnalysisResult], metrics: list[str]) -> str:
    rows = []
    for r in results:
        row = {"struct_name": r.type_name}
        for m in metrics:
            row[m] = getattr(r, m)
        rows.append(row)
    return json.dumps(rows, indent=2)


def _render_csv(results: list[AnalysisResult], metrics: list[str]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["struct_name", *metrics])
    for r in results:
        writer.writerow([r.type_name, *(getattr(r, m) for m in metrics)])
    return buf.getvalue()


def render(
    results: list[AnalysisResult],
    fmt: str = "table",
    metrics: list[str] | None = None,
) -> str:
    """Render results in extraction order. Raises ValueError for an unknown format."""
    selected = list(metrics) if metrics else list(METRIC_NAMES)
    if fmt == "table":
        return _render_table(results, selected)
    if fmt == "json":
        return _render_json(results, selected)
    if fmt == "csv":
        return _render_csv(results, selected)
    raise ValueError(f"Unknown format: {fmt}")


def write_report(content: str, output: str | None = None) -> None:
    """Write to `output` if given, otherwise to stdout."""
    content = content.rstrip("\n")
    if output:
        Path(output).write_text(content + "\n", encoding="utf-8")
        log.info("Wrote report to %s", output)
    else:
        print(content, file=sys.stdout)


# ── Inspection ───────────────────────────────────────────────────────────────

def type_to_dict(record: TypeRecord) -> dict:
    """JSON-ready view of a TypeRecord. Sets are emitted sorted."""
    return {
        "name": record.name,
        "file": record.file_path,
        "line": record.line,
        "fields": [{"name": f.name, "type": f.declared_type} for f in record.fields],
        "methods": [
            {
                "name": m.name,
                "cyclomatic_complexity": m.cyclomatic_complexity,
                "fields_accessed": sorted(m.fields_accessed),
                "external_type_refs": sorted(m.external_type_refs),
            }
            for m in record.methods
        ],
        "traits_implemented": sorted(record.traits_implemented),
    }


def render_type(record: TypeRecord) -> str:
    location = f"{record.file_path}:{record.line}" if record.file_path else f"line {record.line}"
    lines = [f"STRUCT  {record.name}", f"  file:    {location}"]

    lines.append(f"  fields ({len(record.fields)}):")
    for f in record.fields:
        lines.append(f"    {f.name}: {f.declared_type}")

    lines.append(f"  methods ({len(record.methods)}):")
    for m in record.methods:
        lines.append(f"    {m.name}  complexity={m.cyclomatic_complexity}")
        if m.fields_accessed:
            lines.append(f"      reads: {', '.join(sorted(m.fields_accessed))}")
        if m.external_type_refs:
            lines.append(f"      refs:  {', '.join(sorted(m.external_type_refs))}")

    traits = ", ".join(sorted(record.traits_implemented)) or "(none)"
    lines.append(f"  traits:  {traits}")
    return "\n".join(lines)
