"""
Main analysis pipeline — wires discover → parse → extract → merge → metrics.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .discover import NoSourceFilesError, discover_files
from .extract import extract_file
from .metrics import analyze_all
from .models import AnalysisRun, AnalyzeConfig, TypeRecord
from .parse import ParseError

log = logging.getLogger(__name__)


def _display_path(path: Path, root: Path) -> str:
    if root.is_dir():
        return path.relative_to(root).as_posix()
    return path.as_posix()


def _extract_one(path: Path, root: Path) -> tuple[list[TypeRecord], ParseError | None]:
    """Extract a single file. Parse failures and over-deep bodies are returned, not raised."""
    display = _display_path(path, root)
    try:
        return extract_file(path, display), None
    except ParseError as e:
        return [], ParseError(display, e.message)
    except RecursionError:
        return [], ParseError(display, "expression nesting too deep")


def run_analysis(config: AnalyzeConfig) -> AnalysisRun:
    """
    Run the full pipeline for a file or project directory.

    Files that fail to parse are logged and skipped; the run continues with
    the rest. Raises FileNotFoundError for a missing path and
    NoSourceFilesError when there is nothing to analyse.
    """
    root = Path(config.path)
    files = discover_files(config)
    if not files:
        raise NoSourceFilesError(config.path)

    if config.workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=config.workers) as pool:
            per_file = list(pool.map(lambda p: _extract_one(p, root), files))
    else:
        per_file = [_extract_one(p, root) for p in files]

    # Merge in discovery order; metrics must not start before this point.
    run = AnalysisRun(files_analyzed=len(files))
    for records, error in per_file:
        if error is not None:
            log.warning("Failed to parse %s: %s", error.path, error.message)
            run.errors.append(error)
            continue
        run.types.extend(records)

    log.info(
        "Extracted %d structs from %d files (%d errors)",
        len(run.types), len(files), len(run.errors),
    )

    run.results = analyze_all(run.types, workers=config.workers)
    return run


def find_type(run: AnalysisRun, name: str) -> list[TypeRecord]:
    """Every extracted record with the given name (duplicates are not merged)."""
    return [t for t in run.types if t.name == name]
