"""File discovery — walk a project, respect .gitignore and exclude patterns, return .rs paths."""

import logging
from pathlib import Path, PurePosixPath

import pathspec

from .models import AnalyzeConfig

log = logging.getLogger(__name__)

RUST_SUFFIX = ".rs"


class NoSourceFilesError(Exception):
    """The analysed path contains no Rust source files."""

    def __init__(self, path: str):
        super().__init__(f"No Rust files found in {path}")
        self.path = path


def _load_gitignore_spec(root: Path) -> pathspec.PathSpec | None:
    gitignore = root / ".gitignore"
    if gitignore.exists():
        patterns = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
        return pathspec.PathSpec.from_lines("gitwildmatch", patterns)
    return None


def _is_excluded(rel: PurePosixPath, exclude_spec: pathspec.PathSpec | None, patterns: list[str]) -> bool:
    if exclude_spec is not None and exclude_spec.match_file(rel.as_posix()):
        return True
    # plain words exclude any path component containing them
    return any(p in part for p in patterns for part in rel.parts)


def discover_files(config: AnalyzeConfig) -> list[Path]:
    """
    Return every .rs file under config.path, sorted by path.

    A path naming a single file yields that file (if it is a .rs file).
    Respects the root .gitignore, config.exclude_dirs and
    config.exclude_patterns. Raises FileNotFoundError for a missing path.
    """
    root = Path(config.path)
    if not root.exists():
        raise FileNotFoundError(config.path)

    if root.is_file():
        return [root] if root.suffix == RUST_SUFFIX else []

    gitignore_spec = _load_gitignore_spec(root) if config.respect_gitignore else None
    patterns = [p for p in config.exclude_patterns if p]
    exclude_spec = pathspec.PathSpec.from_lines("gitwildmatch", patterns) if patterns else None
    exclude_dirs = set(config.exclude_dirs)

    results: list[Path] = []

    for path in sorted(root.rglob(f"*{RUST_SUFFIX}")):
        if not path.is_file():
            continue

        rel = PurePosixPath(path.relative_to(root).as_posix())

        # skip excluded directories (check every part of the path)
        if any(part in exclude_dirs for part in rel.parts[:-1]):
            continue

        # skip gitignored paths
        if gitignore_spec and gitignore_spec.match_file(rel.as_posix()):
            continue

        if _is_excluded(rel, exclude_spec, patterns):
            log.debug("Excluded %s", rel)
            continue

        results.append(path)

    log.info("Discovered %d Rust files under %s", len(results), root)
    return results
