"""CLI entry point for rust-arch-metrics."""

import argparse
import json
import logging
import sys

from .discover import NoSourceFilesError
from .models import AnalysisRun, AnalyzeConfig
from .pipeline import find_type, run_analysis
from .report import FORMATS, parse_metric_list, render, render_type, type_to_dict, write_report

log = logging.getLogger(__name__)


def _metric_list(text: str) -> list[str]:
    try:
        return parse_metric_list(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _build_config(args: argparse.Namespace) -> AnalyzeConfig:
    return AnalyzeConfig(
        path=args.path,
        exclude_patterns=list(args.exclude or []),
        respect_gitignore=not args.no_gitignore,
        workers=max(1, getattr(args, "jobs", 1)),
    )


def _run(args: argparse.Namespace) -> AnalysisRun | None:
    """Run the pipeline, printing the user-facing error and returning None on failure."""
    try:
        return run_analysis(_build_config(args))
    except FileNotFoundError:
        print(f"Path not found: {args.path}", file=sys.stderr)
    except NoSourceFilesError:
        print(f"No Rust files found in {args.path}", file=sys.stderr)
    return None


def cmd_analyze(args: argparse.Namespace) -> int:
    run = _run(args)
    if run is None:
        return 1

    if run.errors:
        print(f"Skipped {len(run.errors)} file(s) that failed to parse", file=sys.stderr)

    if not run.types:
        print("No structs found in the analyzed files.", file=sys.stderr)
        return 0

    write_report(render(run.results, args.format, args.metrics), args.output)
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    """Show the extracted model of one struct: fields, methods, refs, traits."""
    run = _run(args)
    if run is None:
        return 1

    records = find_type(run, args.type_name)
    if not records:
        print(f"Struct not found: {args.type_name}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([type_to_dict(r) for r in records], indent=2))
    else:
        print("\n\n".join(render_type(r) for r in records))
    return 0


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    parser = argparse.ArgumentParser(
        prog="rust-arch-metrics",
        description="Measure LCOM, CBO and WMC for the structs of a Rust codebase",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # analyze
    p = sub.add_parser("analyze", help="Compute metrics for every struct")
    p.add_argument("path", nargs="?", default=".", help="Rust file or project root (default: .)")
    p.add_argument("-f", "--format", choices=FORMATS, default="table", help="Output format (default: table)")
    p.add_argument("-m", "--metrics", type=_metric_list, default=parse_metric_list("all"),
                   help="Comma-separated metrics: lcom,cbo,wmc or all (default: all)")
    p.add_argument("--exclude", action="append", metavar="PATTERN",
                   help="Exclude matching paths (gitignore-style glob or substring); repeatable")
    p.add_argument("-o", "--output", help="Write the report to a file instead of stdout")
    p.add_argument("-j", "--jobs", type=int, default=1, help="Worker threads (default: 1)")
    p.add_argument("--no-gitignore", action="store_true", help="Don't apply .gitignore")

    # inspect
    p = sub.add_parser("inspect", help="Show the extracted model of one struct")
    p.add_argument("type_name", metavar="TYPE", help="Struct name")
    p.add_argument("path", nargs="?", default=".", help="Rust file or project root (default: .)")
    p.add_argument("--json", action="store_true", help="Emit JSON")
    p.add_argument("--exclude", action="append", metavar="PATTERN", help="Exclude matching paths")
    p.add_argument("--no-gitignore", action="store_true", help="Don't apply .gitignore")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger("rust_arch_metrics").setLevel(logging.DEBUG)

    handlers = {
        "analyze": cmd_analyze,
        "inspect": cmd_inspect,
    }

    sys.exit(handlers[args.command](args))


if __name__ == "__main__":
    main()
