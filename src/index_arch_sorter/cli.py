"""index-arch-sorter CLI: report CPU architecture support of operator index bundles."""

import argparse
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path

from index_arch_sorter.codes import OUTPUT_FORMATS, VALID_ARCHITECTURES

DEFAULT_INDEX_FILE = "redhat-operator-index.json"


def _configure_logging(quiet: bool, verbose: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main():
    """Main CLI entry point for index-arch-sorter."""
    try:
        sorter_version = get_version("index-arch-sorter")
    except PackageNotFoundError:
        sorter_version = "dev"

    parser = argparse.ArgumentParser(
        prog="index-arch-sorter",
        description="Report CPU architecture support of the bundles in an operator index"
    )
    parser.add_argument("--version", action="version", version=f"index-arch-sorter {sorter_version}")
    parser.add_argument(
        "--file",
        type=Path,
        default=Path(DEFAULT_INDEX_FILE),
        help="Path to the operator index JSON file"
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default=OUTPUT_FORMATS[0],
        help="Output format: table, json, or csv"
    )
    parser.add_argument(
        "--arch",
        default="",
        help=f"Filter by architecture: {', '.join(VALID_ARCHITECTURES)}"
    )
    parser.add_argument(
        "--operator",
        "--operator-name",
        dest="operator",
        default="",
        help="Filter by operator/package name (partial match, case-insensitive)"
    )
    parser.add_argument(
        "--list-archs",
        action="store_true",
        help="List all available architectures and exit"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress and summary output."
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log decode statistics and per-entry diagnostics."
    )

    args = parser.parse_args()

    if args.list_archs:
        print("Available architectures:")
        for arch in VALID_ARCHITECTURES:
            print(f"  - {arch}")
        sys.exit(0)

    _configure_logging(args.quiet, args.verbose)

    # Lazy imports: --list-archs and --version do not need the parser stack
    from .parser import parse_operator_index, IndexReadError
    from .report import (
        filter_by_architecture,
        filter_by_operator_name,
        is_valid_architecture,
        render,
        render_summary,
        sort_results,
        summarize,
    )

    if args.arch and not is_valid_architecture(args.arch):
        print(f"Error: Invalid architecture '{args.arch}'", file=sys.stderr)
        print(f"Valid architectures are: {', '.join(VALID_ARCHITECTURES)}", file=sys.stderr)
        sys.exit(1)

    # Keep stdout machine-readable for json/csv
    progress_stream = sys.stdout if args.output_format == "table" else sys.stderr

    def progress(message: str = "") -> None:
        if not args.quiet:
            print(message, file=progress_stream)

    try:
        progress(f"Parsing operator index from: {args.file}")
        parsed = parse_operator_index(args.file)
        if parsed.entries_failed:
            progress(f"Processed {parsed.entries_processed} entries ({parsed.entries_failed} failed to parse)")
        else:
            progress(f"Processed {parsed.entries_processed} entries")
        results = parsed.results

        if args.operator:
            progress(f"Filtering by operator name: {args.operator}")
            results = filter_by_operator_name(results, args.operator)
            progress(f"Found {len(results)} bundles matching '{args.operator}'")

        if args.arch:
            arch = args.arch.upper()
            progress(f"Filtering by architecture: {arch}")
            before_arch_filter = len(results)
            results = filter_by_architecture(results, args.arch)
            progress(
                f"Found {len(results)} operator bundles supporting {arch} "
                f"(out of {before_arch_filter} bundles)"
            )
            progress()
        elif not args.operator:
            progress(f"Found {len(results)} operator bundles with architecture information")
            progress()

        results = sort_results(results)
        sys.stdout.write(render(results, args.output_format))

        if not args.quiet:
            progress_stream.write(render_summary(summarize(results), args.arch or None))
    except IndexReadError as e:
        print(f"Error parsing operator index: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
