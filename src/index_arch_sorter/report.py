"""Filtering, sorting and rendering of architecture support reports."""

import csv
import io
import json
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel

from index_arch_sorter.codes import Architecture, OUTPUT_FORMATS, SUPPORTED, VALID_ARCHITECTURES
from index_arch_sorter.models import ArchitectureSupport

TABLE_HEADER = ("PACKAGE", "BUNDLE NAME", "AMD64", "ARM64", "PPC64LE", "S390X")
CSV_HEADER = ("package", "bundle_name", "amd64", "arm64", "ppc64le", "s390x")

# Spaces between table columns
TABLE_PADDING = 2


def is_valid_architecture(arch: str) -> bool:
    return arch.lower() in VALID_ARCHITECTURES


def filter_by_operator_name(
    results: Iterable[ArchitectureSupport], operator_name: str
) -> List[ArchitectureSupport]:
    """Keep records whose package or bundle name contains ``operator_name`` (case-insensitive)."""
    needle = operator_name.lower()
    return [
        r for r in results
        if needle in r.package.lower() or needle in r.bundle_name.lower()
    ]


def filter_by_architecture(
    results: Iterable[ArchitectureSupport], arch: str
) -> List[ArchitectureSupport]:
    """Keep records that support ``arch``. An unknown architecture matches nothing."""
    return [r for r in results if r.supports(arch)]


def sort_results(results: Iterable[ArchitectureSupport]) -> List[ArchitectureSupport]:
    """Sort by package name, then bundle name."""
    return sorted(results, key=lambda r: (r.package, r.bundle_name))


def format_support(status: str) -> str:
    if status == SUPPORTED:
        return "✓"
    if status == "":
        return "-"
    return status


def _status_row(result: ArchitectureSupport) -> List[str]:
    return [result.status_for(arch.value) for arch in Architecture]


def render_table(results: Sequence[ArchitectureSupport]) -> str:
    """Render an aligned text table, one bundle per row."""
    rows: List[Sequence[str]] = [
        TABLE_HEADER,
        tuple("-" * len(title) for title in TABLE_HEADER),
    ]
    for result in results:
        rows.append([result.package, result.bundle_name] + [format_support(s) for s in _status_row(result)])

    # The last column is not padded
    widths = [max(len(row[i]) for row in rows) for i in range(len(TABLE_HEADER) - 1)]
    lines = []
    for row in rows:
        cells = [cell.ljust(width + TABLE_PADDING) for cell, width in zip(row, widths)]
        lines.append("".join(cells) + row[-1])
    return "\n".join(lines) + "\n"


def render_json(results: Sequence[ArchitectureSupport]) -> str:
    """Render an indented JSON array of records."""
    payload = [r.to_json_dict() for r in results]
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def render_csv(results: Sequence[ArchitectureSupport]) -> str:
    """Render CSV with raw status values."""
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for result in results:
        writer.writerow([result.package, result.bundle_name] + _status_row(result))
    return out.getvalue()


RENDERERS = {
    "table": render_table,
    "json": render_json,
    "csv": render_csv,
}


def render(results: Sequence[ArchitectureSupport], output_format: str) -> str:
    """Render with the named format. Raises ValueError for an unknown format."""
    renderer = RENDERERS.get(output_format)
    if renderer is None:
        raise ValueError(
            f"unknown output format {output_format!r}; expected one of: {', '.join(OUTPUT_FORMATS)}"
        )
    return renderer(results)


class ReportSummary(BaseModel):
    """Aggregate counts over a result set."""
    unique_packages: int
    total_bundles: int
    arch_counts: Dict[str, int]  # architecture -> bundles supporting it


def summarize(results: Iterable[ArchitectureSupport]) -> ReportSummary:
    packages = set()
    counts = {arch: 0 for arch in VALID_ARCHITECTURES}
    total = 0
    for result in results:
        total += 1
        packages.add(result.package)
        for arch in VALID_ARCHITECTURES:
            if result.supports(arch):
                counts[arch] += 1
    return ReportSummary(unique_packages=len(packages), total_bundles=total, arch_counts=counts)


def render_summary(summary: ReportSummary, filter_arch: Optional[str] = None) -> str:
    """Render the summary block printed after the report."""
    lines = ["", "--- Summary ---"]
    arch_filter = filter_arch.lower() if filter_arch else ""
    if arch_filter:
        lines.append(f"Filtered by architecture: {arch_filter.upper()}")
    lines.append(f"Total unique packages: {summary.unique_packages}")
    lines.append(f"Total bundles: {summary.total_bundles}")
    lines.append("")

    if not arch_filter:
        lines.append("Architecture Support:")
        for arch in VALID_ARCHITECTURES:
            label = f"{arch.upper()}:"
            lines.append(f"  {label:<8} {summary.arch_counts[arch]} bundles")
    else:
        lines.append(f"Note: All bundles shown support {arch_filter.upper()} architecture")
        for arch in VALID_ARCHITECTURES:
            count = summary.arch_counts[arch]
            if arch != arch_filter and count > 0:
                label = f"{arch.upper()}:"
                lines.append(f"  Also support {label:<8} {count} bundles")
    return "\n".join(lines) + "\n"
