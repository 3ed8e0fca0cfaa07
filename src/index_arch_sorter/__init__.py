"""index-arch-sorter: CPU architecture support report for operator index catalogs."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("index-arch-sorter")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from index_arch_sorter.codes import Architecture, VALID_ARCHITECTURES
from index_arch_sorter.models import ArchitectureSupport, OperatorIndexEntry, Property
from index_arch_sorter.parser import (
    IndexReadError,
    ParseResult,
    decode,
    extract_architecture_support,
    parse_operator_index,
    parse_stream,
)

__all__ = [
    "__version__",
    "Architecture",
    "VALID_ARCHITECTURES",
    "ArchitectureSupport",
    "OperatorIndexEntry",
    "Property",
    "IndexReadError",
    "ParseResult",
    "decode",
    "extract_architecture_support",
    "parse_operator_index",
    "parse_stream",
]
