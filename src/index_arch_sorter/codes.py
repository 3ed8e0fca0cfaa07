"""Catalog constants for index-arch-sorter.

These constants prevent stringly-typed schema, property and label names
from drifting between the parser, the extractor and the report layer.
"""

from enum import Enum


class Architecture(str, Enum):
    """CPU architectures reported on, in canonical report order."""

    AMD64 = "amd64"
    ARM64 = "arm64"
    PPC64LE = "ppc64le"
    S390X = "s390x"


# File-Based Catalog "schema" value of bundle entries
BUNDLE_SCHEMA = "olm.bundle"

# Property type carrying the CSV metadata (annotations, labels, ...)
CSV_METADATA_PROPERTY = "olm.csv.metadata"

ARCH_LABEL_PREFIX = "operatorframework.io/arch."

# Only this exact label value counts as support
SUPPORTED = "supported"

VALID_ARCHITECTURES = tuple(arch.value for arch in Architecture)

# Report formats accepted by the CLI, default first
OUTPUT_FORMATS = ("table", "json", "csv")
