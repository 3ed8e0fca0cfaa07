"""Architecture label extraction for bundle entries."""

from typing import Any, Dict, Mapping, Optional, Tuple

from index_arch_sorter.codes import ARCH_LABEL_PREFIX, Architecture, CSV_METADATA_PROPERTY, SUPPORTED
from index_arch_sorter.models import ArchitectureSupport, OperatorIndexEntry

# (label key, architecture, ArchitectureSupport status field), in report order.
# Iterating this table, never the labels mapping, keeps output order fixed.
ARCH_LABELS: Tuple[Tuple[str, Architecture, str], ...] = tuple(
    (ARCH_LABEL_PREFIX + arch.value, arch, arch.value) for arch in Architecture
)


def extract_arch_labels(labels: Mapping[str, Any]) -> Dict[str, str]:
    """Map recognized architecture labels to status fields.

    Only string values are taken, verbatim. Unknown label keys and
    non-string values are ignored.
    """
    statuses: Dict[str, str] = {}
    for label, _arch, field in ARCH_LABELS:
        value = labels.get(label)
        if isinstance(value, str):
            statuses[field] = value
    return statuses


def extract_architecture_support(entry: OperatorIndexEntry) -> Optional[ArchitectureSupport]:
    """Build the architecture support record for a bundle entry.

    Every ``olm.csv.metadata`` property is visited in order; a property whose
    value or labels are not objects is skipped. When several metadata
    properties label the same architecture, the last one wins.

    Returns None when no architecture is labeled "supported".
    """
    statuses: Dict[str, str] = {}
    for prop in entry.properties:
        if prop.type != CSV_METADATA_PROPERTY:
            continue
        labels = prop.labels()
        if labels is None:
            continue
        statuses.update(extract_arch_labels(labels))

    supported = tuple(
        arch.value for _label, arch, field in ARCH_LABELS
        if statuses.get(field) == SUPPORTED
    )
    if not supported:
        return None

    return ArchitectureSupport(
        operator_name=entry.name,
        bundle_name=entry.name,
        package=entry.package,
        image=entry.image,
        supported_architectures=supported,
        **statuses,
    )
