"""Pytest configuration and shared catalog builders.

No sys.path hacks - tests should import from the installed index_arch_sorter package.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest


def make_bundle(
    name: str,
    package: str,
    labels: Optional[Dict[str, Any]] = None,
    image: str = "",
    extra_properties: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """Build an olm.bundle catalog entry with an optional CSV metadata label set."""
    properties: List[Dict[str, Any]] = [
        {"type": "olm.package", "value": {"packageName": package, "version": "1.0.0"}},
    ]
    if labels is not None:
        properties.append({"type": "olm.csv.metadata", "value": {"labels": labels}})
    properties.extend(extra_properties or [])
    entry: Dict[str, Any] = {
        "schema": "olm.bundle",
        "name": name,
        "package": package,
        "properties": properties,
    }
    if image:
        entry["image"] = image
    return entry


def arch_labels(**statuses: str) -> Dict[str, str]:
    """arch_labels(amd64="supported") -> {"operatorframework.io/arch.amd64": "supported"}"""
    return {f"operatorframework.io/arch.{arch}": value for arch, value in statuses.items()}


def catalog_text(*values: Any) -> str:
    """Serialize values the way opm render does: concatenated, indented JSON objects."""
    return "\n".join(v if isinstance(v, str) else json.dumps(v, indent=4, ensure_ascii=False) for v in values) + "\n"


@pytest.fixture
def write_index(tmp_path: Path):
    """Write a catalog file built from entries (dicts) and raw text fragments (str)."""
    def _write(*values: Any, name: str = "index.json") -> Path:
        path = tmp_path / name
        path.write_text(catalog_text(*values), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def sample_index(write_index) -> Path:
    """Small catalog: package + channel records, three labeled bundles, one unlabeled."""
    return write_index(
        {"schema": "olm.package", "name": "etcd", "defaultChannel": "stable"},
        {"schema": "olm.channel", "name": "stable", "package": "etcd",
         "entries": [{"name": "etcd.v0.9.4"}]},
        make_bundle("etcd.v0.9.4", "etcd", arch_labels(amd64="supported", s390x="supported"),
                    image="quay.io/example/etcd-bundle:v0.9.4"),
        make_bundle("amq-streams.v2.5.0", "amq-streams",
                    arch_labels(amd64="supported", arm64="supported", ppc64le="unsupported")),
        make_bundle("3scale-operator.v0.11.0", "3scale-operator",
                    arch_labels(amd64="supported", ppc64le="supported")),
        make_bundle("no-labels.v1.0.0", "no-labels"),
    )
