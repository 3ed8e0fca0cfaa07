"""Tests for catalog entry and architecture support models."""

import pytest
from pydantic import ValidationError

from index_arch_sorter.models import ArchitectureSupport, OperatorIndexEntry, Property


class TestOperatorIndexEntry:

    def test_schema_alias(self):
        entry = OperatorIndexEntry.model_validate({"schema": "olm.bundle", "name": "a.v1"})
        assert entry.schema_ == "olm.bundle"
        assert entry.is_bundle

    def test_defaults(self):
        entry = OperatorIndexEntry.model_validate({})
        assert entry.schema_ == ""
        assert entry.name == ""
        assert entry.package == ""
        assert entry.image == ""
        assert entry.properties == []
        assert entry.related_images == []
        assert not entry.is_bundle

    def test_nulls_decode_as_empty(self):
        entry = OperatorIndexEntry.model_validate({
            "schema": "olm.bundle",
            "name": None,
            "image": None,
            "properties": None,
            "relatedImages": None,
        })
        assert entry.name == ""
        assert entry.image == ""
        assert entry.properties == []
        assert entry.related_images == []

    def test_related_images(self):
        entry = OperatorIndexEntry.model_validate({
            "schema": "olm.bundle",
            "relatedImages": [{"name": "operator", "image": "quay.io/a/op@sha256:abc"}],
        })
        assert entry.related_images[0].image == "quay.io/a/op@sha256:abc"

    def test_related_image_nulls_decode_as_empty(self):
        entry = OperatorIndexEntry.model_validate({
            "schema": "olm.bundle",
            "relatedImages": [{"name": None, "image": None}],
        })
        assert entry.related_images[0].name == ""
        assert entry.related_images[0].image == ""

    def test_unknown_fields_ignored(self):
        entry = OperatorIndexEntry.model_validate({"schema": "olm.channel", "entries": [{"name": "x"}]})
        assert entry.schema_ == "olm.channel"

    @pytest.mark.parametrize("data", [
        {"name": 5},
        {"package": ["a"]},
        {"properties": "olm.csv.metadata"},
        {"properties": ["not-an-object"]},
    ])
    def test_wrong_shapes_rejected(self, data):
        with pytest.raises(ValidationError):
            OperatorIndexEntry.model_validate(data)


class TestProperty:

    def test_labels_accessor(self):
        prop = Property(type="olm.csv.metadata", value={"labels": {"k": "v"}, "annotations": {}})
        assert prop.as_mapping() == {"labels": {"k": "v"}, "annotations": {}}
        assert prop.labels() == {"k": "v"}

    @pytest.mark.parametrize("value", [None, 3, "text", [1], {"labels": None}, {"labels": "k=v"}])
    def test_wrong_shapes_return_none(self, value):
        assert Property(type="olm.csv.metadata", value=value).labels() is None

    def test_as_mapping_non_dict(self):
        assert Property(type="olm.gvk", value=[{"group": "x"}]).as_mapping() is None

    def test_value_optional(self):
        prop = Property.model_validate({"type": "olm.package.required"})
        assert prop.value is None


class TestArchitectureSupport:

    def _record(self, **kwargs) -> ArchitectureSupport:
        base = dict(operator_name="a.v1", bundle_name="a.v1", package="a")
        base.update(kwargs)
        return ArchitectureSupport(**base)

    def test_status_for_is_case_insensitive(self):
        record = self._record(ppc64le="supported")
        assert record.status_for("PPC64LE") == "supported"
        assert record.supports("ppc64le")

    def test_status_for_unknown_arch(self):
        record = self._record(amd64="supported")
        assert record.status_for("riscv64") == ""
        assert not record.supports("riscv64")

    def test_to_json_dict_omits_empty_statuses(self):
        record = self._record(
            image="quay.io/a:v1",
            supported_architectures=("amd64",),
            amd64="supported",
            s390x="unsupported",
        )
        assert record.to_json_dict() == {
            "operator_name": "a.v1",
            "bundle_name": "a.v1",
            "package": "a",
            "image": "quay.io/a:v1",
            "supported_architectures": ["amd64"],
            "amd64": "supported",
            "s390x": "unsupported",
        }

    def test_frozen(self):
        record = self._record()
        with pytest.raises(ValidationError):
            record.package = "b"
