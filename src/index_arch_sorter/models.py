"""Pydantic models for operator index entries and architecture support records."""

from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

from index_arch_sorter.codes import Architecture, BUNDLE_SCHEMA, SUPPORTED


class Property(BaseModel):
    """A typed bundle property.

    The shape of ``value`` depends on ``type``: a mapping for ``olm.package``
    and ``olm.csv.metadata``, but catalogs also carry scalars and lists here.
    It is kept unstructured and read through the accessors below, which
    return None instead of raising when the expected shape is absent.
    """
    type: str = ""
    value: Any = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("type", mode="before")
    @classmethod
    def _null_type(cls, v: Any) -> Any:
        return "" if v is None else v

    def as_mapping(self) -> Optional[Dict[str, Any]]:
        """Return ``value`` if it is a JSON object, else None."""
        if isinstance(self.value, dict):
            return self.value
        return None

    def labels(self) -> Optional[Dict[str, Any]]:
        """Return the nested ``value.labels`` object, or None if either level is not a mapping."""
        mapping = self.as_mapping()
        if mapping is None:
            return None
        labels = mapping.get("labels")
        if isinstance(labels, dict):
            return labels
        return None


class RelatedImage(BaseModel):
    name: str = ""
    image: str = ""

    model_config = ConfigDict(extra="ignore")

    @field_validator("name", "image", mode="before")
    @classmethod
    def _null_string(cls, v: Any) -> Any:
        return "" if v is None else v


class OperatorIndexEntry(BaseModel):
    """One decoded value from the operator index stream.

    Bundles, packages and channels share this shape; ``schema`` tells them apart.
    Missing or null scalar fields decode to empty strings and missing or null
    lists to empty lists. Wrongly typed fields fail validation.
    """
    schema_: str = Field(default="", alias="schema")
    name: str = ""
    package: str = ""
    image: str = ""
    properties: List[Property] = Field(default_factory=list)
    related_images: List[RelatedImage] = Field(default_factory=list, alias="relatedImages")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("schema_", "name", "package", "image", mode="before")
    @classmethod
    def _null_string(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("properties", "related_images", mode="before")
    @classmethod
    def _null_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def is_bundle(self) -> bool:
        return self.schema_ == BUNDLE_SCHEMA


class ArchitectureSupport(BaseModel):
    """Architecture support extracted from a single bundle.

    ``operator_name`` and ``bundle_name`` both carry the bundle name; both are
    kept so JSON consumers of the original report keep working.

    Per-architecture fields hold the raw label value ("" when unlabeled).
    ``supported_architectures`` lists exactly the architectures whose raw
    value is "supported", in Architecture order.
    """
    operator_name: str
    bundle_name: str
    package: str = ""
    image: str = ""
    supported_architectures: Tuple[str, ...] = ()
    amd64: str = ""
    arm64: str = ""
    ppc64le: str = ""
    s390x: str = ""

    model_config = ConfigDict(frozen=True)

    def status_for(self, arch: str) -> str:
        """Raw label value for ``arch`` (case-insensitive), "" if unlabeled or unknown."""
        try:
            field = Architecture(arch.lower()).value
        except ValueError:
            return ""
        return getattr(self, field)

    def supports(self, arch: str) -> bool:
        return self.status_for(arch) == SUPPORTED

    def to_json_dict(self) -> Dict[str, Any]:
        """Report JSON shape: empty per-architecture statuses are omitted."""
        data = self.model_dump()
        data["supported_architectures"] = list(self.supported_architectures)
        for arch in Architecture:
            if not data[arch.value]:
                del data[arch.value]
        return data
