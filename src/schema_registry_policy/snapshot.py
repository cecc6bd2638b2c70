"""Immutable structural snapshots of schema documents."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from schema_registry_policy.deprecation import (
    DEPRECATION_EXTENSION_KEY,
    DeprecationMetadata,
)
from schema_registry_policy.models import ArtifactLoadError


class PropertyDescriptor(BaseModel):
    """Type facet of one declared property."""

    model_config = ConfigDict(frozen=True)

    type: Optional[Union[str, Tuple[str, ...]]] = Field(
        None, description="JSON Schema type keyword"
    )
    enum: Optional[Tuple[Any, ...]] = Field(
        None, description="Allowed literal values, in declaration order"
    )


class SchemaSnapshot(BaseModel):
    """Structural description of one schema artifact at one point in time."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1, description="Schema identifier")
    properties: Dict[str, PropertyDescriptor] = Field(
        default_factory=dict, description="Declared properties by name"
    )
    required: Tuple[str, ...] = Field(
        default=(), description="Names of required properties"
    )
    title: Optional[str] = Field(None, description="Schema title")
    description: Optional[str] = Field(None, description="Human-readable description")
    deprecation: Optional[DeprecationMetadata] = Field(
        None, description="Parsed x-deprecated block, if any"
    )
    deprecation_error: Optional[str] = Field(
        None, description="Why the x-deprecated block could not be parsed"
    )

    @property
    def is_deprecated(self) -> bool:
        return self.deprecation is not None and self.deprecation.deprecated

    @classmethod
    def from_document(cls, identifier: str, document: Any) -> "SchemaSnapshot":
        """Build a snapshot from a decoded JSON Schema document.

        An ``x-deprecated`` block that does not validate leaves
        ``deprecation`` unset and records the reason in
        ``deprecation_error``; the structural facets are still captured.

        Raises:
            ArtifactLoadError: If the document is not an object, or its
                ``properties``/``required`` have the wrong shape.
        """
        if not isinstance(document, Mapping):
            raise ArtifactLoadError(identifier, "schema document is not a JSON object")

        raw_properties = document.get("properties") or {}
        if not isinstance(raw_properties, Mapping):
            raise ArtifactLoadError(identifier, "'properties' is not an object")

        properties: Dict[str, PropertyDescriptor] = {}
        for name, facet in raw_properties.items():
            properties[name] = _descriptor(facet)

        raw_required = document.get("required") or []
        if not isinstance(raw_required, list) or not all(
            isinstance(r, str) for r in raw_required
        ):
            raise ArtifactLoadError(identifier, "'required' is not a list of strings")

        deprecation: Optional[DeprecationMetadata] = None
        deprecation_error: Optional[str] = None
        raw_deprecation = document.get(DEPRECATION_EXTENSION_KEY)
        if raw_deprecation is not None:
            try:
                deprecation = DeprecationMetadata.model_validate(raw_deprecation)
            except PydanticValidationError as e:
                deprecation_error = (
                    f"invalid {DEPRECATION_EXTENSION_KEY} block ({_error_fields(e)})"
                )

        description = document.get("description")
        title = document.get("title")
        try:
            return cls(
                identifier=identifier,
                properties=properties,
                required=tuple(raw_required),
                title=title if isinstance(title, str) else None,
                description=description if isinstance(description, str) else None,
                deprecation=deprecation,
                deprecation_error=deprecation_error,
            )
        except PydanticValidationError as e:
            raise ArtifactLoadError(
                identifier or "<unnamed>", f"invalid schema ({_error_fields(e)})"
            ) from e

    @classmethod
    def from_json(cls, identifier: str, content: str) -> "SchemaSnapshot":
        """Decode JSON text and build a snapshot.

        Raises:
            ArtifactLoadError: On invalid JSON or an invalid document shape.
        """
        try:
            document = json.loads(content)
        except json.JSONDecodeError as e:
            raise ArtifactLoadError(identifier, f"invalid JSON: {e}") from e
        return cls.from_document(identifier, document)


def _error_fields(exc: PydanticValidationError) -> str:
    return ", ".join(
        ".".join(str(loc) for loc in err["loc"]) or "$" for err in exc.errors()
    )


def _descriptor(facet: Any) -> PropertyDescriptor:
    # Boolean and non-object subschemas carry no type facets.
    if not isinstance(facet, Mapping):
        return PropertyDescriptor()
    raw_type = facet.get("type")
    type_: Optional[Union[str, Tuple[str, ...]]] = None
    if isinstance(raw_type, str):
        type_ = raw_type
    elif isinstance(raw_type, list):
        type_ = tuple(str(t) for t in raw_type)
    raw_enum = facet.get("enum")
    enum: Optional[Tuple[Any, ...]] = None
    if isinstance(raw_enum, list):
        enum = tuple(raw_enum)
    return PropertyDescriptor(type=type_, enum=enum)


def schema_name_from_filename(filename: str) -> str:
    """``order_created.schema.json`` -> ``order_created``."""
    for suffix in (".schema.json", ".json"):
        if filename.endswith(suffix):
            # ".json" alone names nothing; keep the file name.
            return filename[: -len(suffix)] or filename
    return filename


def enum_values(snapshot: SchemaSnapshot, property_name: str) -> Optional[List[Any]]:
    """Enum literals declared for a property, or None when it has no enum."""
    descriptor = snapshot.properties.get(property_name)
    if descriptor is None or descriptor.enum is None:
        return None
    return list(descriptor.enum)
