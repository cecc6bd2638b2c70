"""Core issue/report models and exceptions for schema-registry-policy."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Severity(str, Enum):
    """Severity of a compatibility issue."""

    WARNING = "warning"
    ERROR = "error"


class IssueKind(str, Enum):
    """Tag identifying which rule produced an issue."""

    # Schema diff policy
    REQUIRED_FIELD_ADDED = "required-field-added"
    REQUIRED_FIELD_REMOVED = "required-field-removed"
    PROPERTY_REMOVED = "property-removed"
    ENUM_NARROWED = "enum-narrowed"

    # Registry comparators
    TOPIC_CHANGED = "topic-changed"
    TOPIC_MAPPING_REMOVED = "topic-mapping-removed"
    VENUE_REMOVED = "venue-removed"

    # Deprecation metadata
    DEPRECATION_REASON_MISSING = "deprecation-reason-missing"
    DEPRECATION_VERSION_MISSING = "deprecation-version-missing"
    REPLACEMENT_MISSING = "replacement-missing"
    MIGRATION_GUIDE_MISSING = "migration-guide-missing"
    REMOVAL_TIMELINE_MISSING = "removal-timeline-missing"
    DESCRIPTION_MARKER_MISSING = "description-marker-missing"
    INVALID_DATE = "invalid-date"
    OVERDUE_REMOVAL = "overdue-removal"
    INVALID_DEPRECATION_METADATA = "invalid-deprecation-metadata"

    # Version overlap
    INVALID_VERSION = "invalid-version"
    INSUFFICIENT_OVERLAP = "insufficient-overlap"
    OVERLAP_UNVERIFIABLE = "overlap-unverifiable"

    # Loading
    ARTIFACT_LOAD_ERROR = "artifact-load-error"

    # Structural validation
    SCHEMA_INVALID = "schema-invalid"
    SCHEMA_STRUCTURE = "schema-structure"
    SCHEMA_DRAFT = "schema-draft"
    SCHEMA_ID_PREFIX = "schema-id-prefix"
    UNKNOWN_VENUE = "unknown-venue"
    EXAMPLE_INVALID = "example-invalid"
    EXAMPLE_SCHEMA_UNKNOWN = "example-schema-unknown"

    # Release hygiene
    CHANGELOG_MISSING = "changelog-missing"
    CHANGELOG_NOT_UPDATED = "changelog-not-updated"
    VERSION_MISMATCH = "version-mismatch"


class CompatibilityIssue(BaseModel):
    """A single finding produced by one of the policy checks."""

    model_config = ConfigDict(frozen=True)

    severity: Severity = Field(..., description="Whether the issue fails the run")
    subject: str = Field(
        ..., min_length=1, description="Schema or registry identifier"
    )
    kind: IssueKind = Field(..., description="Rule that produced the issue")
    message: str = Field(..., min_length=1, description="Human-readable summary")
    field: Optional[str] = Field(
        None, description="Property or metadata field the issue refers to"
    )
    value: Optional[Any] = Field(
        None, description="Literal value the issue refers to (e.g. removed enum value)"
    )
    details: Dict[str, Any] = Field(
        default_factory=dict, description="Rule-specific structured data"
    )

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.subject}: {self.message}"


def error(
    subject: str,
    kind: IssueKind,
    message: str,
    **extra: Any,
) -> CompatibilityIssue:
    """Build an error-severity issue."""
    return CompatibilityIssue(
        severity=Severity.ERROR, subject=subject, kind=kind, message=message, **extra
    )


def warning(
    subject: str,
    kind: IssueKind,
    message: str,
    **extra: Any,
) -> CompatibilityIssue:
    """Build a warning-severity issue."""
    return CompatibilityIssue(
        severity=Severity.WARNING, subject=subject, kind=kind, message=message, **extra
    )


class CompatibilityReport(BaseModel):
    """Terminal artifact of one run: ordered issues plus summary counts.

    The run fails if and only if at least one issue has error severity.
    """

    model_config = ConfigDict(frozen=True)

    issues: Tuple[CompatibilityIssue, ...] = Field(
        default=(), description="Issues in the order they were found"
    )
    base_ref: Optional[str] = Field(
        None, description="Reference the current registry was diffed against"
    )
    skipped_reason: Optional[str] = Field(
        None, description="Why the diff phase was skipped, if it was"
    )

    @property
    def errors(self) -> Tuple[CompatibilityIssue, ...]:
        return tuple(i for i in self.issues if i.severity == Severity.ERROR)

    @property
    def warnings(self) -> Tuple[CompatibilityIssue, ...]:
        return tuple(i for i in self.issues if i.severity == Severity.WARNING)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def error_count(self) -> int:
        return len(self.errors)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> str:
        return "fail" if self.errors else "pass"

    @property
    def passed(self) -> bool:
        return not self.errors

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def merge(self, other: "CompatibilityReport") -> "CompatibilityReport":
        """Concatenate two reports, keeping this report's reference metadata."""
        return CompatibilityReport(
            issues=self.issues + other.issues,
            base_ref=self.base_ref or other.base_ref,
            skipped_reason=self.skipped_reason or other.skipped_reason,
        )

    def __repr__(self) -> str:
        return (
            f"CompatibilityReport(status={self.status}, "
            f"errors={self.error_count}, warnings={self.warning_count})"
        )


# Custom Exceptions
class SchemaRegistryPolicyError(Exception):
    """Base exception for all library errors."""
    pass


class ArtifactLoadError(SchemaRegistryPolicyError):
    """A single registry artifact could not be read or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load {path}: {reason}")


class HistoryUnavailableError(SchemaRegistryPolicyError):
    """The version-control history provider cannot be used at all."""
    pass


class RegistryUnavailableError(SchemaRegistryPolicyError):
    """The registry root directory does not exist or is unreadable."""
    pass
