"""Deprecation metadata contracts and lifecycle validation.

Sections:
    1. Constants
    2. DeprecationMetadata model (the ``x-deprecated`` schema extension)
    3. Date handling
    4. Validation and urgency
    5. Reporting models and recommendations
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schema_registry_policy.models import (
    CompatibilityIssue,
    IssueKind,
    error,
    warning,
)

logger = logging.getLogger("schema_registry_policy.deprecation")

# ── Section 1: Constants ─────────────────────────────────────────────────────

DEPRECATION_EXTENSION_KEY: str = "x-deprecated"

# Keyword a deprecated schema's description must contain.
DEPRECATION_MARKER: str = "DEPRECATED"

URGENCY_WINDOW_DAYS: int = 30

# Extended ISO 8601 calendar date (``YYYY-MM-DD``) at the start of a value.
_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}(?:$|[Tt ])")

Level = Literal["low", "medium", "high"]

# ── Section 2: DeprecationMetadata ───────────────────────────────────────────


class DeprecationMetadata(BaseModel):
    """Deprecation lifecycle metadata attached to a schema.

    Only ``reason`` is mandatory once ``deprecated`` is true; everything else
    is advisory. Dates are kept as raw strings so that malformed values
    surface as validation issues rather than load failures.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    deprecated: bool = Field(False, description="Whether the schema is deprecated")
    deprecated_in_version: Optional[str] = Field(
        None,
        alias="deprecatedInVersion",
        description="Release that announced the deprecation (e.g. 'v1.2.0')",
    )
    removal_planned_in_version: Optional[str] = Field(
        None,
        alias="removalPlannedInVersion",
        description="Release the schema will be removed in",
    )
    reason: Optional[str] = Field(None, description="Why the schema is deprecated")
    replaced_by: Optional[str] = Field(
        None, alias="replacedBy", description="Identifier of the replacement schema"
    )
    migration_guide: Optional[str] = Field(
        None, alias="migrationGuide", description="URL or path of the migration guide"
    )
    deprecation_date: Optional[str] = Field(
        None, alias="deprecationDate", description="ISO 8601 date of deprecation"
    )
    planned_removal_date: Optional[str] = Field(
        None, alias="plannedRemovalDate", description="ISO 8601 date of planned removal"
    )
    contact: Optional[str] = Field(None, description="Owner to contact about migration")
    urgency: Level = Field("medium", description="Reporting priority")
    impact_level: Level = Field(
        "medium", alias="impactLevel", description="Expected consumer impact"
    )

    @field_validator(
        "deprecated_in_version",
        "removal_planned_in_version",
        "reason",
        "replaced_by",
        "migration_guide",
        "deprecation_date",
        "planned_removal_date",
        "contact",
        mode="before",
    )
    @classmethod
    def _scalar_as_text(cls, v: object) -> object:
        # JSON scalars become text; the date and version rules judge the format.
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, (int, float)):
            return str(v)
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("urgency", "impact_level", mode="before")
    @classmethod
    def _default_level(cls, v: object) -> object:
        if v is None or v == "":
            return "medium"
        return v

    @property
    def has_version_timeline(self) -> bool:
        return (
            self.deprecated_in_version is not None
            and self.removal_planned_in_version is not None
        )

    @property
    def planned_removal(self) -> Optional[str]:
        """Removal version if known, else removal date."""
        return self.removal_planned_in_version or self.planned_removal_date


# ── Section 3: Date handling ─────────────────────────────────────────────────


def parse_date(value: str) -> Optional[datetime]:
    """Parse an ISO 8601 date or date-time into an aware UTC datetime.

    A bare date means midnight UTC; a naive date-time is taken as UTC.
    Returns None when the string is not a valid calendar date in the
    extended ``YYYY-MM-DD`` form.
    """
    text = value.strip()
    if not _ISO_DATE_RE.match(text):
        return None
    try:
        return datetime.combine(date.fromisoformat(text), time(0), tzinfo=timezone.utc)
    except ValueError:
        pass
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def ensure_aware(moment: datetime) -> datetime:
    """Treat a naive datetime as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


# ── Section 4: Validation and urgency ────────────────────────────────────────


def validate_deprecation(
    subject: str,
    metadata: DeprecationMetadata,
    now: datetime,
    description: Optional[str] = None,
) -> List[CompatibilityIssue]:
    """Check a deprecated schema's metadata for completeness and timeliness.

    Args:
        subject: Schema identifier used on every produced issue.
        metadata: Parsed ``x-deprecated`` block.
        now: Current wall-clock time (aware).
        description: Schema description to check for the deprecation
            marker. None skips that check.

    Returns:
        Issues in a fixed order. Empty when the schema is not deprecated.
    """
    if not metadata.deprecated:
        return []

    now = ensure_aware(now)
    issues: List[CompatibilityIssue] = []

    if metadata.reason is None:
        issues.append(error(
            subject,
            IssueKind.DEPRECATION_REASON_MISSING,
            "Missing required field 'reason' in x-deprecated",
            field="reason",
        ))
    if metadata.deprecated_in_version is None:
        issues.append(warning(
            subject,
            IssueKind.DEPRECATION_VERSION_MISSING,
            "Missing 'deprecatedInVersion' - when was this deprecated?",
            field="deprecatedInVersion",
        ))
    if metadata.replaced_by is None:
        issues.append(warning(
            subject,
            IssueKind.REPLACEMENT_MISSING,
            "No 'replacedBy' specified - what should users migrate to?",
            field="replacedBy",
        ))
    if metadata.migration_guide is None:
        issues.append(warning(
            subject,
            IssueKind.MIGRATION_GUIDE_MISSING,
            "No 'migrationGuide' - consider adding migration documentation",
            field="migrationGuide",
        ))
    if metadata.planned_removal_date is None and metadata.removal_planned_in_version is None:
        issues.append(warning(
            subject,
            IssueKind.REMOVAL_TIMELINE_MISSING,
            "No removal timeline specified - when will this be removed?",
        ))
    if description is not None and DEPRECATION_MARKER not in description:
        issues.append(warning(
            subject,
            IssueKind.DESCRIPTION_MARKER_MISSING,
            f"Schema description should include a {DEPRECATION_MARKER} warning",
            field="description",
        ))

    if metadata.deprecation_date is not None:
        if parse_date(metadata.deprecation_date) is None:
            issues.append(error(
                subject,
                IssueKind.INVALID_DATE,
                f"Invalid deprecationDate format: {metadata.deprecation_date!r}",
                field="deprecationDate",
                value=metadata.deprecation_date,
            ))

    if metadata.planned_removal_date is not None:
        removal = parse_date(metadata.planned_removal_date)
        if removal is None:
            issues.append(error(
                subject,
                IssueKind.INVALID_DATE,
                f"Invalid plannedRemovalDate format: {metadata.planned_removal_date!r}",
                field="plannedRemovalDate",
                value=metadata.planned_removal_date,
            ))
        elif removal < now:
            issues.append(error(
                subject,
                IssueKind.OVERDUE_REMOVAL,
                f"Planned removal date {metadata.planned_removal_date} has passed - "
                "remove schema or update date",
                field="plannedRemovalDate",
                value=metadata.planned_removal_date,
            ))

    return issues


def is_urgent(
    metadata: DeprecationMetadata,
    now: datetime,
    window_days: int = URGENCY_WINDOW_DAYS,
) -> bool:
    """True for high urgency, or a removal date within ``window_days`` of now."""
    if metadata.urgency == "high":
        return True
    if metadata.planned_removal_date is None:
        return False
    removal = parse_date(metadata.planned_removal_date)
    if removal is None:
        return False
    return removal - ensure_aware(now) <= timedelta(days=window_days)


# ── Section 5: Reporting models and recommendations ─────────────────────────


class DeprecationStatus(BaseModel):
    """Per-schema deprecation status for machine-readable reports."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    schema_name: str = Field(..., alias="schema", min_length=1)
    deprecated_in_version: Optional[str] = Field(None, alias="deprecatedInVersion")
    planned_removal: Optional[str] = Field(None, alias="plannedRemoval")
    reason: Optional[str] = None
    urgency: Level = "medium"
    replaced_by: Optional[str] = Field(None, alias="replacedBy")
    migration_guide: Optional[str] = Field(None, alias="migrationGuide")
    urgent: bool = False
    needs_attention: bool = Field(False, alias="needsAttention")

    @classmethod
    def from_metadata(
        cls,
        schema_name: str,
        metadata: DeprecationMetadata,
        now: datetime,
        window_days: int = URGENCY_WINDOW_DAYS,
    ) -> "DeprecationStatus":
        urgent = is_urgent(metadata, now, window_days)
        return cls(
            schema_name=schema_name,
            deprecated_in_version=metadata.deprecated_in_version,
            planned_removal=metadata.planned_removal,
            reason=metadata.reason,
            urgency=metadata.urgency,
            replaced_by=metadata.replaced_by,
            migration_guide=metadata.migration_guide,
            urgent=urgent,
            needs_attention=(
                metadata.migration_guide is None
                or metadata.replaced_by is None
                or urgent
            ),
        )


class Recommendation(BaseModel):
    """Follow-up action suggested for a deprecated schema."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["documentation", "clarification", "urgent"]
    priority: Literal["medium", "high", "critical"]
    schema_name: str = Field(..., alias="schema")
    action: str
    description: str


def build_recommendations(
    statuses: Sequence[DeprecationStatus],
) -> List[Recommendation]:
    """Derive follow-up actions from deprecation statuses, in schema order."""
    recommendations: List[Recommendation] = []
    for status in statuses:
        name = status.schema_name
        if status.migration_guide is None:
            recommendations.append(Recommendation(
                type="documentation",
                priority="medium",
                schema_name=name,
                action="Create migration guide",
                description=f"No migration guide available for {name}",
            ))
        if status.replaced_by is None:
            recommendations.append(Recommendation(
                type="clarification",
                priority="high",
                schema_name=name,
                action="Specify replacement",
                description=f"No replacement schema specified for {name}",
            ))
        if status.urgent:
            recommendations.append(Recommendation(
                type="urgent",
                priority="critical",
                schema_name=name,
                action="Immediate attention required",
                description=f"{name} removal is imminent - ensure migration is complete",
            ))
    logger.debug("Built %d recommendations", len(recommendations))
    return recommendations
