"""Version-overlap policy for deprecated schemas.

A deprecated schema must stay valid for at least one full minor release
before removal, so consumers have a guaranteed window to migrate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from schema_registry_policy.deprecation import DeprecationMetadata
from schema_registry_policy.models import CompatibilityIssue, IssueKind, error
from schema_registry_policy.versioning import minor_distance, suggest_removal_version

REQUIRED_MINOR_OVERLAP: int = 1


@dataclass(frozen=True)
class OverlapResult:
    """Outcome of comparing a deprecation version with a removal version."""

    valid: bool
    actual_overlap: Optional[int]
    required_overlap: int
    suggested_removal: Optional[str]


def validate_version_overlap(
    deprecated_in: str,
    removal_in: str,
    required_overlap: int = REQUIRED_MINOR_OVERLAP,
) -> OverlapResult:
    """Compute the overlap between two versions and whether it suffices.

    ``suggested_removal`` is only populated when the overlap is computable
    but too short.
    """
    distance = minor_distance(deprecated_in, removal_in)
    if distance is None:
        return OverlapResult(
            valid=False,
            actual_overlap=None,
            required_overlap=required_overlap,
            suggested_removal=None,
        )
    if distance < required_overlap:
        return OverlapResult(
            valid=False,
            actual_overlap=distance,
            required_overlap=required_overlap,
            suggested_removal=suggest_removal_version(deprecated_in, required_overlap),
        )
    return OverlapResult(
        valid=True,
        actual_overlap=distance,
        required_overlap=required_overlap,
        suggested_removal=None,
    )


def check_version_overlap(
    subject: str,
    metadata: DeprecationMetadata,
    required_overlap: int = REQUIRED_MINOR_OVERLAP,
) -> List[CompatibilityIssue]:
    """Apply the overlap policy to a deprecation record.

    Raises:
        ValueError: If either ``deprecatedInVersion`` or
            ``removalPlannedInVersion`` is missing. Callers report the
            missing timeline themselves and skip this check.
    """
    dep = metadata.deprecated_in_version
    rem = metadata.removal_planned_in_version
    if dep is None or rem is None:
        raise ValueError(
            f"{subject}: version overlap needs both deprecatedInVersion "
            f"and removalPlannedInVersion"
        )

    result = validate_version_overlap(dep, rem, required_overlap)
    if result.actual_overlap is None:
        return [error(
            subject,
            IssueKind.INVALID_VERSION,
            "Invalid version format in deprecation metadata "
            f"(deprecatedInVersion={dep!r}, removalPlannedInVersion={rem!r})",
            details={"deprecated_version": dep, "removal_version": rem},
        )]
    if not result.valid:
        return [error(
            subject,
            IssueKind.INSUFFICIENT_OVERLAP,
            f"Insufficient version overlap: only {result.actual_overlap} minor "
            f"version(s) between {dep} and {rem} (minimum: {required_overlap}); "
            f"suggested removal version: {result.suggested_removal}",
            value=rem,
            details={
                "deprecated_version": dep,
                "removal_version": rem,
                "actual_overlap": result.actual_overlap,
                "required_overlap": required_overlap,
                "suggested_removal": result.suggested_removal,
            },
        )]
    return []
