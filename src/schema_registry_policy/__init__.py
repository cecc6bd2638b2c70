"""
schema-registry-policy: compatibility and deprecation policy for a JSON Schema registry.

This library diffs schema versions for breaking changes, validates deprecation
metadata and version-overlap windows, compares topic mappings and the venue
registry, and aggregates the findings into a pass/fail report for CI.

Example:
    >>> from schema_registry_policy import SchemaSnapshot, check_schema_compatibility
    >>> before = SchemaSnapshot.from_document("order", {"properties": {"a": {}}})
    >>> after = SchemaSnapshot.from_document("order", {"properties": {}})
    >>> [issue.kind.value for issue in check_schema_compatibility(before, after)]
    ['property-removed']
"""

__version__ = "1.0.0"

# Core models
from schema_registry_policy.models import (
    ArtifactLoadError,
    CompatibilityIssue,
    CompatibilityReport,
    HistoryUnavailableError,
    IssueKind,
    RegistryUnavailableError,
    SchemaRegistryPolicyError,
    Severity,
)

# Versions
from schema_registry_policy.versioning import (
    MAJOR_BUMP_DISTANCE,
    SemVer,
    compare_versions,
    minor_distance,
    parse_version,
    suggest_removal_version,
)

# Snapshots
from schema_registry_policy.snapshot import PropertyDescriptor, SchemaSnapshot

# Policies
from schema_registry_policy.diff_policy import check_schema_compatibility
from schema_registry_policy.deprecation import (
    DeprecationMetadata,
    DeprecationStatus,
    Recommendation,
    build_recommendations,
    is_urgent,
    validate_deprecation,
)
from schema_registry_policy.overlap import (
    REQUIRED_MINOR_OVERLAP,
    OverlapResult,
    check_version_overlap,
    validate_version_overlap,
)
from schema_registry_policy.registries import (
    check_schema_venues,
    check_topics_compatibility,
    check_venues_compatibility,
)
from schema_registry_policy.changelog import check_changelog
from schema_registry_policy.release import check_release_tag

# Orchestration
from schema_registry_policy.config import RegistryConfig
from schema_registry_policy.history import FileHistory, GitHistory, InMemoryHistory
from schema_registry_policy.report import DeprecationSummary
from schema_registry_policy.runner import RegistryCompatibilityRunner

__all__ = [
    # Core models
    "ArtifactLoadError",
    "CompatibilityIssue",
    "CompatibilityReport",
    "HistoryUnavailableError",
    "IssueKind",
    "RegistryUnavailableError",
    "SchemaRegistryPolicyError",
    "Severity",
    # Versions
    "MAJOR_BUMP_DISTANCE",
    "SemVer",
    "compare_versions",
    "minor_distance",
    "parse_version",
    "suggest_removal_version",
    # Snapshots
    "PropertyDescriptor",
    "SchemaSnapshot",
    # Policies
    "check_schema_compatibility",
    "DeprecationMetadata",
    "DeprecationStatus",
    "Recommendation",
    "build_recommendations",
    "is_urgent",
    "validate_deprecation",
    "REQUIRED_MINOR_OVERLAP",
    "OverlapResult",
    "check_version_overlap",
    "validate_version_overlap",
    "check_schema_venues",
    "check_topics_compatibility",
    "check_venues_compatibility",
    "check_changelog",
    "check_release_tag",
    # Orchestration
    "RegistryConfig",
    "FileHistory",
    "GitHistory",
    "InMemoryHistory",
    "DeprecationSummary",
    "RegistryCompatibilityRunner",
]
