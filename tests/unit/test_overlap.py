"""Unit tests for the version-overlap policy."""
from __future__ import annotations

import pytest

from schema_registry_policy.deprecation import DeprecationMetadata
from schema_registry_policy.models import IssueKind, Severity
from schema_registry_policy.overlap import (
    REQUIRED_MINOR_OVERLAP,
    OverlapResult,
    check_version_overlap,
    validate_version_overlap,
)


def _meta(dep: str | None, rem: str | None) -> DeprecationMetadata:
    return DeprecationMetadata(
        deprecated=True,
        reason="replaced",
        deprecated_in_version=dep,
        removal_planned_in_version=rem,
    )


class TestValidateVersionOverlap:
    """Tests for validate_version_overlap."""

    def test_sufficient(self) -> None:
        assert validate_version_overlap("v1.2.0", "v1.3.0") == OverlapResult(
            valid=True, actual_overlap=1, required_overlap=1, suggested_removal=None
        )

    def test_same_version_insufficient(self) -> None:
        result = validate_version_overlap("v1.2.0", "v1.2.0")
        assert not result.valid
        assert result.actual_overlap == 0
        assert result.suggested_removal == "v1.4.0"

    def test_major_bump_is_sufficient(self) -> None:
        result = validate_version_overlap("v1.9.0", "v2.0.0")
        assert result.valid
        assert result.actual_overlap == 10

    def test_malformed(self) -> None:
        result = validate_version_overlap("1.2", "v1.3.0")
        assert not result.valid
        assert result.actual_overlap is None
        assert result.suggested_removal is None

    def test_custom_requirement(self) -> None:
        result = validate_version_overlap("v1.0.0", "v1.2.0", required_overlap=3)
        assert not result.valid
        assert result.suggested_removal == "v1.4.0"

    def test_default_requirement(self) -> None:
        assert REQUIRED_MINOR_OVERLAP == 1


class TestCheckVersionOverlap:
    """Tests for check_version_overlap."""

    def test_valid_overlap_no_issues(self) -> None:
        assert check_version_overlap("order", _meta("v1.2.0", "v1.4.0")) == []

    def test_insufficient_overlap(self) -> None:
        issues = check_version_overlap("order", _meta("v1.2.0", "v1.2.0"))

        assert len(issues) == 1
        issue = issues[0]
        assert issue.kind == IssueKind.INSUFFICIENT_OVERLAP
        assert issue.severity == Severity.ERROR
        assert issue.details["actual_overlap"] == 0
        assert issue.details["required_overlap"] == 1
        assert issue.details["suggested_removal"] == "v1.4.0"
        assert "v1.4.0" in issue.message

    def test_removal_before_deprecation(self) -> None:
        issues = check_version_overlap("order", _meta("v1.4.0", "v1.3.0"))
        assert [i.kind for i in issues] == [IssueKind.INSUFFICIENT_OVERLAP]
        assert issues[0].details["actual_overlap"] == -1

    def test_invalid_version(self) -> None:
        issues = check_version_overlap("order", _meta("v1.2", "v1.4.0"))
        assert [i.kind for i in issues] == [IssueKind.INVALID_VERSION]
        assert issues[0].details == {
            "deprecated_version": "v1.2",
            "removal_version": "v1.4.0",
        }

    def test_lower_removal_major_is_invalid(self) -> None:
        issues = check_version_overlap("order", _meta("v2.0.0", "v1.9.0"))
        assert [i.kind for i in issues] == [IssueKind.INVALID_VERSION]

    @pytest.mark.parametrize("dep, rem", [(None, "v1.4.0"), ("v1.2.0", None)])
    def test_missing_timeline_raises(self, dep: str | None, rem: str | None) -> None:
        with pytest.raises(ValueError):
            check_version_overlap("order", _meta(dep, rem))
