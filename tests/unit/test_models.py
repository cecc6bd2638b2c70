"""Unit tests for issue and report models."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from schema_registry_policy.models import (
    ArtifactLoadError,
    CompatibilityIssue,
    CompatibilityReport,
    HistoryUnavailableError,
    IssueKind,
    RegistryUnavailableError,
    SchemaRegistryPolicyError,
    Severity,
    error,
    warning,
)


class TestCompatibilityIssue:
    """Tests for CompatibilityIssue."""

    def test_helpers_set_severity(self) -> None:
        e = error("order", IssueKind.PROPERTY_REMOVED, "Removed property: a", field="a")
        w = warning("order", IssueKind.REPLACEMENT_MISSING, "No replacement")

        assert e.severity == Severity.ERROR and e.is_error
        assert w.severity == Severity.WARNING and not w.is_error
        assert e.field == "a"
        assert w.details == {}

    def test_str(self) -> None:
        issue = error("order", IssueKind.PROPERTY_REMOVED, "Removed property: a")
        assert str(issue) == "[property-removed] order: Removed property: a"

    def test_empty_subject_rejected(self) -> None:
        with pytest.raises(ValidationError):
            error("", IssueKind.PROPERTY_REMOVED, "x")

    def test_frozen(self) -> None:
        issue = error("order", IssueKind.PROPERTY_REMOVED, "x")
        with pytest.raises(ValidationError):
            issue.message = "y"  # type: ignore[misc]

    def test_json_round_trip(self) -> None:
        issue = error(
            "order", IssueKind.ENUM_NARROWED, "s: removed enum value 'a'",
            field="s", value="a",
        )
        data = issue.model_dump(mode="json")
        assert data["kind"] == "enum-narrowed"
        assert data["severity"] == "error"
        assert CompatibilityIssue.model_validate(data) == issue


class TestCompatibilityReport:
    """Tests for CompatibilityReport aggregation."""

    def test_empty_report_passes(self) -> None:
        report = CompatibilityReport()
        assert report.passed
        assert report.status == "pass"
        assert report.exit_code == 0
        assert report.error_count == 0

    def test_warnings_only_pass(self) -> None:
        report = CompatibilityReport(issues=(
            warning("a", IssueKind.REPLACEMENT_MISSING, "x"),
        ))
        assert report.passed
        assert report.warning_count == 1

    def test_any_error_fails(self) -> None:
        report = CompatibilityReport(issues=(
            warning("a", IssueKind.REPLACEMENT_MISSING, "x"),
            error("b", IssueKind.VENUE_REMOVED, "y"),
        ))
        assert not report.passed
        assert report.status == "fail"
        assert report.exit_code == 1
        assert [i.subject for i in report.errors] == ["b"]
        assert [i.subject for i in report.warnings] == ["a"]

    def test_dump_includes_counts(self) -> None:
        report = CompatibilityReport(issues=(error("b", IssueKind.VENUE_REMOVED, "y"),))
        data = report.model_dump(mode="json")
        assert data["error_count"] == 1
        assert data["warning_count"] == 0
        assert data["status"] == "fail"

    def test_merge_preserves_order(self) -> None:
        first = CompatibilityReport(
            issues=(warning("a", IssueKind.REPLACEMENT_MISSING, "x"),), base_ref="main"
        )
        second = CompatibilityReport(issues=(error("b", IssueKind.VENUE_REMOVED, "y"),))

        merged = first.merge(second)

        assert [i.subject for i in merged.issues] == ["a", "b"]
        assert merged.base_ref == "main"

    def test_repr(self) -> None:
        assert repr(CompatibilityReport()) == (
            "CompatibilityReport(status=pass, errors=0, warnings=0)"
        )


class TestExceptions:
    """Exception hierarchy."""

    def test_hierarchy(self) -> None:
        for exc_type in (ArtifactLoadError, HistoryUnavailableError, RegistryUnavailableError):
            assert issubclass(exc_type, SchemaRegistryPolicyError)

    def test_artifact_load_error_message(self) -> None:
        exc = ArtifactLoadError("schemas/json/a.schema.json", "invalid JSON")
        assert exc.path == "schemas/json/a.schema.json"
        assert exc.reason == "invalid JSON"
        assert str(exc) == "Failed to load schemas/json/a.schema.json: invalid JSON"
