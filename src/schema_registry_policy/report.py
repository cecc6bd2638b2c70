"""Rendering of compatibility reports and deprecation summaries."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field

from schema_registry_policy.deprecation import DeprecationStatus, Recommendation
from schema_registry_policy.models import (
    CompatibilityIssue,
    CompatibilityReport,
    Severity,
)


class DeprecationSummary(BaseModel):
    """Machine-readable deprecation status of the whole registry."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(..., ge=0, description="Schema files inspected")
    active: int = Field(..., ge=0, description="Schemas that are not deprecated")
    deprecated: int = Field(..., ge=0, description="Schemas flagged deprecated")
    invalid: int = Field(
        0,
        ge=0,
        description="Schemas whose file or x-deprecated block could not be read",
    )
    schemas: Tuple[DeprecationStatus, ...] = Field(
        default=(), description="Status of every deprecated schema"
    )
    issues: Tuple[CompatibilityIssue, ...] = Field(
        default=(), description="Deprecation and overlap findings"
    )
    recommendations: Tuple[Recommendation, ...] = Field(
        default=(), description="Suggested follow-up actions"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def urgent(self) -> int:
        return sum(1 for s in self.schemas if s.urgent)

    @property
    def report(self) -> CompatibilityReport:
        return CompatibilityReport(issues=self.issues)


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def to_json(data: Any) -> str:
    """Deterministic JSON: sorted keys, two-space indent, trailing newline."""
    return json.dumps(data, indent=2, sort_keys=True) + "\n"


def report_to_dict(report: CompatibilityReport) -> Dict[str, Any]:
    return report.model_dump(mode="json", by_alias=True)


def summary_to_dict(
    summary: DeprecationSummary,
    report_date: Optional[datetime] = None,
) -> Dict[str, Any]:
    data = summary.model_dump(mode="json", by_alias=True)
    data["status"] = summary.report.status
    if report_date is not None:
        data["reportDate"] = report_date.isoformat()
    return data


def report_to_json(report: CompatibilityReport) -> str:
    return to_json(report_to_dict(report))


def summary_to_json(
    summary: DeprecationSummary,
    report_date: Optional[datetime] = None,
) -> str:
    return to_json(summary_to_dict(summary, report_date))


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


def _issue_lines(issues: Sequence[CompatibilityIssue]) -> List[str]:
    return [f"  {issue}" for issue in issues]


def render_report(report: CompatibilityReport, title: str = "Compatibility report") -> str:
    """Human-readable report: errors, then warnings, then a status line."""
    lines: List[str] = [title]
    if report.base_ref is not None:
        lines.append(f"Base reference: {report.base_ref}")
    if report.skipped_reason is not None:
        lines.append(f"Skipped: {report.skipped_reason}")

    for severity, heading in ((Severity.ERROR, "Errors"), (Severity.WARNING, "Warnings")):
        group = [i for i in report.issues if i.severity == severity]
        if group:
            lines.append("")
            lines.append(f"{heading}:")
            lines.extend(_issue_lines(group))

    lines.append("")
    lines.append(f"Errors: {report.error_count}")
    lines.append(f"Warnings: {report.warning_count}")
    lines.append(f"Status: {report.status.upper()}")
    return "\n".join(lines) + "\n"


def render_summary(summary: DeprecationSummary) -> str:
    """Human-readable deprecation table followed by the issue report."""
    lines: List[str] = ["Deprecation summary"]
    lines.append(f"  Total schemas: {summary.total}")
    lines.append(f"  Active: {summary.active}")
    lines.append(f"  Deprecated: {summary.deprecated}")
    if summary.invalid:
        lines.append(f"  Unreadable: {summary.invalid}")
    lines.append(f"  Urgent: {summary.urgent}")

    for status in summary.schemas:
        lines.append("")
        marker = " (URGENT)" if status.urgent else ""
        lines.append(f"{status.schema_name} - DEPRECATED{marker}")
        lines.append(f"  Since: {status.deprecated_in_version or 'Unknown'}")
        lines.append(f"  Removal: {status.planned_removal or 'Not specified'}")
        lines.append(f"  Reason: {status.reason or 'No reason specified'}")
        if status.replaced_by:
            lines.append(f"  Replaced by: {status.replaced_by}")
        if status.migration_guide:
            lines.append(f"  Migration guide: {status.migration_guide}")

    if summary.recommendations:
        lines.append("")
        lines.append("Recommendations:")
        for rec in summary.recommendations:
            lines.append(f"  [{rec.priority}] {rec.schema_name}: {rec.action}")

    lines.append("")
    body = "\n".join(lines) + "\n"
    return body + render_report(summary.report, title="Deprecation checks")
