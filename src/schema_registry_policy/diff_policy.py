"""Breaking-change policy for two snapshots of the same schema.

Rule set (each violation is an error-severity issue, one per field/value):

    required-field-added     name required now but not before
    required-field-removed   name required before but not now
    property-removed         property declared before but not now
    enum-narrowed            enum literal accepted before but not now

``required-field-removed`` is deliberately strict: relaxing a requirement is
usually compatible under JSON Schema reasoning, but the registry flags it for
manual review.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from schema_registry_policy.models import CompatibilityIssue, IssueKind, error
from schema_registry_policy.snapshot import SchemaSnapshot

logger = logging.getLogger("schema_registry_policy.diff_policy")


def _same_literal(a: Any, b: Any) -> bool:
    # JSON true/false must not compare equal to 1/0.
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    return bool(a == b)


def _contains(values: Sequence[Any], literal: Any) -> bool:
    return any(_same_literal(v, literal) for v in values)


def check_schema_compatibility(
    previous: Optional[SchemaSnapshot],
    current: SchemaSnapshot,
) -> List[CompatibilityIssue]:
    """Classify the change from ``previous`` to ``current``.

    Args:
        previous: Snapshot at the base reference, or None for a new schema.
        current: Snapshot in the working tree.

    Returns:
        One issue per violation, ordered by rule then by declaration order.
        Empty when the change is backward compatible or the schema is new.
    """
    subject = current.identifier

    if previous is None:
        logger.info("%s: new schema (no compatibility check needed)", subject)
        return []

    issues: List[CompatibilityIssue] = []

    for name in current.required:
        if name not in previous.required:
            issues.append(error(
                subject,
                IssueKind.REQUIRED_FIELD_ADDED,
                f"Added required field: {name}",
                field=name,
            ))

    for name in previous.required:
        if name not in current.required:
            issues.append(error(
                subject,
                IssueKind.REQUIRED_FIELD_REMOVED,
                f"Removed required field: {name}",
                field=name,
            ))

    for name in previous.properties:
        if name not in current.properties:
            issues.append(error(
                subject,
                IssueKind.PROPERTY_REMOVED,
                f"Removed property: {name}",
                field=name,
            ))

    for name, current_prop in current.properties.items():
        previous_prop = previous.properties.get(name)
        if previous_prop is None:
            continue
        if current_prop.enum is None or previous_prop.enum is None:
            continue
        for literal in previous_prop.enum:
            if not _contains(current_prop.enum, literal):
                issues.append(error(
                    subject,
                    IssueKind.ENUM_NARROWED,
                    f"{name}: removed enum value {literal!r}",
                    field=name,
                    value=literal,
                ))

    if not issues:
        logger.info("%s: backward compatible", subject)
    return issues
