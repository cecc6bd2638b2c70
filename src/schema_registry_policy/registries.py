"""Topic-mapping and venue-registry comparators.

Topic mapping (``topics.json``)::

    {"order_created": {"topic": "orders.v1"},
     "trade_executed": {"topics": ["trades.v1", "trades.audit"]}}

Venue registry (``venues.json``)::

    ["polymarket", "kalshi"]
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from schema_registry_policy.models import (
    ArtifactLoadError,
    CompatibilityIssue,
    IssueKind,
    error,
)
from schema_registry_policy.snapshot import SchemaSnapshot

logger = logging.getLogger("schema_registry_policy.registries")

TOPICS_SUBJECT: str = "topics.json"
VENUES_SUBJECT: str = "venues.json"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_topic_mapping(document: Any, subject: str = TOPICS_SUBJECT) -> Dict[str, Any]:
    """Validate the top-level shape of a topic mapping.

    Raises:
        ArtifactLoadError: If the document is not an object of objects.
    """
    if not isinstance(document, Mapping):
        raise ArtifactLoadError(subject, "topic mapping is not a JSON object")
    for schema_id, mapping in document.items():
        if not isinstance(mapping, Mapping):
            raise ArtifactLoadError(
                subject, f"mapping for {schema_id!r} is not a JSON object"
            )
    return dict(document)


def load_venue_registry(document: Any, subject: str = VENUES_SUBJECT) -> List[str]:
    """Validate that a venue registry is a list of strings.

    Raises:
        ArtifactLoadError: If the document has any other shape.
    """
    if not isinstance(document, list) or not all(isinstance(v, str) for v in document):
        raise ArtifactLoadError(subject, "venue registry is not a list of strings")
    return list(document)


def primary_topic(mapping: Mapping[str, Any]) -> Optional[str]:
    """``topic`` if set, else the first entry of ``topics``."""
    topic = mapping.get("topic")
    if topic:
        return str(topic)
    topics = mapping.get("topics")
    if isinstance(topics, list) and topics:
        return str(topics[0])
    return None


# ---------------------------------------------------------------------------
# Comparators
# ---------------------------------------------------------------------------


def check_topics_compatibility(
    current: Mapping[str, Any],
    previous: Optional[Mapping[str, Any]],
    subject: str = TOPICS_SUBJECT,
) -> List[CompatibilityIssue]:
    """Reassigning or removing a schema's topic mapping is breaking.

    Adding new schema ids is compatible. A missing previous mapping means the
    file is new and nothing is checked.
    """
    if previous is None:
        logger.info("%s: new file (no compatibility check needed)", subject)
        return []

    issues: List[CompatibilityIssue] = []
    for schema_id, current_mapping in current.items():
        previous_mapping = previous.get(schema_id)
        if previous_mapping is None:
            continue
        before = primary_topic(previous_mapping)
        after = primary_topic(current_mapping)
        if before != after:
            issues.append(error(
                subject,
                IssueKind.TOPIC_CHANGED,
                f"Schema {schema_id} topic changed from {before} to {after}",
                field=schema_id,
                value=after,
                details={"previous_topic": before, "current_topic": after},
            ))

    for schema_id in previous:
        if schema_id not in current:
            issues.append(error(
                subject,
                IssueKind.TOPIC_MAPPING_REMOVED,
                f"Removed schema mapping: {schema_id}",
                field=schema_id,
            ))

    if not issues:
        logger.info("%s: backward compatible", subject)
    return issues


def check_venues_compatibility(
    current: Sequence[str],
    previous: Optional[Sequence[str]],
    subject: str = VENUES_SUBJECT,
) -> List[CompatibilityIssue]:
    """Removing a venue is breaking; adding one only needs a minor bump."""
    if previous is None:
        logger.info("%s: new file (no compatibility check needed)", subject)
        return []

    issues = [
        error(
            subject,
            IssueKind.VENUE_REMOVED,
            f"Removed venue: {venue}",
            value=venue,
        )
        for venue in dict.fromkeys(previous)
        if venue not in current
    ]

    added = [venue for venue in dict.fromkeys(current) if venue not in previous]
    if added:
        logger.info(
            "%s: added venues %s (minor version bump)", subject, ", ".join(added)
        )
    elif not issues:
        logger.info("%s: no changes", subject)
    return issues


def check_schema_venues(
    snapshot: SchemaSnapshot,
    valid_venues: Sequence[str],
    venue_fields: Sequence[str],
) -> List[CompatibilityIssue]:
    """Every venue enum in a schema must only list registered venues."""
    issues: List[CompatibilityIssue] = []
    for field_name in venue_fields:
        descriptor = snapshot.properties.get(field_name)
        if descriptor is None or descriptor.enum is None:
            continue
        for venue in descriptor.enum:
            if venue not in valid_venues:
                issues.append(error(
                    snapshot.identifier,
                    IssueKind.UNKNOWN_VENUE,
                    f"{field_name} lists venue {venue!r} which is not in the venue registry",
                    field=field_name,
                    value=venue,
                ))
    return issues
