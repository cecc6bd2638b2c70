"""Structural validation of schema files and their example payloads.

Two layers, mirroring the registry's CI gates:
1. Schema documents: JSON Schema meta-schema check plus registry
   conventions ($id prefix, draft 2020-12, required keys).
2. Example payloads: each example is validated against the schema it names.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Sequence

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from schema_registry_policy.models import (
    CompatibilityIssue,
    IssueKind,
    error,
    warning,
)

logger = logging.getLogger("schema_registry_policy.validation")

REQUIRED_SCHEMA_KEYS: tuple[str, ...] = ("$id", "$schema", "title", "type", "properties")

DRAFT_2020_12_MARKER: str = "2020-12"


def _json_path(path: Sequence[Any]) -> str:
    return "$" + "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in path)


def validate_schema_document(
    subject: str,
    document: Any,
    id_prefix: str,
) -> List[CompatibilityIssue]:
    """Check one schema document against the meta-schema and registry rules.

    Args:
        subject: Schema identifier used on produced issues.
        document: Decoded schema JSON.
        id_prefix: Prefix every ``$id`` must start with.

    Returns:
        Issues in check order. A document missing required keys stops after
        that finding, since the remaining rules depend on them.
    """
    if not isinstance(document, Mapping):
        return [error(subject, IssueKind.SCHEMA_STRUCTURE, "Schema is not a JSON object")]

    issues: List[CompatibilityIssue] = []

    try:
        Draft202012Validator.check_schema(document)
    except SchemaError as e:
        issues.append(error(
            subject,
            IssueKind.SCHEMA_INVALID,
            f"Not a valid JSON Schema at {_json_path(list(e.path))}: {e.message}",
            details={"schema_path": [str(p) for p in e.schema_path]},
        ))

    missing = [key for key in REQUIRED_SCHEMA_KEYS if key not in document]
    if missing:
        issues.append(error(
            subject,
            IssueKind.SCHEMA_STRUCTURE,
            f"Missing required fields: {', '.join(missing)}",
            details={"missing": missing},
        ))
        return issues

    if DRAFT_2020_12_MARKER not in str(document["$schema"]):
        issues.append(warning(
            subject,
            IssueKind.SCHEMA_DRAFT,
            f"Not using JSON Schema draft 2020-12 ($schema={document['$schema']!r})",
        ))

    if not str(document["$id"]).startswith(id_prefix):
        issues.append(error(
            subject,
            IssueKind.SCHEMA_ID_PREFIX,
            f"$id should start with {id_prefix}",
            value=document["$id"],
        ))

    properties = document.get("properties")
    if not isinstance(properties, Mapping):
        properties = {}
    required = document.get("required")
    if isinstance(required, list):
        undeclared = [name for name in required if name not in properties]
        if undeclared:
            issues.append(error(
                subject,
                IssueKind.SCHEMA_STRUCTURE,
                f"Required fields not in properties: {', '.join(map(str, undeclared))}",
                details={"undeclared": undeclared},
            ))

    return issues


def schema_key(name: str, document: Any) -> str:
    """Key an example uses to name its schema.

    ``properties.schema.const`` when the schema pins one, else the file name.
    """
    if isinstance(document, Mapping):
        properties = document.get("properties")
        if isinstance(properties, Mapping):
            schema_prop = properties.get("schema")
            if isinstance(schema_prop, Mapping) and isinstance(schema_prop.get("const"), str):
                return str(schema_prop["const"])
    return name


def validate_example(
    subject: str,
    example: Any,
    schemas: Mapping[str, Dict[str, Any]],
) -> List[CompatibilityIssue]:
    """Validate one example payload against the schema named by its ``schema`` key."""
    schema_id = example.get("schema") if isinstance(example, Mapping) else None
    if not isinstance(schema_id, str) or schema_id not in schemas:
        return [error(
            subject,
            IssueKind.EXAMPLE_SCHEMA_UNKNOWN,
            f"Example references unknown schema {schema_id!r}",
            value=schema_id,
        )]

    validator = Draft202012Validator(schemas[schema_id])
    issues: List[CompatibilityIssue] = []
    found = sorted(
        validator.iter_errors(example),
        key=lambda err: (_json_path(list(err.absolute_path)), err.message),
    )
    for e in found:
        location = _json_path(list(e.absolute_path))
        issues.append(error(
            subject,
            IssueKind.EXAMPLE_INVALID,
            f"{location}: {e.message}",
            field=location,
            details={"schema": schema_id, "validator": str(e.validator)},
        ))
    if not issues:
        logger.info("%s: valid against %s", subject, schema_id)
    return issues
