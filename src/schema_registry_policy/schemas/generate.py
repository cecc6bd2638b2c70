"""JSON Schema generation for the report and metadata models.

CI consumers validate the machine-readable output of ``schema-registry``
against these schemas. Run with ``--check`` to detect drift between the
models and a committed copy of the schemas.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, TypeAdapter

from schema_registry_policy.deprecation import DeprecationMetadata
from schema_registry_policy.models import (
    CompatibilityIssue,
    CompatibilityReport,
    IssueKind,
    Severity,
)
from schema_registry_policy.report import DeprecationSummary

SCHEMA_ID_PREFIX = "schema-registry-policy"

# Registry of models to generate schemas for
PYDANTIC_MODELS: List[tuple[str, Type[BaseModel]]] = [
    ("compatibility_issue", CompatibilityIssue),
    ("compatibility_report", CompatibilityReport),
    ("deprecation_metadata", DeprecationMetadata),
    ("deprecation_summary", DeprecationSummary),
]

# Enums (use TypeAdapter)
ENUM_TYPES: List[tuple[str, type]] = [
    ("issue_kind", IssueKind),
    ("severity", Severity),
]


def generate_schema(name: str, model: Type[BaseModel]) -> Dict[str, Any]:
    """Generate JSON Schema for a Pydantic model.

    Args:
        name: Schema name for $id field
        model: Pydantic model class

    Returns:
        JSON Schema dict with $schema and $id fields
    """
    schema = model.model_json_schema(by_alias=True, mode="serialization")
    schema["$schema"] = "https://json-schema.org/draft/2020-12/schema"
    schema["$id"] = f"{SCHEMA_ID_PREFIX}/{name}"
    return schema


def generate_enum_schema(name: str, enum_cls: type) -> Dict[str, Any]:
    """Generate JSON Schema for an enum using TypeAdapter."""
    adapter: TypeAdapter[Any] = TypeAdapter(enum_cls)
    schema = adapter.json_schema(mode="serialization")
    schema["$schema"] = "https://json-schema.org/draft/2020-12/schema"
    schema["$id"] = f"{SCHEMA_ID_PREFIX}/{name}"
    return schema


def schema_to_json(schema: Dict[str, Any]) -> str:
    """Serialize schema to deterministic JSON string with trailing newline."""
    return json.dumps(schema, indent=2, sort_keys=True) + "\n"


def generate_all_schemas() -> Dict[str, Dict[str, Any]]:
    """Generate all schemas and return them keyed by name."""
    schemas: Dict[str, Dict[str, Any]] = {}

    for name, model in PYDANTIC_MODELS:
        schemas[name] = generate_schema(name, model)

    for name, enum_cls in ENUM_TYPES:
        schemas[name] = generate_enum_schema(name, enum_cls)

    return schemas


def write_all_schemas(schemas: Dict[str, Dict[str, Any]], out_dir: Path) -> None:
    """Write each schema to ``out_dir/{name}.schema.json``."""
    out_dir.mkdir(parents=True, exist_ok=True)
    for name, schema in schemas.items():
        path = out_dir / f"{name}.schema.json"
        path.write_text(schema_to_json(schema), encoding="utf-8")
        print(f"Generated {path}")


def check_drift(schema_dir: Path) -> int:
    """Check if generated schemas match the files in ``schema_dir``.

    Returns:
        0 if all schemas match, 1 if any drift or orphaned file is detected
    """
    schemas = generate_all_schemas()
    drift_detected = False

    for name, schema in schemas.items():
        path = schema_dir / f"{name}.schema.json"
        expected_content = schema_to_json(schema)

        if not path.exists():
            print(f"ERROR: Missing schema file: {path}", file=sys.stderr)
            drift_detected = True
            continue

        if path.read_text(encoding="utf-8") != expected_content:
            print(f"ERROR: Schema drift detected in {path}", file=sys.stderr)
            drift_detected = True

    expected_files = {f"{name}.schema.json" for name in schemas}
    actual_files = {p.name for p in schema_dir.glob("*.schema.json")}
    for orphan in sorted(actual_files - expected_files):
        print(f"Orphaned schema {orphan}", file=sys.stderr)
        drift_detected = True

    if drift_detected:
        print("\nSchema drift detected. Run without --check to regenerate.", file=sys.stderr)
        return 1

    print(f"All {len(schemas)} schemas are up to date.")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for ``python -m schema_registry_policy.schemas.generate``."""
    parser = argparse.ArgumentParser(
        description="Generate JSON schemas for schema-registry-policy report models"
    )
    parser.add_argument(
        "--out",
        type=Path,
        required=True,
        help="Directory the schema files are written to (or checked against)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Check for schema drift without writing files (CI mode)",
    )
    args = parser.parse_args(argv)

    if args.check:
        return check_drift(args.out)

    schemas = generate_all_schemas()
    write_all_schemas(schemas, args.out)
    print(f"\nSuccessfully generated {len(schemas)} schemas.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
