"""Shared pytest fixtures and builders for all tests."""
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from schema_registry_policy import RegistryConfig, SchemaSnapshot

# Fixed clock so date-dependent rules are reproducible.
NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

SCHEMA_ID_PREFIX = "https://schemas.sunday.dev/"


def make_document(name: str = "order_created", **overrides: Any) -> Dict[str, Any]:
    """Build a registry-conformant schema document.

    Callers override specific keys as needed.
    """
    document: Dict[str, Any] = {
        "$id": f"{SCHEMA_ID_PREFIX}{name}.schema.json",
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "title": name,
        "type": "object",
        "properties": {
            "id": {"type": "string"},
            "status": {"type": "string", "enum": ["open", "closed"]},
        },
        "required": ["id"],
    }
    document.update(overrides)
    return document


def make_snapshot(name: str = "order_created", **overrides: Any) -> SchemaSnapshot:
    return SchemaSnapshot.from_document(name, make_document(name, **overrides))


def dump(data: Any) -> str:
    return json.dumps(data, indent=2)


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump(data), encoding="utf-8")
    return path


def make_config(root: Path, **overrides: Any) -> RegistryConfig:
    """RegistryConfig rooted at ``root`` with the fixed test clock."""
    values: Dict[str, Any] = {"root": root, "now": NOW}
    values.update(overrides)
    return RegistryConfig(**values)


class RegistryBuilder:
    """Writes a registry layout under a temporary root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def schema(self, name: str, document: Optional[Dict[str, Any]] = None) -> Path:
        return write_json(
            self.root / "schemas" / "json" / f"{name}.schema.json",
            document if document is not None else make_document(name),
        )

    def raw_schema(self, name: str, content: str) -> Path:
        path = self.root / "schemas" / "json" / f"{name}.schema.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def topics(self, mapping: Dict[str, Any]) -> Path:
        return write_json(self.root / "schemas" / "topics.json", mapping)

    def venues(self, venues: Any) -> Path:
        return write_json(self.root / "schemas" / "registries" / "venues.json", venues)

    def example(self, name: str, payload: Any) -> Path:
        return write_json(self.root / "schemas" / "examples" / f"{name}.json", payload)

    def changelog(self, text: str) -> Path:
        path = self.root / "CHANGELOG.md"
        path.write_text(text, encoding="utf-8")
        return path


@pytest.fixture
def registry(tmp_path: Path) -> RegistryBuilder:
    return RegistryBuilder(tmp_path)
