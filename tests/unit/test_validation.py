"""Unit tests for structural schema and example validation."""
from __future__ import annotations

from conftest import SCHEMA_ID_PREFIX, make_document

from schema_registry_policy.models import IssueKind, Severity
from schema_registry_policy.validation import (
    schema_key,
    validate_example,
    validate_schema_document,
)


class TestValidateSchemaDocument:
    """Tests for validate_schema_document."""

    def test_conformant_document(self) -> None:
        assert validate_schema_document("s", make_document(), SCHEMA_ID_PREFIX) == []

    def test_not_an_object(self) -> None:
        issues = validate_schema_document("s", ["x"], SCHEMA_ID_PREFIX)
        assert [i.kind for i in issues] == [IssueKind.SCHEMA_STRUCTURE]

    def test_missing_keys_stop_further_checks(self) -> None:
        document = {"type": "object", "properties": {}, "$id": "http://elsewhere/x"}

        issues = validate_schema_document("s", document, SCHEMA_ID_PREFIX)

        assert [i.kind for i in issues] == [IssueKind.SCHEMA_STRUCTURE]
        assert issues[0].details["missing"] == ["$schema", "title"]

    def test_meta_schema_violation(self) -> None:
        document = make_document(type="objekt")

        issues = validate_schema_document("s", document, SCHEMA_ID_PREFIX)

        assert [i.kind for i in issues] == [IssueKind.SCHEMA_INVALID]
        assert issues[0].severity == Severity.ERROR

    def test_other_draft_is_a_warning(self) -> None:
        document = make_document(**{"$schema": "http://json-schema.org/draft-07/schema#"})

        issues = validate_schema_document("s", document, SCHEMA_ID_PREFIX)

        assert [(i.kind, i.severity) for i in issues] == [
            (IssueKind.SCHEMA_DRAFT, Severity.WARNING)
        ]

    def test_id_prefix(self) -> None:
        document = make_document(**{"$id": "https://example.org/order.json"})

        issues = validate_schema_document("s", document, SCHEMA_ID_PREFIX)

        assert [i.kind for i in issues] == [IssueKind.SCHEMA_ID_PREFIX]
        assert issues[0].value == "https://example.org/order.json"

    def test_required_not_declared(self) -> None:
        document = make_document(required=["id", "ghost"])

        issues = validate_schema_document("s", document, SCHEMA_ID_PREFIX)

        assert [i.kind for i in issues] == [IssueKind.SCHEMA_STRUCTURE]
        assert issues[0].details["undeclared"] == ["ghost"]


class TestSchemaKey:
    """Tests for schema_key."""

    def test_const_wins(self) -> None:
        document = make_document(
            properties={"schema": {"const": "orders.order_created.v1"}}
        )
        assert schema_key("order_created", document) == "orders.order_created.v1"

    def test_falls_back_to_name(self) -> None:
        assert schema_key("order_created", make_document()) == "order_created"
        assert schema_key("order_created", None) == "order_created"


class TestValidateExample:
    """Tests for validate_example."""

    SCHEMAS = {
        "order_created": make_document(
            properties={
                "schema": {"const": "order_created"},
                "id": {"type": "string"},
                "qty": {"type": "integer", "minimum": 1},
            },
            required=["schema", "id"],
        )
    }

    def test_valid_example(self) -> None:
        example = {"schema": "order_created", "id": "o-1", "qty": 2}
        assert validate_example("examples/a.json", example, self.SCHEMAS) == []

    def test_unknown_schema(self) -> None:
        issues = validate_example("examples/a.json", {"schema": "nope"}, self.SCHEMAS)
        assert [i.kind for i in issues] == [IssueKind.EXAMPLE_SCHEMA_UNKNOWN]
        assert issues[0].value == "nope"

    def test_missing_schema_key(self) -> None:
        issues = validate_example("examples/a.json", ["not", "an", "object"], self.SCHEMAS)
        assert [i.kind for i in issues] == [IssueKind.EXAMPLE_SCHEMA_UNKNOWN]

    def test_invalid_example_sorted_by_location(self) -> None:
        example = {"schema": "order_created", "qty": 0}

        issues = validate_example("examples/a.json", example, self.SCHEMAS)

        assert all(i.kind == IssueKind.EXAMPLE_INVALID for i in issues)
        assert [i.field for i in issues] == ["$", "$.qty"]
        assert issues[0].details["validator"] == "required"
        assert issues[1].details["validator"] == "minimum"
