"""Unit tests for RegistryConfig."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from schema_registry_policy.config import RegistryConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ROOT", "BASE_REF", "REQUIRED_OVERLAP", "NOW", "VENUE_FIELDS"):
        monkeypatch.delenv(f"SCHEMA_REGISTRY_{name}", raising=False)


class TestDefaults:
    """Default values and path resolution."""

    def test_defaults(self) -> None:
        config = RegistryConfig()
        assert config.root == Path(".")
        assert config.base_ref == "main"
        assert config.required_overlap == 1
        assert config.urgency_window_days == 30
        assert config.venue_fields == ("venue_id", "long_venue", "short_venue")

    def test_paths_resolve_against_root(self, tmp_path: Path) -> None:
        config = RegistryConfig(root=tmp_path)
        assert config.schemas_path == tmp_path / "schemas" / "json"
        assert config.topics_path == tmp_path / "schemas" / "topics.json"
        assert config.venues_path == tmp_path / "schemas" / "registries" / "venues.json"
        assert config.changelog_path == tmp_path / "CHANGELOG.md"

    def test_absolute_paths_kept(self, tmp_path: Path) -> None:
        elsewhere = tmp_path / "elsewhere"
        config = RegistryConfig(root=tmp_path / "repo", schemas_dir=elsewhere)
        assert config.schemas_path == elsewhere

    def test_relative(self, tmp_path: Path) -> None:
        config = RegistryConfig(root=tmp_path)
        assert config.relative(tmp_path / "schemas" / "a.json") == "schemas/a.json"


class TestOverrides:
    """Environment and explicit overrides."""

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCHEMA_REGISTRY_BASE_REF", "origin/main")
        monkeypatch.setenv("SCHEMA_REGISTRY_REQUIRED_OVERLAP", "2")
        config = RegistryConfig()
        assert config.base_ref == "origin/main"
        assert config.required_overlap == 2

    def test_explicit_beats_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCHEMA_REGISTRY_BASE_REF", "origin/main")
        assert RegistryConfig(base_ref="develop").base_ref == "develop"

    def test_negative_overlap_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RegistryConfig(required_overlap=-1)

    def test_empty_base_ref_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RegistryConfig(base_ref="")


class TestClock:
    """current_time and the now override."""

    def test_naive_now_becomes_utc(self) -> None:
        config = RegistryConfig(now=datetime(2026, 1, 1, 9, 0))
        assert config.current_time() == datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)

    def test_default_is_aware(self) -> None:
        assert RegistryConfig().current_time().tzinfo is not None
