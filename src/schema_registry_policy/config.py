"""
Configuration for one registry check run.

Uses Pydantic BaseSettings so CI can override values through the
environment. Configuration sources (in order of precedence):
1. Explicit constructor arguments (CLI flags)
2. Environment variables (SCHEMA_REGISTRY_*)
3. Default values

Relative artifact paths are resolved against ``root``.

Example:
    export SCHEMA_REGISTRY_BASE_REF=origin/main
    export SCHEMA_REGISTRY_ROOT=/srv/registry
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ID_PREFIX = "https://schemas.sunday.dev/"


class RegistryConfig(BaseSettings):
    """Explicit, run-scoped configuration for the registry checks."""

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_REGISTRY_",
        extra="ignore",
        frozen=True,
    )

    root: Path = Field(
        default=Path("."),
        description="Registry repository root",
    )
    schemas_dir: Path = Field(
        default=Path("schemas/json"),
        description="Directory holding JSON Schema files",
    )
    topics_file: Path = Field(
        default=Path("schemas/topics.json"),
        description="Schema id to topic mapping",
    )
    venues_file: Path = Field(
        default=Path("schemas/registries/venues.json"),
        description="Venue registry (list of venue ids)",
    )
    examples_dir: Path = Field(
        default=Path("schemas/examples"),
        description="Example payloads validated against their schemas",
    )
    changelog_file: Path = Field(
        default=Path("CHANGELOG.md"),
        description="Changelog required for schema changes",
    )
    base_ref: str = Field(
        default="main",
        min_length=1,
        description="Reference the working tree is diffed against",
    )
    schema_glob: str = Field(
        default="*.json",
        description="Glob selecting schema files inside schemas_dir",
    )
    id_prefix: str = Field(
        default=DEFAULT_ID_PREFIX,
        description="Prefix every schema $id must start with",
    )
    venue_fields: Tuple[str, ...] = Field(
        default=("venue_id", "long_venue", "short_venue"),
        description="Properties whose enums must list registered venues",
    )
    required_overlap: int = Field(
        default=1,
        ge=0,
        description="Minimum minor releases between deprecation and removal",
    )
    urgency_window_days: int = Field(
        default=30,
        ge=0,
        description="Removal dates closer than this mark a deprecation urgent",
    )
    now: Optional[datetime] = Field(
        default=None,
        description="Wall-clock override (defaults to the current UTC time)",
    )

    @field_validator("now")
    @classmethod
    def _aware_now(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def resolve(self, path: Path) -> Path:
        """Resolve a configured path against the registry root."""
        return path if path.is_absolute() else self.root / path

    def relative(self, path: Path) -> str:
        """Registry-root-relative POSIX path, as used for historical lookups."""
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()

    def current_time(self) -> datetime:
        return self.now if self.now is not None else datetime.now(timezone.utc)

    @property
    def schemas_path(self) -> Path:
        return self.resolve(self.schemas_dir)

    @property
    def topics_path(self) -> Path:
        return self.resolve(self.topics_file)

    @property
    def venues_path(self) -> Path:
        return self.resolve(self.venues_file)

    @property
    def examples_path(self) -> Path:
        return self.resolve(self.examples_dir)

    @property
    def changelog_path(self) -> Path:
        return self.resolve(self.changelog_file)
