"""CHANGELOG gate: schema changes must be documented."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Sequence

from schema_registry_policy.models import CompatibilityIssue, IssueKind, error

logger = logging.getLogger("schema_registry_policy.changelog")

CHANGELOG_SUBJECT: str = "CHANGELOG.md"

# Paths whose modification requires a changelog entry.
SCHEMA_PATH_PREFIXES: tuple[str, ...] = ("schemas/", "openapi/")
SCHEMA_PATH_FILES: frozenset[str] = frozenset({"package.json"})

_UNRELEASED_HEADING = "## [Unreleased]"
_VERSION_ENTRY_RE = re.compile(r"^## \[\d+\.\d+\.\d+\]", re.MULTILINE)


def has_schema_changes(changed_files: Sequence[str]) -> bool:
    return any(
        path.startswith(SCHEMA_PATH_PREFIXES) or path in SCHEMA_PATH_FILES
        for path in changed_files
    )


def has_unreleased_changes(content: str) -> bool:
    """True when the ``## [Unreleased]`` section has at least one entry line."""
    in_unreleased = False
    for line in content.splitlines():
        if _UNRELEASED_HEADING in line:
            in_unreleased = True
            continue
        if not in_unreleased:
            continue
        if line.startswith("## "):
            break
        if line.strip() and not line.startswith("###"):
            return True
    return False


def has_version_entry(content: str) -> bool:
    """True when a released ``## [X.Y.Z]`` section exists."""
    return _VERSION_ENTRY_RE.search(content) is not None


def check_changelog(
    changed_files: Sequence[str],
    changelog: Optional[str],
    subject: str = CHANGELOG_SUBJECT,
) -> List[CompatibilityIssue]:
    """Require a changelog entry when schema files changed.

    Args:
        changed_files: Paths changed relative to the base reference.
        changelog: Changelog text, or None if the file does not exist.
        subject: Identifier used on produced issues.
    """
    if not has_schema_changes(changed_files):
        logger.info("No schema changes detected, changelog check skipped")
        return []

    if changelog is None:
        return [error(subject, IssueKind.CHANGELOG_MISSING, "CHANGELOG.md not found")]

    if has_unreleased_changes(changelog):
        logger.info("Changelog has unreleased changes documented")
        return []
    if has_version_entry(changelog):
        logger.info("Changelog has a version entry")
        return []

    return [error(
        subject,
        IssueKind.CHANGELOG_NOT_UPDATED,
        "Schema changes need an entry under '## [Unreleased]' or a new "
        "'## [X.Y.Z] - YYYY-MM-DD' section describing what changed and "
        "whether it is a MAJOR, MINOR or PATCH change",
        details={"changed_files": list(changed_files)},
    )]


def read_changelog(path: Path) -> Optional[str]:
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")
