"""SemVer-like version parsing and minor-version distance."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

# Returned by minor_distance() when the removal version bumps the major.
MAJOR_BUMP_DISTANCE: int = 10

_PART_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True, order=True)
class SemVer:
    """A ``major.minor.patch`` version, ordered lexicographically."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def tag(self) -> str:
        """Render with the conventional ``v`` prefix used by release tags."""
        return f"v{self}"


def parse_version(value: object) -> Optional[SemVer]:
    """Parse ``"v1.2.3"`` or ``"1.2.3"`` into a SemVer.

    Returns None for anything that is not exactly three dot-separated
    non-negative integers (after stripping one leading ``v``). Never raises.
    """
    if not isinstance(value, str):
        return None
    text = value[1:] if value.startswith("v") else value
    parts = text.split(".")
    if len(parts) != 3:
        return None
    if not all(_PART_RE.fullmatch(p) for p in parts):
        return None
    major, minor, patch = (int(p) for p in parts)
    return SemVer(major, minor, patch)


def compare_versions(left: object, right: object) -> Optional[int]:
    """Return -1, 0 or 1 comparing two version strings, or None if either is invalid."""
    a = parse_version(left)
    b = parse_version(right)
    if a is None or b is None:
        return None
    return (a > b) - (a < b)


def minor_distance(deprecated_in: object, removal_in: object) -> Optional[int]:
    """Number of minor releases between deprecation and planned removal.

    Args:
        deprecated_in: Version the schema was deprecated in.
        removal_in: Version the schema is planned to be removed in.

    Returns:
        ``removal.minor - deprecated.minor`` when the majors match (may be
        negative), MAJOR_BUMP_DISTANCE when removal bumps the major, and None
        when either version is malformed or the removal major is lower.
    """
    dep = parse_version(deprecated_in)
    rem = parse_version(removal_in)
    if dep is None or rem is None:
        return None
    if dep.major == rem.major:
        return rem.minor - dep.minor
    if rem.major > dep.major:
        return MAJOR_BUMP_DISTANCE
    return None


def suggest_removal_version(
    deprecated_in: object, required_overlap: int = 1
) -> Optional[str]:
    """Earliest removal version that leaves ``required_overlap`` full minors."""
    dep = parse_version(deprecated_in)
    if dep is None:
        return None
    return SemVer(dep.major, dep.minor + required_overlap + 1, 0).tag()
