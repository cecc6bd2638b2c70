"""Release hygiene: the published package version must match the release tag."""

from __future__ import annotations

from typing import List

from packaging.version import InvalidVersion, Version

from schema_registry_policy.models import CompatibilityIssue, IssueKind, error

RELEASE_SUBJECT: str = "release"


def strip_tag_prefix(tag: str) -> str:
    """``v1.0.1`` -> ``1.0.1``."""
    return tag[1:] if tag.startswith("v") else tag


def check_release_tag(package_version: str, tag: str) -> List[CompatibilityIssue]:
    """Compare a package version with a git tag.

    Versions are compared as PEP 440 versions, so ``1.0`` and ``1.0.0``
    match.
    """
    tag_version = strip_tag_prefix(tag.strip())
    try:
        expected = Version(package_version)
        actual = Version(tag_version)
    except InvalidVersion as e:
        return [error(
            RELEASE_SUBJECT,
            IssueKind.INVALID_VERSION,
            f"Cannot compare package version {package_version!r} with tag {tag!r}: {e}",
        )]

    if expected != actual:
        return [error(
            RELEASE_SUBJECT,
            IssueKind.VERSION_MISMATCH,
            f"Version mismatch: package version {package_version} "
            f"does not match tag {tag}",
            value=tag,
            details={"package_version": package_version, "tag_version": tag_version},
        )]
    return []
