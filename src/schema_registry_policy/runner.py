"""Registry-wide orchestration of the compatibility and deprecation policies.

One runner instance covers one invocation. Pipeline for ``run()``:

1. Check the registry root exists (environment-fatal otherwise).
2. Resolve the base reference; an unknown reference skips the diff phases.
3. Diff every schema file against its version at the base reference.
4. Compare the topic mapping and the venue registry.
5. Validate deprecation metadata and version overlap of deprecated schemas.
6. Aggregate everything into a CompatibilityReport.

A file that fails to load becomes an issue; processing always continues
with the remaining artifacts. Files are visited in sorted order, so the same
inputs always produce the same report.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from schema_registry_policy.changelog import check_changelog, read_changelog
from schema_registry_policy.config import RegistryConfig
from schema_registry_policy.deprecation import (
    DEPRECATION_EXTENSION_KEY,
    DeprecationStatus,
    build_recommendations,
    validate_deprecation,
)
from schema_registry_policy.diff_policy import check_schema_compatibility
from schema_registry_policy.history import FileHistory, GitHistory
from schema_registry_policy.models import (
    ArtifactLoadError,
    CompatibilityIssue,
    CompatibilityReport,
    IssueKind,
    RegistryUnavailableError,
    error,
    warning,
)
from schema_registry_policy.overlap import check_version_overlap
from schema_registry_policy.registries import (
    TOPICS_SUBJECT,
    VENUES_SUBJECT,
    check_schema_venues,
    check_topics_compatibility,
    check_venues_compatibility,
    load_topic_mapping,
    load_venue_registry,
)
from schema_registry_policy.report import DeprecationSummary
from schema_registry_policy.snapshot import SchemaSnapshot, schema_name_from_filename
from schema_registry_policy.validation import (
    schema_key,
    validate_example,
    validate_schema_document,
)

logger = logging.getLogger("schema_registry_policy.runner")

T = TypeVar("T")


@dataclass(frozen=True)
class SchemaEntry:
    """One schema file in the working tree, loaded or not."""

    name: str
    path: Path
    relative_path: str
    document: Any = None
    snapshot: Optional[SchemaSnapshot] = None
    load_issue: Optional[CompatibilityIssue] = None


def _read_json(path: Path, subject: str) -> Any:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ArtifactLoadError(subject, str(e)) from e
    return _parse_json(content, subject)


def _parse_json(content: str, subject: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ArtifactLoadError(subject, f"invalid JSON: {e}") from e


def _load_issue(exc: ArtifactLoadError, subject: str, previous: bool = False) -> CompatibilityIssue:
    if previous:
        return warning(
            subject,
            IssueKind.ARTIFACT_LOAD_ERROR,
            f"Previous version could not be parsed ({exc.reason}); treated as new",
        )
    return error(subject, IssueKind.ARTIFACT_LOAD_ERROR, str(exc))


class RegistryCompatibilityRunner:
    """Runs the registry policies for one configuration.

    Args:
        config: Run-scoped configuration.
        history: Historical file lookup. Defaults to git at ``config.root``.
    """

    def __init__(
        self,
        config: RegistryConfig,
        history: Optional[FileHistory] = None,
    ) -> None:
        self.config = config
        self.history: FileHistory = history if history is not None else GitHistory(config.root)

    # ── Loading ──────────────────────────────────────────────────────────

    def _ensure_root(self) -> None:
        if not self.config.root.is_dir():
            raise RegistryUnavailableError(
                f"Registry root not found: {self.config.root}"
            )

    def load_schemas(self) -> List[SchemaEntry]:
        """Load every schema file in sorted order; failures become entries with a load issue."""
        schemas_dir = self.config.schemas_path
        if not schemas_dir.is_dir():
            logger.info("No schemas directory at %s - nothing to check", schemas_dir)
            return []

        entries: List[SchemaEntry] = []
        for path in sorted(p for p in schemas_dir.glob(self.config.schema_glob) if p.is_file()):
            name = schema_name_from_filename(path.name)
            relative = self.config.relative(path)
            try:
                document = _read_json(path, name)
                snapshot = SchemaSnapshot.from_document(name, document)
            except ArtifactLoadError as e:
                logger.warning("Failed to load %s: %s", relative, e.reason)
                entries.append(SchemaEntry(
                    name=name, path=path, relative_path=relative,
                    load_issue=_load_issue(e, name),
                ))
                continue
            entries.append(SchemaEntry(
                name=name, path=path, relative_path=relative,
                document=document, snapshot=snapshot,
            ))
        return entries

    def _load_previous(
        self,
        relative: str,
        ref: str,
        subject: str,
        parse: Callable[[Any], T],
        issues: List[CompatibilityIssue],
    ) -> Optional[T]:
        content = self.history.get_file_at_ref(relative, ref)
        if content is None:
            return None
        try:
            return parse(_parse_json(content, subject))
        except ArtifactLoadError as e:
            logger.warning("%s at %s could not be parsed: %s", relative, ref, e.reason)
            issues.append(_load_issue(e, subject, previous=True))
            return None

    # ── Phases ───────────────────────────────────────────────────────────

    def _schema_phase(
        self, entries: List[SchemaEntry], ref: Optional[str]
    ) -> List[CompatibilityIssue]:
        issues: List[CompatibilityIssue] = []
        for entry in entries:
            if entry.load_issue is not None:
                issues.append(entry.load_issue)
                continue
            if ref is None or entry.snapshot is None:
                continue
            previous = self._load_previous(
                entry.relative_path,
                ref,
                entry.name,
                lambda doc, name=entry.name: SchemaSnapshot.from_document(name, doc),
                issues,
            )
            issues.extend(check_schema_compatibility(previous, entry.snapshot))
        return issues

    def _topics_phase(self, ref: str) -> List[CompatibilityIssue]:
        path = self.config.topics_path
        if not path.is_file():
            return []
        issues: List[CompatibilityIssue] = []
        try:
            current = load_topic_mapping(_read_json(path, TOPICS_SUBJECT))
        except ArtifactLoadError as e:
            return [_load_issue(e, TOPICS_SUBJECT)]
        previous = self._load_previous(
            self.config.relative(path), ref, TOPICS_SUBJECT, load_topic_mapping, issues
        )
        issues.extend(check_topics_compatibility(current, previous))
        return issues

    def _venues_phase(self, ref: str) -> List[CompatibilityIssue]:
        path = self.config.venues_path
        if not path.is_file():
            return []
        issues: List[CompatibilityIssue] = []
        try:
            current = load_venue_registry(_read_json(path, VENUES_SUBJECT))
        except ArtifactLoadError as e:
            return [_load_issue(e, VENUES_SUBJECT)]
        previous = self._load_previous(
            self.config.relative(path), ref, VENUES_SUBJECT, load_venue_registry, issues
        )
        issues.extend(check_venues_compatibility(current, previous))
        return issues

    def _deprecation_issues(self, entry: SchemaEntry) -> List[CompatibilityIssue]:
        snapshot = entry.snapshot
        if snapshot is not None and snapshot.deprecation_error is not None:
            return [error(
                entry.name,
                IssueKind.INVALID_DEPRECATION_METADATA,
                f"Deprecation checks skipped: {snapshot.deprecation_error}",
                field=DEPRECATION_EXTENSION_KEY,
            )]
        if snapshot is None or snapshot.deprecation is None or not snapshot.is_deprecated:
            return []
        metadata = snapshot.deprecation
        issues = validate_deprecation(
            entry.name,
            metadata,
            self.config.current_time(),
            description=snapshot.description or "",
        )
        if metadata.has_version_timeline:
            issues.extend(check_version_overlap(
                entry.name, metadata, self.config.required_overlap
            ))
        else:
            missing = (
                "deprecatedInVersion"
                if metadata.deprecated_in_version is None
                else "removalPlannedInVersion"
            )
            issues.append(warning(
                entry.name,
                IssueKind.OVERLAP_UNVERIFIABLE,
                f"Missing {missing}; version overlap not checked",
                field=missing,
            ))
        return issues

    # ── Entry points ─────────────────────────────────────────────────────

    def run(self) -> CompatibilityReport:
        """Full compatibility run against ``config.base_ref``.

        Raises:
            RegistryUnavailableError: If the registry root does not exist.
            HistoryUnavailableError: If the history provider cannot be used.
        """
        self._ensure_root()
        base_ref = self.config.base_ref
        logger.info("Checking backward compatibility against %s", base_ref)

        ref = self.history.resolve_ref(base_ref)
        skipped_reason: Optional[str] = None
        if ref is None:
            skipped_reason = (
                f"No base reference found ({base_ref}), assuming first commit - "
                "skipping compatibility diff"
            )
            logger.info(skipped_reason)

        entries = self.load_schemas()
        issues: List[CompatibilityIssue] = self._schema_phase(entries, ref)
        if ref is not None:
            issues.extend(self._topics_phase(ref))
            issues.extend(self._venues_phase(ref))
        for entry in entries:
            issues.extend(self._deprecation_issues(entry))

        report = CompatibilityReport(
            issues=tuple(issues),
            base_ref=ref,
            skipped_reason=skipped_reason,
        )
        logger.info("Compatibility run finished: %r", report)
        return report

    def run_deprecations(self) -> DeprecationSummary:
        """Deprecation and version-overlap checks only; needs no history."""
        self._ensure_root()
        now = self.config.current_time()
        entries = self.load_schemas()

        issues: List[CompatibilityIssue] = []
        statuses: List[DeprecationStatus] = []
        active = 0
        invalid = 0
        for entry in entries:
            if entry.load_issue is not None:
                issues.append(entry.load_issue)
                invalid += 1
                continue
            snapshot = entry.snapshot
            if snapshot is not None and snapshot.deprecation_error is not None:
                issues.extend(self._deprecation_issues(entry))
                invalid += 1
                continue
            if snapshot is None or snapshot.deprecation is None or not snapshot.is_deprecated:
                active += 1
                continue
            statuses.append(DeprecationStatus.from_metadata(
                entry.name,
                snapshot.deprecation,
                now,
                self.config.urgency_window_days,
            ))
            issues.extend(self._deprecation_issues(entry))

        return DeprecationSummary(
            total=len(entries),
            active=active,
            deprecated=len(statuses),
            invalid=invalid,
            schemas=tuple(statuses),
            issues=tuple(issues),
            recommendations=tuple(build_recommendations(statuses)),
        )

    def run_validation(self) -> CompatibilityReport:
        """Structural checks: meta-schema, registry conventions, venues, examples."""
        self._ensure_root()
        issues: List[CompatibilityIssue] = []

        venues: Optional[List[str]] = None
        if self.config.venues_path.is_file():
            try:
                venues = load_venue_registry(_read_json(self.config.venues_path, VENUES_SUBJECT))
            except ArtifactLoadError as e:
                issues.append(_load_issue(e, VENUES_SUBJECT))

        known: Dict[str, Dict[str, Any]] = {}
        for entry in self.load_schemas():
            if entry.load_issue is not None:
                issues.append(entry.load_issue)
                continue
            schema_issues = validate_schema_document(
                entry.name, entry.document, self.config.id_prefix
            )
            issues.extend(schema_issues)
            if entry.snapshot is not None and venues is not None:
                issues.extend(check_schema_venues(
                    entry.snapshot, venues, self.config.venue_fields
                ))
            if not any(i.kind == IssueKind.SCHEMA_INVALID for i in schema_issues):
                known[schema_key(entry.name, entry.document)] = entry.document

        issues.extend(self._example_issues(known))
        return CompatibilityReport(issues=tuple(issues))

    def _example_issues(self, known: Dict[str, Dict[str, Any]]) -> List[CompatibilityIssue]:
        examples_dir = self.config.examples_path
        if not examples_dir.is_dir():
            logger.info("No examples directory at %s - skipping", examples_dir)
            return []
        issues: List[CompatibilityIssue] = []
        for path in sorted(p for p in examples_dir.glob("*.json") if p.is_file()):
            subject = f"examples/{path.name}"
            try:
                example = _read_json(path, subject)
            except ArtifactLoadError as e:
                issues.append(_load_issue(e, subject))
                continue
            issues.extend(validate_example(subject, example, known))
        return issues

    def run_changelog(self) -> CompatibilityReport:
        """Require a changelog entry when schemas changed since ``base_ref``."""
        self._ensure_root()
        changed = self.history.changed_files(self.config.base_ref)
        issues = check_changelog(changed, read_changelog(self.config.changelog_path))
        return CompatibilityReport(issues=tuple(issues), base_ref=self.config.base_ref)

