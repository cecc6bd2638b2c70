"""Historical file lookup: read artifacts as they were at a base reference."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path, PurePosixPath
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Union

from schema_registry_policy.models import HistoryUnavailableError

logger = logging.getLogger("schema_registry_policy.history")


class FileHistory(Protocol):
    """Read-only view of the registry at earlier references."""

    def resolve_ref(self, ref: str) -> Optional[str]:
        """Return a usable reference, or None when it does not exist yet."""
        ...

    def get_file_at_ref(self, path: str, ref: str) -> Optional[str]:
        """Return file content at ``ref``, or None if it did not exist there."""
        ...

    def changed_files(self, ref: str) -> List[str]:
        """Paths changed between ``ref`` and the current revision."""
        ...


class GitHistory:
    """FileHistory backed by the ``git`` command line."""

    def __init__(self, repo_root: Union[str, Path], git: str = "git") -> None:
        self._root = Path(repo_root)
        self._git = git

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        try:
            return subprocess.run(
                [self._git, *args],
                cwd=self._root,
                capture_output=True,
                text=True,
                check=False,
            )
        except (FileNotFoundError, NotADirectoryError, PermissionError) as e:
            raise HistoryUnavailableError(
                f"Cannot run {self._git!r} in {self._root}: {e}"
            ) from e

    def _ensure_repository(self) -> None:
        result = self._run("rev-parse", "--is-inside-work-tree")
        if result.returncode != 0 or result.stdout.strip() != "true":
            raise HistoryUnavailableError(
                f"{self._root} is not inside a git work tree: {result.stderr.strip()}"
            )

    def resolve_ref(self, ref: str) -> Optional[str]:
        """Resolve ``ref`` to a commit.

        Returns None when the reference does not exist (for example the very
        first commit, before the base branch is created).

        Raises:
            HistoryUnavailableError: If git cannot be run or the registry is
                not inside a repository.
        """
        self._ensure_repository()
        result = self._run("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")
        if result.returncode != 0:
            logger.info("Reference %s not found", ref)
            return None
        return ref

    def _relative(self, path: str) -> str:
        candidate = Path(path)
        if candidate.is_absolute():
            toplevel = self._run("rev-parse", "--show-toplevel").stdout.strip()
            candidate = candidate.resolve().relative_to(Path(toplevel).resolve())
        return PurePosixPath(*candidate.parts).as_posix()

    def get_file_at_ref(self, path: str, ref: str) -> Optional[str]:
        # "./" keeps relative paths anchored at the cwd passed to git.
        relative = self._relative(path)
        spec = f"{ref}:{relative}" if Path(path).is_absolute() else f"{ref}:./{relative}"
        result = self._run("show", spec)
        if result.returncode != 0:
            logger.debug("%s did not exist at %s", relative, ref)
            return None
        return result.stdout

    def changed_files(self, ref: str) -> List[str]:
        """Files changed on this branch since it forked from ``ref``.

        Falls back to the last commit when the three-dot range cannot be
        computed, and to an empty list on a repository without history.
        """
        self._ensure_repository()
        for args in (("diff", "--name-only", f"{ref}...HEAD"),
                     ("diff", "--name-only", "HEAD~1", "HEAD")):
            result = self._run(*args)
            if result.returncode == 0:
                return [line for line in result.stdout.splitlines() if line.strip()]
        logger.info("No history to compare against %s", ref)
        return []


class InMemoryHistory:
    """FileHistory over a fixed set of snapshots, for tests and tooling."""

    def __init__(
        self,
        snapshots: Optional[Mapping[str, Mapping[str, str]]] = None,
        changed: Sequence[str] = (),
    ) -> None:
        self._snapshots: Dict[str, Dict[str, str]] = {
            ref: dict(files) for ref, files in (snapshots or {}).items()
        }
        self._changed = list(changed)

    def resolve_ref(self, ref: str) -> Optional[str]:
        return ref if ref in self._snapshots else None

    def get_file_at_ref(self, path: str, ref: str) -> Optional[str]:
        return self._snapshots.get(ref, {}).get(PurePosixPath(path).as_posix())

    def changed_files(self, ref: str) -> List[str]:
        return list(self._changed)
