"""Host capabilities consumed by built-in functions.

The evaluator never performs I/O itself. The run-status predicates
(``success()``, ``failure()``, ``cancelled()``) and ``hashFiles()`` instead
query read-only capability objects that the host supplies per evaluation.

This module defines the two capability protocols and the implementations the
command-line host uses:

- ``StaticStatus``: a fixed job status.
- ``WorkspaceHasher``: hashes files under a workspace directory the way the
  GitHub runner's ``hashFiles`` does.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol, runtime_checkable

from ghexpr.logging import get_logger

__all__ = [
    "JobStatus",
    "StatusCapability",
    "HashCapability",
    "StaticStatus",
    "WorkspaceHasher",
    "status_from_name",
]

logger = get_logger(__name__)

_READ_CHUNK = 64 * 1024
_DOUBLE_STAR = re.compile(r"\*{2,}")


@dataclass(frozen=True, slots=True)
class JobStatus:
    """Status of the steps that ran before the current one.

    Attributes:
        succeeded: All previous steps succeeded.
        failed: At least one previous step failed.
        cancelled: The workflow run was cancelled.
    """

    succeeded: bool = True
    failed: bool = False
    cancelled: bool = False


@runtime_checkable
class StatusCapability(Protocol):
    """Read-only query for the current job status."""

    def status_of(self) -> JobStatus: ...


@runtime_checkable
class HashCapability(Protocol):
    """Read-only file hashing used by ``hashFiles()``.

    ``hash_of`` returns None when the capability cannot serve the request
    (for example, no workspace is mounted).
    """

    def hash_of(self, patterns: Sequence[str]) -> str | None: ...


@dataclass(frozen=True, slots=True)
class StaticStatus:
    """Status capability that always reports the same status."""

    succeeded: bool = True
    failed: bool = False
    cancelled: bool = False

    def status_of(self) -> JobStatus:
        return JobStatus(
            succeeded=self.succeeded,
            failed=self.failed,
            cancelled=self.cancelled,
        )


def status_from_name(name: str) -> StaticStatus:
    """Build a StaticStatus from ``success``, ``failure`` or ``cancelled``.

    Raises:
        ValueError: For any other name.
    """
    if name == "success":
        return StaticStatus()
    if name == "failure":
        return StaticStatus(succeeded=False, failed=True)
    if name == "cancelled":
        return StaticStatus(succeeded=False, cancelled=True)
    raise ValueError(f"Unknown job status '{name}'")


class WorkspaceHasher:
    """Hash files below a workspace directory.

    Patterns are glob patterns relative to the workspace root; a pattern
    starting with ``!`` removes its matches from the set. Matching files are
    hashed in sorted path order: each file's SHA-256 digest is fed into an
    outer SHA-256, whose hex digest is the result. No matching files yields
    an empty string. Files outside the root are never matched, so absolute
    patterns and ".." components are ignored.

    Attributes:
        root: Workspace directory the patterns are resolved against.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def hash_of(self, patterns: Sequence[str]) -> str | None:
        if not self.root.is_dir():
            logger.debug("workspace_missing", root=str(self.root))
            return None

        try:
            files = self._match(patterns)
            digests = [self._file_digest(path) for path in files]
        except (ValueError, OSError) as e:
            logger.warning(
                "hash_files_failed",
                root=str(self.root),
                patterns=list(patterns),
                error=str(e),
            )
            return None
        if not digests:
            return ""

        outer = hashlib.sha256()
        for digest in digests:
            outer.update(digest)
        logger.debug("files_hashed", count=len(files), patterns=list(patterns))
        return outer.hexdigest()

    def _match(self, patterns: Sequence[str]) -> list[Path]:
        selected: set[Path] = set()
        for pattern in patterns:
            if pattern.startswith("!"):
                selected -= self._files(pattern[1:])
            else:
                selected |= self._files(pattern)
        return sorted(selected)

    def _files(self, pattern: str) -> set[Path]:
        parts = PurePosixPath(pattern).parts
        if not parts or Path(pattern).is_absolute() or ".." in parts:
            logger.debug("pattern_skipped", pattern=pattern)
            return set()
        # ** only recurses as a whole component; inside a name it is a plain *
        parts = tuple(
            part if part == "**" else _DOUBLE_STAR.sub("*", part) for part in parts
        )
        # A trailing ** means everything below, files included
        if parts[-1] == "**":
            parts += ("*",)

        root = self.root.resolve()
        return {
            path
            for path in self.root.glob("/".join(parts))
            if path.is_file() and path.resolve().is_relative_to(root)
        }

    @staticmethod
    def _file_digest(path: Path) -> bytes:
        inner = hashlib.sha256()
        with open(path, "rb") as f:
            while chunk := f.read(_READ_CHUNK):
                inner.update(chunk)
        return inner.digest()
