from __future__ import annotations

from pathlib import Path

from ghexpr.exceptions.base import GhExprError


class ContextLoadError(GhExprError):
    """Exception raised when a context snapshot cannot be built.

    Covers unreadable or malformed snapshot files as well as data that does
    not fit the nine-root context model.

    Attributes:
        message: Human-readable error message.
        path: File the snapshot was being loaded from, if any.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)
