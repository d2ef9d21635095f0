"""CLI context and exit codes for ghexpr."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

from ghexpr.capabilities import StaticStatus, WorkspaceHasher, status_from_name
from ghexpr.config import GhExprConfig
from ghexpr.context import ContextSnapshot, load_context
from ghexpr.examples import sample_context

__all__ = [
    "ExitCode",
    "CLIContext",
]


class ExitCode(IntEnum):
    """Standard exit codes for the ghexpr CLI.

    - 0 for success
    - 1 for an expression that failed to parse or evaluate
    - 2 for bad usage or configuration (click's own usage errors also use 2)
    """

    SUCCESS = 0
    FAILURE = 1
    USAGE = 2


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Type-safe CLI context containing global options and configuration.

    Attributes:
        config: Loaded ghexpr configuration.
        config_path: Path to config file (if specified via --config).
        verbosity: Verbosity level (0=default, 1=INFO, 2+=DEBUG).
        quiet: Suppress non-essential output.
    """

    config: GhExprConfig
    config_path: Path | None = None
    verbosity: int = 0
    quiet: bool = False

    def status_for(self, name: str | None) -> StaticStatus:
        """Job status from a command option, falling back to the config."""
        return status_from_name(name or self.config.status)

    def hasher_for(self, workspace: Path | None) -> WorkspaceHasher | None:
        """Workspace hasher from a command option, falling back to the config."""
        root = workspace or self.config.workspace
        return WorkspaceHasher(root) if root is not None else None

    def snapshot_for(
        self, context_file: Path | None, sample: bool = False
    ) -> ContextSnapshot:
        """Context snapshot selected by command options.

        ``--sample`` wins over a context file; the configured context file
        is used when neither option is given.

        Raises:
            ContextLoadError: If the context file cannot be loaded.
        """
        if sample:
            return sample_context()
        path = context_file or self.config.context_file
        if path is None:
            return ContextSnapshot()
        return load_context(path)
