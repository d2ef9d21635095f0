"""Shared Rich Console instances for ghexpr CLI output.

Rich detects the terminal: styled output in a TTY, plain text when piped.
"""

from __future__ import annotations

from rich.console import Console

__all__ = ["console", "err_console"]

console = Console()
err_console = Console(stderr=True)
