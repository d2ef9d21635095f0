"""CLI utilities for ghexpr.

This module provides CLI-specific utilities including context management
and output formatting.
"""

from __future__ import annotations

from ghexpr.cli.context import CLIContext, ExitCode
from ghexpr.cli.output import OutputFormat

__all__ = [
    "CLIContext",
    "ExitCode",
    "OutputFormat",
]
