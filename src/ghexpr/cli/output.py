"""Output formatting utilities for the ghexpr CLI.

This module defines output format options and formatting helpers for CLI commands.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from rich.table import Table
from rich.text import Text

from ghexpr.expressions import EvaluationResult, Token
from ghexpr.expressions.values import to_json

__all__ = [
    "OutputFormat",
    "format_error",
    "format_json",
    "format_value",
    "result_table",
    "token_table",
]


class OutputFormat(str, Enum):
    """Supported output formats for CLI commands.

    Values:
        TEXT: Human-readable output (styled when a TTY is attached).
        JSON: Machine-readable JSON output.
    """

    TEXT = "text"
    JSON = "json"


def format_error(
    message: str, details: list[str] | None = None, suggestion: str | None = None
) -> str:
    """Format an error message with optional details and suggestion.

    Args:
        message: Primary error message.
        details: Optional list of detail lines to include.
        suggestion: Optional suggestion for resolving the error.

    Returns:
        Formatted error string with details and suggestion if provided.

    Example:
        >>> print(format_error(
        ...     "Context file not found: ctx.yaml",
        ...     suggestion="Pass --sample to use the built-in context",
        ... ))
        Error: Context file not found: ctx.yaml
        Suggestion: Pass --sample to use the built-in context
    """
    lines = [f"Error: {message}"]

    if details:
        for detail in details:
            lines.append(f"  {detail}")

    if suggestion:
        lines.append(f"Suggestion: {suggestion}")

    return "\n".join(lines)


def format_json(data: Any) -> str:
    """Format data as indented JSON.

    Non-ASCII text is kept as-is.

    Raises:
        TypeError: If data is not JSON-serializable.

    Example:
        >>> format_json({"value": True, "type": "boolean"})
        '{\\n  "value": true,\\n  "type": "boolean"\\n}'
    """
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_value(value: Any) -> str:
    """Render an expression value as JSON text (strings keep their quotes)."""
    return to_json(value)


def result_table(result: EvaluationResult) -> Table:
    """Build a two-column table describing an evaluation result."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")

    if result.error is not None:
        table.add_row("Error", f"[red]{result.error.kind.value}[/red]")
        table.add_row("Message", Text(result.error.message))
        return table

    table.add_row("Value", Text(format_value(result.value)))
    table.add_row("Type", result.type)
    hits = ", ".join(result.context_hits) if result.context_hits else "(none)"
    table.add_row("Context", Text(hits))
    return table


def token_table(tokens: list[Token]) -> Table:
    """Build a table listing tokens with their kind and position."""
    table = Table(title="Tokens")
    table.add_column("Position", justify="right")
    table.add_column("Kind")
    table.add_column("Text")
    for token in tokens:
        table.add_row(str(token.position), token.kind.value, Text(token.value))
    return table
