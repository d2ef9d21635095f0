"""ghexpr exception hierarchy.

All package exceptions can be imported from here:
    from ghexpr.exceptions import ConfigError, ContextLoadError, GhExprError

Expression errors live next to the parser and evaluator in
``ghexpr.expressions.errors`` and also derive from ``GhExprError``.
"""

from __future__ import annotations

from ghexpr.exceptions.base import GhExprError
from ghexpr.exceptions.config import ConfigError
from ghexpr.exceptions.context import ContextLoadError

__all__ = [
    "GhExprError",
    "ConfigError",
    "ContextLoadError",
]
