"""Compiled expression grammar shared by the lexer and the parser.

The grammar lives in ``grammar.lark`` next to this module. It is compiled
once at import time into an LALR(1) parser with a basic lexer; the resulting
object is read-only and safe to share between threads.
"""

from __future__ import annotations

from pathlib import Path

from lark import Lark

__all__ = ["GRAMMAR", "LARK_PARSER"]

_GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"
GRAMMAR = _GRAMMAR_PATH.read_text()

LARK_PARSER = Lark(
    GRAMMAR,
    parser="lalr",
    lexer="basic",
    start="start",
    maybe_placeholders=True,
)
