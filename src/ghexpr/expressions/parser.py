"""Expression parser models and functions.

This module provides the AST for expressions written inside ${{ ... }}
placeholders and the functions that build it.

Expression syntax:
- ${{ github.ref }} - Context root with property access
- ${{ matrix.include[0] }} - Array index access (bracket notation)
- ${{ github.event.commits.*.message }} - Array filter/projection
- ${{ contains(github.ref, 'release/') }} - Built-in function call
- ${{ !cancelled() }} - Negation
- ${{ github.run_number >= 40 }} - Comparison
- ${{ a == 'x' && b || 'fallback' }} - Value-returning logical operators

Implementation:
The grammar in grammar.lark is compiled by Lark into an LALR(1) parser.
The parse tree is turned into frozen AST dataclasses by a non-recursive
transformer that also enforces a nesting-depth limit, so neither parsing
nor the later evaluation walk can exhaust the interpreter stack.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from lark import Token as LarkToken
from lark import Transformer_NonRecursive
from lark.exceptions import (
    UnexpectedCharacters,
    UnexpectedInput,
    UnexpectedToken,
    VisitError,
)

from ghexpr.expressions.errors import ExpressionSyntaxError
from ghexpr.expressions.grammar import LARK_PARSER
from ghexpr.expressions.lexer import character_error, strip_wrapper
from ghexpr.expressions.values import to_number

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "BinaryOperator",
    "Literal",
    "ContextRoot",
    "PropertyAccess",
    "IndexAccess",
    "Wildcard",
    "FunctionCall",
    "UnaryNot",
    "BinaryOp",
    "Node",
    "ParsedExpression",
    "parse_expression",
    "extract_all",
    "placeholder_spans",
]

DEFAULT_MAX_DEPTH = 64


class BinaryOperator(str, Enum):
    """Binary operators, comparison and logical."""

    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    AND = "&&"
    OR = "||"

    @property
    def is_logical(self) -> bool:
        return self in (BinaryOperator.AND, BinaryOperator.OR)


@dataclass(frozen=True, slots=True)
class Literal:
    """A literal value: string, number, true, false or null."""

    value: Any


@dataclass(frozen=True, slots=True)
class ContextRoot:
    """A bare identifier naming one of the context roots (e.g. ``github``)."""

    name: str


@dataclass(frozen=True, slots=True)
class PropertyAccess:
    """``base.name``: object member lookup, or projection over an array."""

    base: Node
    name: str


@dataclass(frozen=True, slots=True)
class IndexAccess:
    """``base[index]``: array element lookup."""

    base: Node
    index: Node


@dataclass(frozen=True, slots=True)
class Wildcard:
    """``base.*`` or ``base[*]``: the elements of an array or values of an object."""

    base: Node


@dataclass(frozen=True, slots=True)
class FunctionCall:
    """A call of a built-in function with its ordered argument expressions."""

    name: str
    args: tuple[Node, ...]


@dataclass(frozen=True, slots=True)
class UnaryNot:
    """``!operand``."""

    operand: Node


@dataclass(frozen=True, slots=True)
class BinaryOp:
    """A comparison or logical operation."""

    op: BinaryOperator
    left: Node
    right: Node


Node = (
    Literal
    | ContextRoot
    | PropertyAccess
    | IndexAccess
    | Wildcard
    | FunctionCall
    | UnaryNot
    | BinaryOp
)


@dataclass(frozen=True, slots=True)
class ParsedExpression:
    """A parsed expression ready for evaluation.

    Attributes:
        raw: Original expression string (including ${{ }} wrapper if given).
        source: The unwrapped expression text the AST was built from.
        root: Root node of the AST.

    Examples:
        >>> parsed = parse_expression("${{ github.ref }}")
        >>> parsed.root
        PropertyAccess(base=ContextRoot(name='github'), name='ref')
    """

    raw: str
    source: str
    root: Node


_STRING_ESCAPE = re.compile(r"\\(.)", re.DOTALL)
_STRING_LITERAL = re.compile(r"'(?:[^'\\]|\\.)*'|" r'"(?:[^"\\]|\\.)*"', re.DOTALL)


class _ExpressionTransformer(Transformer_NonRecursive):
    """Transform the Lark parse tree into AST nodes.

    Tracks the depth of every node it builds and rejects trees deeper than
    ``max_depth``.
    """

    def __init__(self, source: str, max_depth: int) -> None:
        super().__init__()
        self._source = source
        self._max_depth = max_depth
        self._depths: dict[int, int] = {}

    def _track(self, node: Node, *children: Node) -> Node:
        depth = 1 + max((self._depths.get(id(c), 1) for c in children), default=0)
        if depth > self._max_depth:
            raise ExpressionSyntaxError(
                f"Expression is nested too deeply (limit {self._max_depth})",
                expression=self._source,
                position=0,
            )
        self._depths[id(node)] = depth
        return node

    # Literals

    def string(self, items: list[LarkToken]) -> Literal:
        text = str(items[0])[1:-1]
        return Literal(_STRING_ESCAPE.sub(r"\1", text))

    def number(self, items: list[LarkToken]) -> Literal:
        # All numbers are doubles
        return Literal(to_number(str(items[0])))

    def true(self, items: list[LarkToken]) -> Literal:
        return Literal(True)

    def false(self, items: list[LarkToken]) -> Literal:
        return Literal(False)

    def null(self, items: list[LarkToken]) -> Literal:
        return Literal(None)

    # References

    def context_root(self, items: list[LarkToken]) -> ContextRoot:
        return ContextRoot(str(items[0]))

    def property_access(self, items: list[Any]) -> Node:
        base, name = items
        return self._track(PropertyAccess(base, str(name)), base)

    def index_access(self, items: list[Node]) -> Node:
        base, index = items
        return self._track(IndexAccess(base, index), base, index)

    def wildcard(self, items: list[Node]) -> Node:
        base = items[0]
        return self._track(Wildcard(base), base)

    def arguments(self, items: list[Node]) -> list[Node]:
        return items

    def function_call(self, items: list[Any]) -> Node:
        name, args = items
        arg_nodes = tuple(args) if args is not None else ()
        return self._track(FunctionCall(str(name), arg_nodes), *arg_nodes)

    # Operators

    def not_op(self, items: list[Node]) -> Node:
        operand = items[0]
        return self._track(UnaryNot(operand), operand)

    def compare(self, items: list[Any]) -> Node:
        left, op, right = items
        return self._track(BinaryOp(BinaryOperator(str(op)), left, right), left, right)

    def and_op(self, items: list[Node]) -> Node:
        left, right = items
        return self._track(BinaryOp(BinaryOperator.AND, left, right), left, right)

    def or_op(self, items: list[Node]) -> Node:
        left, right = items
        return self._track(BinaryOp(BinaryOperator.OR, left, right), left, right)


def _token_error(error: UnexpectedToken, source: str) -> ExpressionSyntaxError:
    """Map a Lark token error to an ExpressionSyntaxError."""
    token = error.token
    expected = error.expected or set()

    if token.type == "$END":
        if "_RPAR" in expected:
            message = "Missing closing ')'"
        elif "_RSQB" in expected:
            message = "Missing closing ']'"
        else:
            message = "Unexpected end of expression"
        return ExpressionSyntaxError(message, expression=source, position=len(source))

    position = token.start_pos or 0
    if token.type in ("_RPAR", "_RSQB") and token.type not in expected:
        message = f"Unmatched closing '{token}'"
    else:
        message = f"Unexpected token '{token}'"
    return ExpressionSyntaxError(message, expression=source, position=position)


def parse_expression(
    expression: str,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ParsedExpression:
    """Parse an expression string into an AST.

    Args:
        expression: Expression string to parse (with or without ${{ }} wrapper)
        max_depth: Maximum nesting depth of the resulting tree.

    Returns:
        ParsedExpression holding the AST root.

    Raises:
        ExpressionSyntaxError: For invalid expression syntax

    Examples:
        >>> parse_expression("a == b && c == d").root  # doctest: +ELLIPSIS
        BinaryOp(op=<BinaryOperator.AND: '&&'>, left=BinaryOp(...), right=BinaryOp(...))
        >>> parse_expression("${{ !cancelled() }}").root
        UnaryNot(operand=FunctionCall(name='cancelled', args=()))
    """
    source, _ = strip_wrapper(expression)

    if not source:
        raise ExpressionSyntaxError(
            "Empty expression",
            expression=expression,
            position=0,
        )

    try:
        tree = LARK_PARSER.parse(source)
        root = _ExpressionTransformer(source, max_depth).transform(tree)
    except UnexpectedCharacters as e:
        raise character_error(e, source) from e
    except UnexpectedToken as e:
        raise _token_error(e, source) from e
    except UnexpectedInput as e:
        raise ExpressionSyntaxError(
            "Invalid expression syntax",
            expression=source,
            position=getattr(e, "pos_in_stream", 0) or 0,
        ) from e
    except VisitError as e:
        if isinstance(e.orig_exc, ExpressionSyntaxError):
            raise e.orig_exc from None
        raise

    return ParsedExpression(raw=expression, source=source, root=root)


def placeholder_spans(text: str) -> Iterator[tuple[int, int]]:
    """Yield the ``(start, end)`` offsets of each ${{ ... }} placeholder.

    The closing ``}}`` is only recognised outside string literals, so
    ``${{ format('}}') }}`` is one placeholder. A placeholder with an
    unterminated string ends at the next ``}}`` and fails when parsed.
    """
    start = text.find("${{")
    while start != -1:
        end = _closing_braces(text, start + 3)
        if end == -1:
            return
        yield start, end
        start = text.find("${{", end)


def _closing_braces(text: str, pos: int) -> int:
    while pos < len(text):
        if text[pos] in "'\"":
            match = _STRING_LITERAL.match(text, pos)
            if match is None:
                close = text.find("}}", pos)
                return -1 if close == -1 else close + 2
            pos = match.end()
        elif text.startswith("}}", pos):
            return pos + 2
        else:
            pos += 1
    return -1


def extract_all(text: str) -> list[str]:
    """Find all ${{ ... }} placeholders in text.

    Args:
        text: Text containing zero or more placeholders

    Returns:
        The full placeholder strings in the order they appear

    Examples:
        >>> extract_all("Deploy ${{ github.ref }} by ${{ github.actor }}")
        ['${{ github.ref }}', '${{ github.actor }}']
        >>> extract_all("No expressions here")
        []
    """
    if not text:
        return []
    return [text[start:end] for start, end in placeholder_spans(text)]
