"""Expression evaluator.

This module provides the ExpressionEvaluator class for evaluating parsed
expressions against a context snapshot.

Expression evaluation:
- Context roots: ${{ github }} -> context["github"]
- Property access: ${{ github.event.ref }} -> context["github"]["event"]["ref"]
- Projection: ${{ github.event.commits.*.message }} -> list of messages
- Index access: ${{ matrix.include[0] }} -> first element of the array
- Logical operators return one of their operands and short-circuit
- Template substitution: "Ref ${{ github.ref }}" -> "Ref refs/heads/main"

Every context value that is consumed during a walk (by an operator, a
function argument, an index expression, or as the final result) is recorded
as a context hit, e.g. ``github.ref`` or ``matrix.include[0]``. Hits are
accumulated per call, so one evaluator can serve concurrent callers.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from ghexpr.capabilities import HashCapability, StatusCapability
from ghexpr.context import CONTEXT_ROOTS, ContextSnapshot
from ghexpr.expressions.errors import (
    ExpressionEvaluationError,
    ExpressionTypeError,
    UnknownContextError,
    UnknownPropertyError,
)
from ghexpr.expressions.functions import (
    DEFAULT_LIBRARY,
    CallContext,
    FunctionLibrary,
)
from ghexpr.expressions.parser import (
    DEFAULT_MAX_DEPTH,
    BinaryOp,
    BinaryOperator,
    ContextRoot,
    FunctionCall,
    IndexAccess,
    Literal,
    Node,
    ParsedExpression,
    PropertyAccess,
    UnaryNot,
    Wildcard,
    parse_expression,
    placeholder_spans,
)
from ghexpr.expressions.values import (
    is_truthy,
    kind_of,
    loose_equals,
    to_json,
    to_number,
    to_string,
)

__all__ = ["ExpressionEvaluator"]

# (value, hit path or None when the value is not context-derived)
_Resolved = tuple[Any, str | None]


class _Walk:
    """State of a single evaluation: the evaluator plus its hit list."""

    def __init__(self, evaluator: ExpressionEvaluator) -> None:
        self._context = evaluator._context
        self._library = evaluator._library
        self._call_context = evaluator._call_context
        self.hits: list[str] = []
        self._seen: set[str] = set()

    def _record(self, path: str | None) -> None:
        if path is not None and path not in self._seen:
            self._seen.add(path)
            self.hits.append(path)

    def value(self, node: Node) -> Any:
        """Evaluate a node whose value is consumed, recording its path."""
        value, path = self.resolve(node)
        self._record(path)
        return value

    def resolve(self, node: Node) -> _Resolved:
        """Evaluate a node without recording, returning its hit path."""
        if isinstance(node, Literal):
            return node.value, None
        if isinstance(node, ContextRoot):
            return self._context_root(node)
        if isinstance(node, PropertyAccess):
            return self._property_access(node)
        if isinstance(node, IndexAccess):
            return self._index_access(node)
        if isinstance(node, Wildcard):
            return self._wildcard(node)
        if isinstance(node, FunctionCall):
            return self._function_call(node), None
        if isinstance(node, UnaryNot):
            return not is_truthy(self.value(node.operand)), None
        if isinstance(node, BinaryOp):
            return self._binary_op(node)
        raise ExpressionEvaluationError(f"Unknown node type: {type(node).__name__}")

    def _context_root(self, node: ContextRoot) -> _Resolved:
        if node.name not in CONTEXT_ROOTS:
            raise UnknownContextError(
                f"Unknown context '{node.name}'",
                context_vars=CONTEXT_ROOTS,
            )
        return self._context.get(node.name, {}), node.name

    def _property_access(self, node: PropertyAccess) -> _Resolved:
        base, path = self.resolve(node.base)
        kind = kind_of(base)

        if kind == "object":
            if node.name not in base:
                where = f"'{path}'" if path else "object"
                raise UnknownPropertyError(
                    f"Property '{node.name}' does not exist on {where}",
                    context_vars=tuple(str(key) for key in base),
                )
            return base[node.name], _join_path(path, node.name)

        if kind == "array":
            # Implicit projection over the elements
            projected = [
                item.get(node.name) if isinstance(item, dict) else None
                for item in base
            ]
            if path is None:
                return projected, None
            if path.endswith(".*"):
                return projected, f"{path}.{node.name}"
            return projected, f"{path}.*.{node.name}"

        raise UnknownPropertyError(
            f"Cannot read property '{node.name}' of {kind}"
            + (f" value '{path}'" if path else "")
        )

    def _index_access(self, node: IndexAccess) -> _Resolved:
        base, path = self.resolve(node.base)
        index_value = self.value(node.index)

        kind = kind_of(base)
        if kind != "array":
            raise ExpressionTypeError(f"Cannot index {kind}: not an array")

        number = to_number(index_value)
        if math.isnan(number) or math.isinf(number):
            raise ExpressionTypeError(
                f"Array index must be a number, got {to_json(index_value)}"
            )
        index = int(number)
        if index < 0 or index >= len(base):
            raise ExpressionTypeError(
                f"Array index {index} out of range (length: {len(base)})"
            )
        return base[index], (f"{path}[{index}]" if path else None)

    def _wildcard(self, node: Wildcard) -> _Resolved:
        base, path = self.resolve(node.base)
        kind = kind_of(base)
        if kind == "array":
            items = list(base)
        elif kind == "object":
            items = list(base.values())
        else:
            items = []
        return items, (f"{path}.*" if path else None)

    def _function_call(self, node: FunctionCall) -> Any:
        builtin = self._library.get(node.name)
        args = [self.value(arg) for arg in node.args]
        return builtin(self._call_context, args)

    def _binary_op(self, node: BinaryOp) -> _Resolved:
        op = node.op
        if op.is_logical:
            left, left_path = self.resolve(node.left)
            self._record(left_path)
            if op == BinaryOperator.AND and not is_truthy(left):
                return left, left_path
            if op == BinaryOperator.OR and is_truthy(left):
                return left, left_path
            return self.resolve(node.right)

        left = self.value(node.left)
        right = self.value(node.right)
        if op == BinaryOperator.EQ:
            return loose_equals(left, right), None
        if op == BinaryOperator.NE:
            return not loose_equals(left, right), None
        return _compare(op, left, right), None


def _join_path(path: str | None, name: str) -> str | None:
    return f"{path}.{name}" if path else None


def _compare(op: BinaryOperator, left: Any, right: Any) -> bool:
    """Compare two values numerically for ``<``, ``<=``, ``>``, ``>=``."""
    left_number = _comparable(left, op)
    right_number = _comparable(right, op)
    if op == BinaryOperator.LT:
        return left_number < right_number
    if op == BinaryOperator.LE:
        return left_number <= right_number
    if op == BinaryOperator.GT:
        return left_number > right_number
    return left_number >= right_number


def _comparable(value: Any, op: BinaryOperator) -> float:
    kind = kind_of(value)
    if kind in ("array", "object"):
        raise ExpressionTypeError(f"Cannot compare {kind} with '{op.value}'")
    number = to_number(value)
    if math.isnan(number):
        raise ExpressionTypeError(
            f"Cannot compare non-numeric value {to_json(value)} with '{op.value}'"
        )
    return number


class ExpressionEvaluator:
    """Evaluates parsed expressions against a context snapshot.

    The evaluator holds the snapshot, the host capabilities and the function
    library. It keeps no per-evaluation state, so it can be reused and shared.

    Attributes:
        context: The nine context roots (read-only).

    Example:
        ```python
        evaluator = ExpressionEvaluator(
            {"github": {"ref": "refs/heads/main"}},
        )

        # Evaluate single expression
        expr = parse_expression("${{ github.ref == 'refs/heads/main' }}")
        evaluator.evaluate_with_hits(expr)  # (True, ["github.ref"])

        # Evaluate template string
        evaluator.evaluate_string("Ref: ${{ github.ref }}")
        # "Ref: refs/heads/main"
        ```
    """

    def __init__(
        self,
        context: ContextSnapshot | Mapping[str, Any] | None = None,
        *,
        status: StatusCapability | None = None,
        hasher: HashCapability | None = None,
        library: FunctionLibrary | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        """Initialize the ExpressionEvaluator.

        Args:
            context: Snapshot or plain mapping of root name to object.
            status: Job status capability for the status predicates.
            hasher: File hash capability for ``hashFiles()``.
            library: Function library (defaults to the built-ins).
            max_depth: Nesting limit used when ``evaluate_string`` parses
                placeholders.
        """
        if isinstance(context, ContextSnapshot):
            self._context: Mapping[str, Any] = context.as_dict()
        else:
            self._context = context or {}
        self._library = library or DEFAULT_LIBRARY
        self._call_context = CallContext(status=status, hasher=hasher)
        self._max_depth = max_depth

    @property
    def context(self) -> Mapping[str, Any]:
        return self._context

    def evaluate(self, expr: ParsedExpression | Node) -> Any:
        """Evaluate a parsed expression and return its value.

        Args:
            expr: ParsedExpression or bare AST node.

        Returns:
            The resulting value.

        Raises:
            ExpressionEvaluationError: Subclass matching the failure kind.
        """
        value, _ = self.evaluate_with_hits(expr)
        return value

    def evaluate_with_hits(self, expr: ParsedExpression | Node) -> tuple[Any, list[str]]:
        """Evaluate and also report the context paths that were read.

        Args:
            expr: ParsedExpression or bare AST node.

        Returns:
            Tuple of (value, context hits in first-touch order).

        Raises:
            ExpressionEvaluationError: Subclass matching the failure kind.

        Examples:
            >>> evaluator = ExpressionEvaluator({"env": {"NODE_VERSION": ""}})
            >>> evaluator.evaluate_with_hits(
            ...     parse_expression("env.NODE_VERSION || '18'")
            ... )
            ('18', ['env.NODE_VERSION'])
        """
        if isinstance(expr, ParsedExpression):
            root, source = expr.root, expr.source
        else:
            root, source = expr, None

        walk = _Walk(self)
        try:
            value = walk.value(root)
        except ExpressionEvaluationError as e:
            if e.expression is None:
                e.expression = source
            raise
        # Reject host values outside the value model
        kind_of(value)
        return value, walk.hits

    def evaluate_string(self, text: str) -> str:
        """Evaluate all expressions in a text string.

        Finds all ${{ ... }} placeholders in the text, evaluates them, and
        substitutes the results back into the string. Scalars are converted
        with string coercion; arrays and objects are rendered as JSON.

        Args:
            text: Text containing zero or more placeholders.

        Returns:
            Text with all placeholders replaced by their evaluated values.

        Raises:
            ExpressionError: If any placeholder fails to parse or evaluate.

        Examples:
            >>> evaluator = ExpressionEvaluator(
            ...     {"github": {"actor": "octocat", "run_number": 42}},
            ... )
            >>> evaluator.evaluate_string(
            ...     "Run ${{ github.run_number }} by ${{ github.actor }}"
            ... )
            'Run 42 by octocat'
        """
        if not text:
            return text

        rendered: dict[str, str] = {}
        pieces: list[str] = []
        last = 0
        for start, end in placeholder_spans(text):
            placeholder = text[start:end]
            if placeholder not in rendered:
                value = self.evaluate(
                    parse_expression(placeholder, max_depth=self._max_depth)
                )
                if kind_of(value) in ("array", "object"):
                    rendered[placeholder] = to_json(value)
                else:
                    rendered[placeholder] = to_string(value)
            pieces.append(text[last:start])
            pieces.append(rendered[placeholder])
            last = end
        if not pieces:
            return text
        pieces.append(text[last:])
        return "".join(pieces)
