"""Evaluation results and the one-call evaluation facade.

``evaluate`` runs the whole pipeline (strip wrapper, parse, walk) and packs
the outcome into an ``EvaluationResult``. Expression failures never escape
as exceptions here: they come back as a result whose ``type`` is ``"error"``
and whose ``error`` names the failure kind.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ghexpr.capabilities import HashCapability, StatusCapability
from ghexpr.context import ContextSnapshot
from ghexpr.expressions.errors import ErrorInfo, ExpressionError
from ghexpr.expressions.evaluator import ExpressionEvaluator
from ghexpr.expressions.parser import DEFAULT_MAX_DEPTH, parse_expression
from ghexpr.expressions.values import kind_of, to_plain
from ghexpr.logging import get_logger

__all__ = ["EvaluationResult", "evaluate"]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Outcome of evaluating one expression.

    Attributes:
        value: The resulting value (None on error).
        type: Kind tag of ``value``, or ``"error"``.
        context_hits: Context paths read, duplicate-free, in first-touch order.
        error: Failure details, or None on success.
    """

    value: Any
    type: str
    context_hits: tuple[str, ...] = ()
    error: ErrorInfo | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, value: Any, context_hits: list[str]) -> EvaluationResult:
        return cls(value=value, type=kind_of(value), context_hits=tuple(context_hits))

    @classmethod
    def failed(cls, error: ExpressionError) -> EvaluationResult:
        return cls(value=None, type="error", error=ErrorInfo.from_exception(error))

    def to_dict(self) -> dict[str, Any]:
        """Render as ``{value, type, contextHits, error}``.

        The value is JSON-ready: integral numbers print without a fraction.
        """
        return {
            "value": to_plain(self.value),
            "type": self.type,
            "contextHits": list(self.context_hits),
            "error": self.error.to_dict() if self.error else None,
        }


def evaluate(
    expression: str,
    context: ContextSnapshot | Mapping[str, Any] | None = None,
    *,
    status: StatusCapability | None = None,
    hasher: HashCapability | None = None,
    max_depth: int | None = None,
) -> EvaluationResult:
    """Evaluate an expression against a context snapshot.

    Args:
        expression: Expression text, with or without the ${{ }} wrapper.
        context: Snapshot or mapping of context roots (empty when omitted).
        status: Job status capability for the status predicates.
        hasher: File hash capability for ``hashFiles()``.
        max_depth: Nesting limit for the parser (default 64).

    Returns:
        EvaluationResult carrying either the value and its context hits or
        the error.

    Examples:
        >>> evaluate(
        ...     "github.ref == 'refs/heads/main'",
        ...     {"github": {"ref": "refs/heads/main"}},
        ... ).to_dict()
        {'value': True, 'type': 'boolean', 'contextHits': ['github.ref'], 'error': None}
        >>> evaluate("fromJSON('{bad')").error.kind
        <ErrorKind.JSON: 'JSONError'>
    """
    depth = max_depth if max_depth is not None else DEFAULT_MAX_DEPTH
    try:
        parsed = parse_expression(expression, max_depth=depth)
        evaluator = ExpressionEvaluator(context, status=status, hasher=hasher)
        value, hits = evaluator.evaluate_with_hits(parsed)
    except ExpressionError as e:
        logger.debug(
            "expression_failed",
            expression=expression,
            kind=e.kind.value,
            error=e.message,
        )
        return EvaluationResult.failed(e)

    result = EvaluationResult.ok(value, hits)
    logger.debug(
        "expression_evaluated",
        expression=expression,
        type=result.type,
        hits=len(result.context_hits),
    )
    return result
