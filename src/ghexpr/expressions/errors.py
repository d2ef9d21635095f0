"""Expression-specific error types for ghexpr.

Every failure the parser or evaluator can report is one of eight kinds
(``ErrorKind``). Each kind has a dedicated exception class so callers can
catch precisely, and ``ErrorInfo`` is the immutable record the result
formatter attaches to a failed ``EvaluationResult``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from ghexpr.exceptions import GhExprError

__all__ = [
    "ErrorKind",
    "ExpressionError",
    "ExpressionSyntaxError",
    "ExpressionEvaluationError",
    "UnknownContextError",
    "UnknownPropertyError",
    "UnknownFunctionError",
    "ArityError",
    "ExpressionTypeError",
    "ExpressionJSONError",
    "CapabilityUnavailableError",
    "ErrorInfo",
]


class ErrorKind(str, Enum):
    """Kind of expression failure."""

    SYNTAX = "SyntaxError"
    UNKNOWN_CONTEXT = "UnknownContext"
    UNKNOWN_PROPERTY = "UnknownProperty"
    UNKNOWN_FUNCTION = "UnknownFunction"
    ARITY = "ArityError"
    TYPE = "TypeError"
    JSON = "JSONError"
    CAPABILITY_UNAVAILABLE = "CapabilityUnavailable"


class ExpressionError(GhExprError):
    """Base exception for all expression-related errors.

    Attributes:
        message: Human-readable error message.
        expression: The expression that caused the error (if known).
        kind: The error kind reported in evaluation results.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.SYNTAX

    def __init__(
        self,
        message: str,
        expression: str | None = None,
    ) -> None:
        """Initialize the ExpressionError.

        Args:
            message: Human-readable error message.
            expression: The expression that caused the error.
        """
        self.expression = expression
        super().__init__(message)


class ExpressionSyntaxError(ExpressionError):
    """Exception raised when an expression cannot be tokenized or parsed.

    Raised for unterminated strings, unrecognized characters, unexpected or
    trailing tokens, unmatched brackets, and expressions nested deeper than
    the configured limit.

    Attributes:
        message: Human-readable error message (with caret line when a
            position is known).
        expression: The expression that failed to parse.
        position: 0-based character position where the error occurred.
        reason: The bare error description without position decoration.
    """

    kind = ErrorKind.SYNTAX

    def __init__(
        self,
        message: str,
        expression: str,
        position: int = 0,
    ) -> None:
        """Initialize the ExpressionSyntaxError.

        Args:
            message: Human-readable error message.
            expression: The expression that failed to parse.
            position: Character position where the error occurred.
        """
        self.position = position
        self.reason = message
        if position > 0 and expression:
            # Point a caret at the offending character
            error_line = f"{expression}\n{' ' * position}^"
            full_message = f"{message} at position {position}:\n{error_line}"
        else:
            full_message = f"{message}: {expression}"
        super().__init__(full_message, expression=expression)


class ExpressionEvaluationError(ExpressionError):
    """Base class for errors raised while walking a parsed expression.

    Attributes:
        message: Human-readable error message.
        expression: The expression that failed to evaluate.
        context_vars: Names available at the failing lookup (for debugging).
    """

    def __init__(
        self,
        message: str,
        expression: str | None = None,
        context_vars: tuple[str, ...] = (),
    ) -> None:
        """Initialize the ExpressionEvaluationError.

        Args:
            message: Human-readable error message.
            expression: The expression that failed to evaluate.
            context_vars: Names available at the failing lookup.
        """
        self.context_vars = context_vars
        if context_vars:
            available = ", ".join(sorted(context_vars))
            message = f"{message} (available: {available})"
        super().__init__(message, expression=expression)


class UnknownContextError(ExpressionEvaluationError):
    """Identifier is not one of the nine context roots."""

    kind = ErrorKind.UNKNOWN_CONTEXT


class UnknownPropertyError(ExpressionEvaluationError):
    """Property does not exist on the value it was read from."""

    kind = ErrorKind.UNKNOWN_PROPERTY


class UnknownFunctionError(ExpressionEvaluationError):
    """Function name is not part of the built-in library."""

    kind = ErrorKind.UNKNOWN_FUNCTION


class ArityError(ExpressionEvaluationError):
    """Function called with an argument count outside its valid range."""

    kind = ErrorKind.ARITY


class ExpressionTypeError(ExpressionEvaluationError):
    """Operand or argument has a kind the operation cannot accept."""

    kind = ErrorKind.TYPE


class ExpressionJSONError(ExpressionEvaluationError):
    """``fromJSON`` received text that is not valid JSON."""

    kind = ErrorKind.JSON


class CapabilityUnavailableError(ExpressionEvaluationError):
    """A built-in needs a host capability that was not supplied."""

    kind = ErrorKind.CAPABILITY_UNAVAILABLE


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    """Expression parsing or evaluation error information.

    Attributes:
        kind: The error kind.
        message: Human-readable error message.
        expression: The expression that failed.
        position: Character position in expression (0 if not applicable).
    """

    kind: ErrorKind
    message: str
    expression: str = ""
    position: int = 0

    @classmethod
    def from_exception(cls, error: ExpressionError) -> ErrorInfo:
        """Build an ErrorInfo from a raised expression error."""
        if isinstance(error, ExpressionSyntaxError):
            return cls(
                kind=error.kind,
                message=error.message,
                expression=error.expression or "",
                position=error.position,
            )
        return cls(
            kind=error.kind,
            message=error.message,
            expression=error.expression or "",
        )

    def to_dict(self) -> dict[str, str]:
        """Render as the ``{kind, message}`` pair used in result output."""
        return {"kind": self.kind.value, "message": self.message}
