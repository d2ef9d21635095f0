from __future__ import annotations


class GhExprError(Exception):
    """Base exception class for all ghexpr-specific errors.

    This is the root of the ghexpr exception hierarchy. Catching it at the
    CLI boundary handles every failure the package reports on purpose while
    letting system exceptions propagate naturally.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            snapshot = load_context(path)
        except GhExprError as e:
            logger.error("context_load_failed", error=e.message)
            sys.exit(1)
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the GhExprError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
