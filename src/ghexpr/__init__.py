"""ghexpr - GitHub Actions ${{ }} expression evaluator.

Evaluate workflow expressions against a snapshot of the workflow contexts
and see which context values they read:

    from ghexpr import evaluate

    result = evaluate(
        "github.ref == 'refs/heads/main'",
        {"github": {"ref": "refs/heads/main"}},
    )
    result.value         # True
    result.context_hits  # ("github.ref",)
"""

from __future__ import annotations

__version__ = "0.1.0"

from ghexpr.capabilities import JobStatus, StaticStatus, WorkspaceHasher  # noqa: E402
from ghexpr.context import (  # noqa: E402
    CONTEXT_ROOTS,
    ContextSnapshot,
    ContextVariable,
    load_context,
)
from ghexpr.exceptions import ConfigError, ContextLoadError, GhExprError  # noqa: E402
from ghexpr.expressions import (  # noqa: E402
    ErrorKind,
    EvaluationResult,
    ExpressionError,
    ExpressionEvaluator,
    evaluate,
    extract_all,
    parse_expression,
    tokenize,
)

__all__ = [
    "__version__",
    # Evaluation
    "evaluate",
    "EvaluationResult",
    "ExpressionEvaluator",
    "parse_expression",
    "tokenize",
    "extract_all",
    # Context
    "CONTEXT_ROOTS",
    "ContextSnapshot",
    "ContextVariable",
    "load_context",
    # Capabilities
    "JobStatus",
    "StaticStatus",
    "WorkspaceHasher",
    # Errors
    "ErrorKind",
    "GhExprError",
    "ExpressionError",
    "ConfigError",
    "ContextLoadError",
]
