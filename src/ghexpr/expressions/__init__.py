"""Expression parsing and evaluation for GitHub Actions ${{ }} syntax.

Expressions are the small language GitHub Actions uses inside ${{ }}
placeholders in workflow files: ``if:`` conditions, ``with:`` inputs,
``env:`` values and so on. This package tokenizes, parses and evaluates them
against a snapshot of the nine workflow contexts.

Expression Syntax
-----------------
- Context access: ${{ github.ref }}, ${{ env.NODE_VERSION }}
- Nested and indexed access: ${{ matrix.include[0].os }}
- Projection: ${{ github.event.commits.*.message }}
- Literals: ${{ 'text' }}, ${{ 42 }}, ${{ true }}, ${{ null }}
- Comparison: ==, !=, <, <=, >, >=
- Logical: !, &&, || (``&&`` and ``||`` return an operand)
- Functions: contains, startsWith, endsWith, format, join, toJSON,
  fromJSON, success, failure, cancelled, always, hashFiles

Examples
--------
    ${{ github.ref == 'refs/heads/main' && github.event_name == 'push' }}
    ${{ env.NODE_VERSION || '18' }}
    ${{ format('Build {0} on {1}', github.run_number, github.ref) }}

Module Structure
----------------
- lexer.py: Token stream for an expression
- parser.py: AST node types and the Lark-based parser
- values.py: Truthiness, coercion, equality and JSON rendering
- functions.py: Built-in function library
- evaluator.py: AST walk with context hit tracking
- result.py: EvaluationResult and the ``evaluate`` facade
- errors.py: Error kinds and exception types

Evaluation is synchronous and side-effect free; the compiled grammar and
function library are shared read-only between callers.
"""

from __future__ import annotations

from ghexpr.expressions.errors import (
    ArityError,
    CapabilityUnavailableError,
    ErrorInfo,
    ErrorKind,
    ExpressionError,
    ExpressionEvaluationError,
    ExpressionJSONError,
    ExpressionSyntaxError,
    ExpressionTypeError,
    UnknownContextError,
    UnknownFunctionError,
    UnknownPropertyError,
)
from ghexpr.expressions.evaluator import ExpressionEvaluator
from ghexpr.expressions.functions import DEFAULT_LIBRARY, FunctionLibrary
from ghexpr.expressions.lexer import Token, TokenKind, tokenize
from ghexpr.expressions.parser import (
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
    extract_all,
    parse_expression,
)
from ghexpr.expressions.result import EvaluationResult, evaluate

__all__: list[str] = [
    # Error types
    "ErrorKind",
    "ErrorInfo",
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
    # Lexer
    "Token",
    "TokenKind",
    "tokenize",
    # Parser types
    "Node",
    "Literal",
    "ContextRoot",
    "PropertyAccess",
    "IndexAccess",
    "Wildcard",
    "FunctionCall",
    "UnaryNot",
    "BinaryOp",
    "BinaryOperator",
    "ParsedExpression",
    # Parser functions
    "parse_expression",
    "extract_all",
    # Functions
    "FunctionLibrary",
    "DEFAULT_LIBRARY",
    # Evaluator
    "ExpressionEvaluator",
    "EvaluationResult",
    "evaluate",
]
