"""Expression lexer.

Turns the text inside a ``${{ }}`` placeholder into a flat token stream:
identifiers, numbers, string literals, keywords, punctuation and operators,
terminated by an EOF token. The terminal definitions come from the same
``grammar.lark`` the parser uses, so the two can never disagree about what a
token is.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from lark.exceptions import UnexpectedCharacters

from ghexpr.expressions.errors import ExpressionSyntaxError
from ghexpr.expressions.grammar import LARK_PARSER

__all__ = [
    "TokenKind",
    "Token",
    "strip_wrapper",
    "tokenize",
    "character_error",
]


class TokenKind(str, Enum):
    """Kind of lexical token."""

    IDENTIFIER = "identifier"
    NUMBER = "number"
    STRING = "string"
    KEYWORD = "keyword"  # true, false, null
    PUNCTUATION = "punctuation"  # ( ) [ ] , . *
    OPERATOR = "operator"  # == != <= >= < > && || !
    EOF = "eof"


# Grammar terminal name -> token kind
_TERMINAL_KINDS: dict[str, TokenKind] = {
    "IDENTIFIER": TokenKind.IDENTIFIER,
    "NUMBER": TokenKind.NUMBER,
    "STRING": TokenKind.STRING,
    "TRUE": TokenKind.KEYWORD,
    "FALSE": TokenKind.KEYWORD,
    "NULL": TokenKind.KEYWORD,
    "EQ_OP": TokenKind.OPERATOR,
    "REL_OP": TokenKind.OPERATOR,
    "_OR": TokenKind.OPERATOR,
    "_AND": TokenKind.OPERATOR,
    "_NOT": TokenKind.OPERATOR,
    "_DOT": TokenKind.PUNCTUATION,
    "_STAR": TokenKind.PUNCTUATION,
    "_COMMA": TokenKind.PUNCTUATION,
    "_LPAR": TokenKind.PUNCTUATION,
    "_RPAR": TokenKind.PUNCTUATION,
    "_LSQB": TokenKind.PUNCTUATION,
    "_RSQB": TokenKind.PUNCTUATION,
}


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexical token.

    Attributes:
        kind: Token category.
        value: Exact source text of the token (quotes included for strings).
        position: 0-based offset of the token in the unwrapped expression.
    """

    kind: TokenKind
    value: str
    position: int


def strip_wrapper(expression: str) -> tuple[str, bool]:
    """Strip ${{ }} wrapper from expression.

    Args:
        expression: Expression string (may or may not have wrapper)

    Returns:
        Tuple of (inner expression, whether wrapper was present)
    """
    stripped = expression.strip()
    if stripped.startswith("${{") and stripped.endswith("}}"):
        inner = stripped[3:-2].strip()
        return inner, True
    return stripped, False


def character_error(
    error: UnexpectedCharacters, source: str
) -> ExpressionSyntaxError:
    """Map a Lark character error to an ExpressionSyntaxError.

    A quote at the failing position means the string literal starting there
    never found its closing quote.
    """
    position = error.pos_in_stream
    char = source[position] if position < len(source) else ""
    if char in ("'", '"'):
        return ExpressionSyntaxError(
            "Unterminated string literal",
            expression=source,
            position=position,
        )
    return ExpressionSyntaxError(
        f"Unexpected character '{char}'",
        expression=source,
        position=position,
    )


def tokenize(expression: str) -> list[Token]:
    """Tokenize an expression string.

    Args:
        expression: Expression text, with or without the ${{ }} wrapper.

    Returns:
        List of tokens ending with an EOF token.

    Raises:
        ExpressionSyntaxError: On an unterminated string or an unrecognized
            character.

    Examples:
        >>> [t.value for t in tokenize("github.ref == 'main'")]
        ['github', '.', 'ref', '==', "'main'", '']
        >>> tokenize("1 ~ 2")  # doctest: +SKIP
        Traceback (most recent call last):
        ExpressionSyntaxError: Unexpected character '~' at position 2: ...
    """
    source, _ = strip_wrapper(expression)
    tokens: list[Token] = []
    try:
        for lark_token in LARK_PARSER.lex(source):
            tokens.append(
                Token(
                    kind=_TERMINAL_KINDS[lark_token.type],
                    value=str(lark_token),
                    position=lark_token.start_pos or 0,
                )
            )
    except UnexpectedCharacters as e:
        raise character_error(e, source) from e

    tokens.append(Token(kind=TokenKind.EOF, value="", position=len(source)))
    return tokens
