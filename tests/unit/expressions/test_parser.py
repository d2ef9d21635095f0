"""Unit tests for the expression parser.

Covers:
- AST shape for literals, references, calls and operators
- Operator precedence and associativity
- Filter forms (.* and [*])
- Syntax errors and the nesting-depth guard
- extract_all()
"""

from __future__ import annotations

import math

import pytest

from ghexpr.expressions.errors import ExpressionSyntaxError
from ghexpr.expressions.parser import (
    BinaryOp,
    BinaryOperator,
    ContextRoot,
    FunctionCall,
    IndexAccess,
    Literal,
    PropertyAccess,
    UnaryNot,
    Wildcard,
    extract_all,
    parse_expression,
)

A, B, C, D = (ContextRoot(name) for name in "abcd")


def _root(expression: str):
    return parse_expression(expression).root


class TestLiterals:
    """Test parsing of literal values."""

    @pytest.mark.parametrize(
        ("text", "value"),
        [
            ("42", 42.0),
            ("3.5", 3.5),
            ("-3", -3.0),
            ("1e3", 1000.0),
            ("0x1F", 31.0),
            ("-0x1F", -31.0),
            ("true", True),
            ("false", False),
            ("null", None),
        ],
    )
    def test_scalar_literals(self, text: str, value: object) -> None:
        """Numbers and keywords become Literal nodes."""
        assert _root(text) == Literal(value)

    @pytest.mark.parametrize("text", ["7", "0x10", "2.5"])
    def test_numbers_are_floats(self, text: str) -> None:
        assert isinstance(_root(text).value, float)

    def test_integer_literal_beyond_double_range(self) -> None:
        """A literal too long for int() still parses, as infinity."""
        assert _root("1" * 5000) == Literal(math.inf)

    def test_hex_literal_beyond_double_range(self) -> None:
        assert _root("-0x" + "f" * 300) == Literal(-math.inf)

    def test_single_quoted_string(self) -> None:
        """Quotes are removed from string literals."""
        assert _root("'refs/heads/main'") == Literal("refs/heads/main")

    def test_double_quoted_string(self) -> None:
        """Double quotes work the same way."""
        assert _root('"hello world"') == Literal("hello world")

    def test_escaped_quote(self) -> None:
        """A backslash escapes the next character."""
        assert _root(r"'it\'s'") == Literal("it's")

    def test_empty_string(self) -> None:
        """'' is the empty string."""
        assert _root("''") == Literal("")


class TestReferences:
    """Test context roots, property, index and filter access."""

    def test_context_root(self) -> None:
        """A bare identifier is a context root."""
        assert _root("github") == ContextRoot("github")

    def test_property_chain(self) -> None:
        """Dotted access nests left to right."""
        assert _root("github.event.ref") == PropertyAccess(
            PropertyAccess(ContextRoot("github"), "event"), "ref"
        )

    def test_hyphenated_property(self) -> None:
        """Hyphens are allowed inside property names."""
        assert _root("needs.build-job") == PropertyAccess(
            ContextRoot("needs"), "build-job"
        )

    def test_index_access(self) -> None:
        """Brackets hold an arbitrary expression."""
        assert _root("matrix.include[0]") == IndexAccess(
            PropertyAccess(ContextRoot("matrix"), "include"), Literal(0)
        )
        assert _root("a[b.c]") == IndexAccess(A, PropertyAccess(B, "c"))

    def test_dot_star_filter(self) -> None:
        """.* becomes a Wildcard node."""
        assert _root("a.b.*.c") == PropertyAccess(
            Wildcard(PropertyAccess(A, "b")), "c"
        )

    def test_bracket_star_filter(self) -> None:
        """[*] is the same as .*."""
        assert _root("a[*]") == Wildcard(A)
        assert _root("a[*]") == _root("a.*")


class TestFunctionCalls:
    """Test function call parsing."""

    def test_no_arguments(self) -> None:
        """Empty parentheses give an empty argument tuple."""
        assert _root("success()") == FunctionCall("success", ())

    def test_multiple_arguments(self) -> None:
        """Arguments are parsed structurally, in order."""
        assert _root("format('{0}', a.b, 1)") == FunctionCall(
            "format",
            (Literal("{0}"), PropertyAccess(A, "b"), Literal(1)),
        )

    def test_commas_inside_strings_and_calls(self) -> None:
        """Commas in nested calls or strings do not split arguments."""
        root = _root("contains(fromJSON('[1, 2]'), 'a, b')")
        assert root == FunctionCall(
            "contains",
            (FunctionCall("fromJSON", (Literal("[1, 2]"),)), Literal("a, b")),
        )

    def test_expression_arguments(self) -> None:
        """Arguments may be full expressions."""
        assert _root("f(a == b || c)") == FunctionCall(
            "f",
            (
                BinaryOp(
                    BinaryOperator.OR,
                    BinaryOp(BinaryOperator.EQ, A, B),
                    C,
                ),
            ),
        )

    def test_call_result_is_postfix_base(self) -> None:
        """Property access can follow a call."""
        assert _root("fromJSON(a).b") == PropertyAccess(
            FunctionCall("fromJSON", (A,)), "b"
        )


class TestPrecedence:
    """Test operator precedence and associativity."""

    def test_and_binds_tighter_than_equality_result(self) -> None:
        """a == b && c == d parses as (a == b) && (c == d)."""
        assert _root("a == b && c == d") == BinaryOp(
            BinaryOperator.AND,
            BinaryOp(BinaryOperator.EQ, A, B),
            BinaryOp(BinaryOperator.EQ, C, D),
        )

    def test_or_is_lowest(self) -> None:
        """a || b && c parses as a || (b && c)."""
        assert _root("a || b && c") == BinaryOp(
            BinaryOperator.OR, A, BinaryOp(BinaryOperator.AND, B, C)
        )

    def test_relational_binds_tighter_than_equality(self) -> None:
        """a < b == c parses as (a < b) == c."""
        assert _root("a < b == c") == BinaryOp(
            BinaryOperator.EQ, BinaryOp(BinaryOperator.LT, A, B), C
        )

    def test_not_binds_tightest(self) -> None:
        """!a == b parses as (!a) == b."""
        assert _root("!a == b") == BinaryOp(BinaryOperator.EQ, UnaryNot(A), B)

    def test_double_negation(self) -> None:
        """Negation nests."""
        assert _root("!!a") == UnaryNot(UnaryNot(A))

    def test_left_associative(self) -> None:
        """Operators of equal precedence group to the left."""
        assert _root("a == b != c") == BinaryOp(
            BinaryOperator.NE, BinaryOp(BinaryOperator.EQ, A, B), C
        )
        assert _root("a || b || c") == BinaryOp(
            BinaryOperator.OR, BinaryOp(BinaryOperator.OR, A, B), C
        )

    def test_parentheses_override(self) -> None:
        """(a || b) && c keeps the parenthesised group together."""
        assert _root("(a || b) && c") == BinaryOp(
            BinaryOperator.AND, BinaryOp(BinaryOperator.OR, A, B), C
        )

    def test_operators_inside_strings_are_literal(self) -> None:
        """&& inside a string literal is not an operator."""
        assert _root("a == 'x && y'") == BinaryOp(
            BinaryOperator.EQ, A, Literal("x && y")
        )


class TestParsedExpression:
    """Test the ParsedExpression wrapper."""

    def test_raw_and_source(self) -> None:
        """raw keeps the input; source is the unwrapped text."""
        parsed = parse_expression("${{ github.ref }}")
        assert parsed.raw == "${{ github.ref }}"
        assert parsed.source == "github.ref"

    def test_ast_is_reusable(self) -> None:
        """Parsing the same text twice gives equal trees."""
        assert parse_expression("a && b") == parse_expression("a && b")


class TestSyntaxErrors:
    """Test parse failures."""

    def test_empty_expression(self) -> None:
        """Nothing to parse is an error."""
        with pytest.raises(ExpressionSyntaxError, match="Empty expression"):
            parse_expression("${{  }}")

    def test_missing_operand(self) -> None:
        """A dangling operator reports the end of input."""
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            parse_expression("a ==")
        assert exc_info.value.reason == "Unexpected end of expression"

    def test_missing_closing_paren(self) -> None:
        """An open parenthesis must be closed."""
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            parse_expression("(a || b")
        assert exc_info.value.reason == "Missing closing ')'"

    def test_missing_closing_bracket(self) -> None:
        """An open bracket must be closed."""
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            parse_expression("a[0")
        assert exc_info.value.reason == "Missing closing ']'"

    def test_unmatched_closing_paren(self) -> None:
        """A stray ')' is reported at its position."""
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            parse_expression("a)")
        assert exc_info.value.reason == "Unmatched closing ')'"
        assert exc_info.value.position == 1

    def test_trailing_tokens(self) -> None:
        """Two expressions side by side are not one expression."""
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            parse_expression("a b")
        assert exc_info.value.reason == "Unexpected token 'b'"
        assert exc_info.value.position == 2

    def test_empty_argument(self) -> None:
        """Arguments cannot be empty."""
        with pytest.raises(ExpressionSyntaxError):
            parse_expression("f(a,)")

    def test_bare_star(self) -> None:
        """* is only valid as a filter."""
        with pytest.raises(ExpressionSyntaxError):
            parse_expression("a * b")

    def test_unterminated_string(self) -> None:
        """Lexical errors surface from the parser too."""
        with pytest.raises(ExpressionSyntaxError, match="Unterminated string"):
            parse_expression("contains(github.ref, 'main)")

    def test_error_carries_expression(self) -> None:
        """The unwrapped source is attached to the error."""
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            parse_expression("${{ a && }}")
        assert exc_info.value.expression == "a &&"


class TestDepthGuard:
    """Test the nesting-depth limit."""

    def test_default_limit_rejects_deep_nesting(self) -> None:
        """Nesting beyond 64 levels is rejected."""
        with pytest.raises(ExpressionSyntaxError, match="nested too deeply"):
            parse_expression("!" * 80 + "a")

    def test_custom_limit(self) -> None:
        """The limit can be lowered per call."""
        parse_expression("!!!a", max_depth=4)
        with pytest.raises(ExpressionSyntaxError, match=r"limit 3"):
            parse_expression("!!!a", max_depth=3)

    def test_long_flat_chains_are_deep(self) -> None:
        """Left-nested binary chains count every operator."""
        text = " && ".join(["a"] * 70)
        with pytest.raises(ExpressionSyntaxError):
            parse_expression(text)
        assert isinstance(parse_expression(text, max_depth=100).root, BinaryOp)

    def test_parentheses_do_not_add_depth(self) -> None:
        """Redundant parentheses build no nodes."""
        assert _root("(" * 100 + "a" + ")" * 100) == A


class TestExtractAll:
    """Test extract_all()."""

    def test_multiple_placeholders(self) -> None:
        """Placeholders are returned in order, wrapper included."""
        assert extract_all("Deploy ${{ github.ref }} by ${{ github.actor }}") == [
            "${{ github.ref }}",
            "${{ github.actor }}",
        ]

    def test_no_placeholders(self) -> None:
        """Plain text yields nothing."""
        assert extract_all("No expressions here") == []
        assert extract_all("") == []

    def test_placeholder_across_lines(self) -> None:
        """A placeholder may span lines."""
        assert extract_all("x ${{\n a }} y") == ["${{\n a }}"]

    def test_closing_braces_inside_strings(self) -> None:
        """}} inside a string literal does not end the placeholder."""
        assert extract_all("a ${{ format('}}') }} b ${{ \"x}}\" }}") == [
            "${{ format('}}') }}",
            "${{ \"x}}\" }}",
        ]

    def test_escaped_quote_inside_string(self) -> None:
        assert extract_all(r"${{ 'it\'s }}' }}") == [r"${{ 'it\'s }}' }}"]

    def test_unterminated_placeholder(self) -> None:
        """Text after an unclosed ${{ is not a placeholder."""
        assert extract_all("${{ a }} and ${{ b") == ["${{ a }}"]

    def test_unterminated_string_ends_at_next_braces(self) -> None:
        """The parser then reports the unterminated string."""
        assert extract_all("${{ 'abc }} rest") == ["${{ 'abc }}"]
        with pytest.raises(ExpressionSyntaxError, match="Unterminated"):
            parse_expression("${{ 'abc }}")
