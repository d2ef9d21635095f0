"""CLI command for ghexpr tokens."""

from __future__ import annotations

import click

from ghexpr.cli.console import console, err_console
from ghexpr.cli.context import ExitCode
from ghexpr.cli.output import format_error, token_table
from ghexpr.expressions import ExpressionSyntaxError, tokenize


@click.command("tokens")
@click.argument("expression")
@click.pass_context
def tokens_command(ctx: click.Context, expression: str) -> None:
    """Print the token stream of EXPRESSION.

    Examples:
        ghexpr tokens "contains(github.ref, 'release/')"
    """
    try:
        tokens = tokenize(expression)
    except ExpressionSyntaxError as e:
        err_console.print(format_error(e.message), markup=False)
        ctx.exit(ExitCode.FAILURE)

    console.print(token_table(tokens))
