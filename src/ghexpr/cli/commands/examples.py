"""CLI command for ghexpr examples.

Runs the example catalogue against the sample context and shows each
expression next to its result.
"""

from __future__ import annotations

import click
from rich.table import Table
from rich.text import Text

from ghexpr.cli.console import console, err_console
from ghexpr.cli.context import CLIContext, ExitCode
from ghexpr.cli.output import format_error, format_value
from ghexpr.examples import categories, examples_in, sample_context
from ghexpr.expressions import evaluate


@click.command("examples")
@click.option(
    "--category",
    type=str,
    default=None,
    help="Only run examples in this category.",
)
@click.pass_context
def examples_command(ctx: click.Context, category: str | None) -> None:
    """Run the example expressions against the sample context.

    Examples:
        ghexpr examples
        ghexpr examples --category "String Functions"
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]

    selected = examples_in(category)
    if not selected:
        err_console.print(
            format_error(
                f"Unknown category '{category}'",
                details=categories(),
                suggestion="Use one of the categories listed above",
            ),
            markup=False,
        )
        ctx.exit(ExitCode.USAGE)

    snapshot = sample_context()
    status = cli_ctx.status_for(None)

    table = Table(title="Expression examples")
    table.add_column("Category", style="cyan")
    table.add_column("Title")
    table.add_column("Expression", overflow="fold")
    table.add_column("Result", overflow="fold")

    for example in selected:
        result = evaluate(
            example.expression,
            snapshot,
            status=status,
            max_depth=cli_ctx.config.max_depth,
        )
        if result.error is not None:
            outcome = Text(f"{result.error.kind.value}: {result.error.message}", style="red")
        else:
            outcome = Text(format_value(result.value))
        table.add_row(example.category, example.title, Text(example.expression), outcome)

    console.print(table)
