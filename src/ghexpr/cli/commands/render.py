"""CLI command for ghexpr render.

Interpolates every ${{ }} placeholder in a piece of text, the way a runner
expands ``run:`` scripts and ``with:`` inputs.
"""

from __future__ import annotations

from pathlib import Path

import click

from ghexpr.cli.console import err_console
from ghexpr.cli.context import CLIContext, ExitCode
from ghexpr.cli.output import format_error
from ghexpr.exceptions import ContextLoadError
from ghexpr.expressions import ExpressionError, ExpressionEvaluator


@click.command("render")
@click.argument("text")
@click.option(
    "--context",
    "context_file",
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help="YAML or JSON file holding the context roots.",
)
@click.option(
    "--sample",
    is_flag=True,
    default=False,
    help="Render against the built-in sample context.",
)
@click.pass_context
def render_command(
    ctx: click.Context,
    text: str,
    context_file: Path | None,
    sample: bool,
) -> None:
    """Replace each ${{ }} placeholder in TEXT with its value.

    Examples:
        ghexpr render 'Deploying ${{ github.sha }} to ${{ env.APP_ENV }}' --sample
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]

    try:
        snapshot = cli_ctx.snapshot_for(context_file, sample)
    except ContextLoadError as e:
        err_console.print(format_error(e.message), markup=False)
        ctx.exit(ExitCode.USAGE)

    evaluator = ExpressionEvaluator(
        snapshot,
        status=cli_ctx.status_for(None),
        hasher=cli_ctx.hasher_for(None),
        max_depth=cli_ctx.config.max_depth,
    )
    try:
        rendered = evaluator.evaluate_string(text)
    except ExpressionError as e:
        err_console.print(format_error(f"{e.kind.value}: {e.message}"), markup=False)
        ctx.exit(ExitCode.FAILURE)

    click.echo(rendered)
