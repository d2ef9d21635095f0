"""CLI command for ghexpr eval.

Evaluates one expression against a context snapshot and prints the value,
its type and the context paths it read.
"""

from __future__ import annotations

from pathlib import Path

import click

from ghexpr.cli.console import console, err_console
from ghexpr.cli.context import CLIContext, ExitCode
from ghexpr.cli.output import OutputFormat, format_error, format_json, result_table
from ghexpr.exceptions import ContextLoadError
from ghexpr.expressions import evaluate
from ghexpr.logging import get_logger

logger = get_logger(__name__)


@click.command("eval")
@click.argument("expression")
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
    help="Evaluate against the built-in sample context.",
)
@click.option(
    "--status",
    type=click.Choice(["success", "failure", "cancelled"]),
    default=None,
    help="Job status seen by success()/failure()/cancelled().",
)
@click.option(
    "--workspace",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory hashFiles() resolves patterns against.",
)
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TEXT.value,
    help="Output format (text or json).",
)
@click.pass_context
def eval_command(
    ctx: click.Context,
    expression: str,
    context_file: Path | None,
    sample: bool,
    status: str | None,
    workspace: Path | None,
    fmt: str,
) -> None:
    """Evaluate EXPRESSION and show its value.

    The ${{ }} wrapper is optional. Exits with status 1 when the expression
    fails to parse or evaluate.

    Examples:
        ghexpr eval "github.ref == 'refs/heads/main'" --sample
        ghexpr eval '${{ toJSON(matrix) }}' --context ctx.yaml --format json
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]

    try:
        snapshot = cli_ctx.snapshot_for(context_file, sample)
    except ContextLoadError as e:
        err_console.print(
            format_error(e.message, suggestion="Pass --sample to use the sample context"),
            markup=False,
        )
        ctx.exit(ExitCode.USAGE)

    result = evaluate(
        expression,
        snapshot,
        status=cli_ctx.status_for(status),
        hasher=cli_ctx.hasher_for(workspace),
        max_depth=cli_ctx.config.max_depth,
    )

    if fmt == OutputFormat.JSON.value:
        click.echo(format_json(result.to_dict()))
    else:
        console.print(result_table(result))

    if not result.success:
        ctx.exit(ExitCode.FAILURE)
