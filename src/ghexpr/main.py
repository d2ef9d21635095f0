"""CLI entry point for ghexpr.

This module defines the Click-based command-line interface for ghexpr.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from ghexpr import __version__
from ghexpr.cli.commands.eval import eval_command
from ghexpr.cli.commands.examples import examples_command
from ghexpr.cli.commands.render import render_command
from ghexpr.cli.commands.tokens import tokens_command
from ghexpr.cli.context import CLIContext, ExitCode
from ghexpr.cli.output import format_error
from ghexpr.config import load_config
from ghexpr.exceptions import ConfigError
from ghexpr.logging import configure_logging


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="ghexpr")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=False, path_type=str),
    default=None,
    help="Path to config file (overrides project/user config).",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Suppress non-essential output (ERROR level only).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: str | None,
    verbose: int,
    quiet: bool,
) -> None:
    """ghexpr - evaluate GitHub Actions ${{ }} expressions."""
    ctx.ensure_object(dict)

    # Load configuration first (before logging setup)
    config_path = Path(config_file) if config_file else None
    try:
        config = load_config(config_path)
    except ConfigError as e:
        details = []
        if e.field:
            details.append(f"Field: {e.field}")
        if e.value is not None:
            details.append(f"Value: {e.value}")
        click.echo(format_error(e.message, details=details), err=True)
        ctx.exit(ExitCode.USAGE)

    ctx.obj["cli_ctx"] = CLIContext(
        config=config,
        config_path=config_path,
        verbosity=verbose,
        quiet=quiet,
    )

    # Priority: quiet > verbose > config
    verbosity_map = {
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
    }
    if quiet:
        level = logging.ERROR
    elif verbose > 0:
        level = logging.INFO if verbose == 1 else logging.DEBUG
    else:
        level = verbosity_map.get(config.verbosity, logging.WARNING)

    configure_logging(level=level)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(eval_command)
cli.add_command(tokens_command)
cli.add_command(render_command)
cli.add_command(examples_command)

if __name__ == "__main__":
    cli()
