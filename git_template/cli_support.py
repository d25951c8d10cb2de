"""Shared utilities for git-template CLI modules."""
from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from git_template.core.config import IterationConfig, load_config
from git_template.models.options import OutputFormat


def setup_logging(
    config_path: Optional[str] = None,
    verbose: bool = False,
    debug: bool = False,
    log_file: Optional[str] = None,
) -> IterationConfig:
    """Load the effective configuration and wire up console/file logging.

    Returns:
        IterationConfig with flags, environment and config file applied
    """
    from git_template.core.logger import set_console_level, setup_file_logging

    config = load_config(config_path, verbose=verbose, debug=debug)
    set_console_level(verbose=config.verbose, debug=config.debug)
    if log_file:
        setup_file_logging(log_file=log_file, verbose=config.debug)
    return config


def print_report(console: Console, result, output_format: OutputFormat) -> None:
    """Print a result variant in the requested format without rich markup."""
    console.print(
        result.render(output_format),
        markup=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )


def exit_for(result) -> None:
    """Exit non-zero when a result reports failure."""
    if not result.successful:
        raise typer.Exit(1)


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    console.print(f"[green]{prefix}[/green] {message}")
