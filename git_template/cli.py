#!/usr/bin/env python3
"""git-template CLI - iterate a template until it reproduces its application."""

import typer
from rich.console import Console

from git_template.cli_compare_commands import register_compare_commands
from git_template.cli_iteration_commands import register_iteration_commands
from git_template.core.logger import get_logger

app = typer.Typer(
    name="git-template",
    help="""git-template - Refine templates against the application they describe

Each iteration regenerates templated/<app> from <app>/.git_template and
records what still differs in the generated cleanup phase.

Quick start:
  git-template status my-app     # Where is this folder in the workflow?
  git-template strategy my-app   # What happens on the next iterate?
  git-template iterate my-app    # Do it

More commands: git-template --help
""",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

# Attach modular subcommands
register_iteration_commands(app, console)
register_compare_commands(app, console)

if __name__ == "__main__":
    app()
