"""Ad-hoc folder comparison and template completeness commands."""
import json
from typing import Iterable, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from git_template.models.options import OutputFormat

# Module-level console instance (will be set by register function)
console: Console = Console()

_TYPE_STYLES = {
    "added": ("+", "green"),
    "modified": ("~", "yellow"),
    "deleted": ("-", "red"),
}


def _differences_table(differences: Iterable[dict], title: str) -> Table:
    table = Table(title=escape(title))
    table.add_column("", width=1)
    table.add_column("Type")
    table.add_column("File")
    for difference in differences:
        marker, style = _TYPE_STYLES[difference["type"]]
        table.add_row(
            f"[{style}]{marker}[/{style}]",
            difference["type"],
            escape(difference["file"]),
        )
    return table


def compare(
    source: str = typer.Argument(..., help="Reference folder (e.g. the application)"),
    target: str = typer.Argument(..., help="Folder under test (e.g. the generated folder)"),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-e", help="Top-level entry to leave out (repeatable)"
    ),
    script: bool = typer.Option(False, "--script", help="Print the fix-up script instead of a report"),
    output_format: OutputFormat = typer.Option(
        OutputFormat.DETAILED, "--format", "-f", case_sensitive=False, help="Output format"
    ),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Compare two folders file by file.

    Exits with status 1 when the folders differ.
    """
    from git_template.cli_support import handle_cli_error, print_success, setup_logging
    from git_template.core.comparison_engine import ComparisonEngine

    try:
        setup_logging(config, verbose=verbose, debug=debug, log_file=log_file)
        result = ComparisonEngine().compare(source, target, exclude=exclude)
    except Exception as e:
        handle_cli_error(e, console, verbose or debug)

    if script or output_format == OutputFormat.JSON:
        text = (
            ComparisonEngine.generate_diff_script(result) if script
            else json.dumps(result.to_dict(), indent=2)
        )
        console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)
    elif output_format == OutputFormat.SUMMARY:
        console.print(
            f"+{len(result.added_files)} ~{len(result.modified_files)} "
            f"-{len(result.deleted_files)} ({result.total_differences} total)",
            highlight=False,
        )
    elif not result.has_differences:
        print_success(console, "Folders are identical")
    else:
        console.print(_differences_table(
            (d.to_dict() for d in result.differences),
            f"{result.total_differences} difference(s): {source} -> {target}",
        ))

    if result.has_differences:
        raise typer.Exit(1)


def validate(
    template_dir: str = typer.Argument(..., help="Template configuration directory"),
    reference_dir: str = typer.Argument(..., help="Application the template should reproduce"),
    output_format: OutputFormat = typer.Option(
        OutputFormat.DETAILED, "--format", "-f", case_sensitive=False, help="Output format"
    ),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Check that a template reproduces a reference application exactly.

    The template is applied into a scratch directory; neither argument is
    modified.
    """
    from git_template.cli_support import exit_for, handle_cli_error, print_report, setup_logging
    from git_template.models.results import CommandResult
    from git_template.services.template_processor import TemplateProcessor

    try:
        settings = setup_logging(config, verbose=verbose, debug=debug, log_file=log_file)
        outcome = TemplateProcessor(config=settings).validate_template_completeness(
            template_dir, reference_dir
        )
    except Exception as e:
        handle_cli_error(e, console, verbose or debug)

    operation = "validate_template_completeness"
    if outcome["complete"]:
        result = CommandResult(
            success=True,
            operation=operation,
            data={"complete": True, "differences_count": 0},
        )
    elif "error" in outcome:
        result = CommandResult(
            success=False,
            operation=operation,
            error_message=f"{outcome['error']}\n{outcome['output']}".rstrip(),
            error_type="TemplateApplicationFailed",
        )
    else:
        result = CommandResult(
            success=False,
            operation=operation,
            error_message=f"Template is incomplete: {outcome['differences_count']} difference(s)",
            error_type="IncompleteTemplate",
        )
        if output_format == OutputFormat.DETAILED:
            console.print(_differences_table(outcome["differences"], "Reference vs template output"))

    print_report(console, result, output_format)
    exit_for(result)


def register_compare_commands(app: typer.Typer, shared_console: Console):
    """Register compare and validate with the main Typer app."""
    global console
    console = shared_console

    app.command(name="compare")(compare)
    app.command(name="validate")(validate)
