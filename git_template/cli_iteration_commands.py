"""Status, strategy and iterate commands."""
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from git_template.core.config import IterationConfig
from git_template.core.errors import GitTemplateError
from git_template.core.folder_analyzer import DevelopmentAnalysis, FolderAnalyzer
from git_template.core.iteration_strategy import (
    IterationStrategyResult,
    StrategyType,
    determine_strategy,
    validate_prerequisites,
)
from git_template.core.lock import LockError, iteration_lock
from git_template.core.logger import get_logger
from git_template.core.template_iteration import TemplateIteration
from git_template.models.options import IterationOptions, OutputFormat
from git_template.models.results import CommandResult, Result, StatusReport, StrategyReport
from git_template.services.template_applier import TemplateApplier
from git_template.services.template_processor import TemplateProcessor

# Module-level console instance (will be set by register function)
console: Console = Console()
logger = get_logger(__name__)


def dispatch_iteration(
    analysis: DevelopmentAnalysis,
    strategy: IterationStrategyResult,
    options: IterationOptions,
    config: IterationConfig,
    applier: Optional[TemplateApplier] = None,
    lock_timeout: int = 0,
) -> Result:
    """Run the action selected by ``strategy``.

    ``options.force`` bypasses the ``can_proceed`` gate only; strategies with
    no action still fail.
    """
    folder = analysis.folder_analysis

    if not (strategy.can_proceed or options.force):
        return CommandResult(
            success=False,
            operation="template_iteration",
            error_message=f"Cannot proceed: {strategy.reason}. {strategy.recommended_action}",
            error_type="StrategyBlocked",
        )

    if options.force and not strategy.can_proceed:
        logger.warning(f"Forcing {strategy.strategy_type.value} for {folder.path}")

    if strategy.strategy_type == StrategyType.REPO_ITERATION:
        orchestrator = TemplateIteration(applier=applier, config=config)
        try:
            with iteration_lock(Path(folder.generated_counterpart_path), timeout=lock_timeout):
                return orchestrator.execute_repo_iteration(analysis, options)
        except LockError as e:
            return CommandResult.failure("template_iteration", e)

    processor = TemplateProcessor(applier=applier, config=config)
    try:
        if strategy.strategy_type == StrategyType.CREATE_GENERATED_FOLDER:
            data = processor.create_generated_folder(analysis)
            return CommandResult(success=True, operation="create_generated_folder", data=data)

        if strategy.strategy_type == StrategyType.SYNC_CONFIGURATION:
            data = processor.sync_configuration(analysis)
            return CommandResult(success=True, operation="sync_configuration", data=data)
    except GitTemplateError as e:
        return CommandResult.failure(strategy.strategy_type.value, e)

    return CommandResult(
        success=False,
        operation="template_iteration",
        error_message=f"No iteration action for strategy {strategy.strategy_type.value}: {strategy.reason}",
        error_type="StrategyBlocked",
    )


def status(
    path: str = typer.Argument(".", help="Application folder to analyze"),
    output_format: OutputFormat = typer.Option(
        OutputFormat.DETAILED, "--format", "-f", case_sensitive=False, help="Output format"
    ),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Show the template development status of a folder."""
    from git_template.cli_support import handle_cli_error, print_report, setup_logging

    try:
        settings = setup_logging(config, verbose=verbose, debug=debug, log_file=log_file)
        analysis = FolderAnalyzer(settings).analyze_development_status(path)
    except Exception as e:
        handle_cli_error(e, console, verbose or debug)

    print_report(console, StatusReport(analysis), output_format)


def strategy(
    path: str = typer.Argument(".", help="Application folder to analyze"),
    output_format: OutputFormat = typer.Option(
        OutputFormat.DETAILED, "--format", "-f", case_sensitive=False, help="Output format"
    ),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Show which iteration strategy applies to a folder and why."""
    from git_template.cli_support import handle_cli_error, print_report, setup_logging

    try:
        settings = setup_logging(config, verbose=verbose, debug=debug, log_file=log_file)
        analysis = FolderAnalyzer(settings).analyze_development_status(path)
    except Exception as e:
        handle_cli_error(e, console, verbose or debug)

    report = StrategyReport(
        folder_path=analysis.path,
        strategy=determine_strategy(analysis.development_status, folder_path=analysis.path),
        validation=validate_prerequisites(analysis),
    )
    print_report(console, report, output_format)


def iterate(
    path: str = typer.Argument(".", help="Application folder to iterate"),
    force: bool = typer.Option(False, "--force", help="Run even when the strategy says not to proceed"),
    detailed_comparison: bool = typer.Option(
        True, "--detailed-comparison/--no-detailed-comparison",
        help="Include the full comparison in the result",
    ),
    lock_timeout: int = typer.Option(0, "--lock-timeout", help="Seconds to wait for a concurrent iteration"),
    output_format: OutputFormat = typer.Option(
        OutputFormat.DETAILED, "--format", "-f", case_sensitive=False, help="Output format"
    ),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Run the next iteration step for a folder.

    Depending on the folder's status this creates the generated folder, copies
    the template configuration into it, or runs a full clean/apply/compare
    cycle that appends corrections to the cleanup phase.
    """
    from git_template.cli_support import exit_for, handle_cli_error, print_report, setup_logging

    try:
        settings = setup_logging(config, verbose=verbose, debug=debug, log_file=log_file)
        options = IterationOptions(
            force=force, detailed_comparison=detailed_comparison, format=output_format
        )
        analysis = FolderAnalyzer(settings).analyze_development_status(path)
        chosen = determine_strategy(analysis.development_status, options, analysis.path)
        result = dispatch_iteration(analysis, chosen, options, settings, lock_timeout=lock_timeout)
    except Exception as e:
        handle_cli_error(e, console, verbose or debug)

    print_report(console, result, options.format)
    exit_for(result)


def register_iteration_commands(app: typer.Typer, shared_console: Console):
    """Register status, strategy and iterate with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command(name="status")(status)
    app.command(name="strategy")(strategy)
    app.command(name="iterate")(iterate)
