"""Logging for git-template: rich console output plus an optional log file."""
import logging
import tempfile
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "git_template"

# Diagnostics go to stderr; reports own stdout
console = Console(stderr=True)

DEFAULT_LOG_FILE = Path.home() / ".cache" / "git-template" / "git-template.log"
FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

_console_level = logging.WARNING
_file_handler: Optional[logging.FileHandler] = None


def _writable_log_path(requested: Optional[str]) -> Path:
    path = Path(requested) if requested else DEFAULT_LOG_FILE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        path = Path(tempfile.gettempdir()) / path.name
    return path


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> Path:
    """Mirror every git-template log record into a file.

    Args:
        log_file: Path to log file (defaults to ~/.cache/git-template/git-template.log)
        verbose: Record DEBUG messages as well

    Returns:
        Path of the active log file. Only the first call installs a handler;
        later calls return the path already in use.
    """
    global _file_handler

    if _file_handler is not None:
        return Path(_file_handler.baseFilename)

    target = _writable_log_path(log_file)
    _file_handler = logging.FileHandler(target)
    _file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    _file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG)
    package_logger.addHandler(_file_handler)
    package_logger.info(f"git-template log file: {target}")
    return target


def set_console_level(verbose: bool = False, debug: bool = False) -> None:
    """Choose how much reaches the console: WARNING, INFO (verbose) or DEBUG."""
    global _console_level

    if debug:
        _console_level = logging.DEBUG
    elif verbose:
        _console_level = logging.INFO
    else:
        _console_level = logging.WARNING

    for name, candidate in logging.root.manager.loggerDict.items():
        if not name.startswith(PACKAGE_LOGGER) or not isinstance(candidate, logging.Logger):
            continue
        for handler in candidate.handlers:
            if isinstance(handler, RichHandler):
                handler.setLevel(_console_level)


def get_logger(name: str) -> logging.Logger:
    """Module logger with a rich console handler.

    Note:
        File output is added separately by setup_file_logging()
    """
    logger = logging.getLogger(name)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler.setLevel(_console_level)
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)

    return logger
