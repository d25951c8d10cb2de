"""Error classes for template analysis and iteration."""
from typing import Iterable, Optional


class GitTemplateError(Exception):
    """Base class for all git-template failures."""
    pass


class InvalidPathError(GitTemplateError):
    """A path is missing or not the kind of entry that was required."""

    def __init__(self, path):
        self.path = str(path)
        super().__init__(f"Invalid or inaccessible path: {path}")


class TemplateValidationError(GitTemplateError):
    """A template configuration bundle failed validation."""

    def __init__(self, template_path, issues: Iterable[str]):
        self.template_path = str(template_path)
        self.issues = list(issues)
        super().__init__(
            f"Template validation failed for {template_path}: {', '.join(self.issues)}"
        )


class FolderAnalysisError(GitTemplateError):
    """I/O failure while snapshotting a folder (not "does not exist")."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to analyze folder {path}: {reason}")


class TemplateProcessingError(GitTemplateError):
    """Failure while applying, comparing or updating the cleanup phase."""

    def __init__(self, operation: str, details: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.details = details
        self.cause = cause
        super().__init__(f"Template processing error during {operation}: {details}")


def error_type_name(error: BaseException) -> str:
    """Return the error kind reported in failed results.

    Wrapped processing errors report the kind of the underlying cause so callers
    can tell a validation failure apart from an I/O failure.
    """
    if isinstance(error, TemplateProcessingError) and isinstance(error.cause, GitTemplateError):
        return type(error.cause).__name__
    return type(error).__name__
