"""Folder snapshot models used by the analyzer and strategy."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class DevelopmentStatus(Enum):
    """Where a folder stands on the way to a converged template."""
    FOLDER_NOT_FOUND = "folder_not_found"
    NOT_TEMPLATE_PROJECT = "not_template_project"
    APPLICATION_FOLDER_READY_FOR_TEMPLATING = "application_folder_ready_for_templating"
    TEMPLATE_FOLDER_WITHOUT_GENERATED_VERSION = "template_folder_without_generated_version"
    GENERATED_FOLDER_MISSING_CONFIGURATION = "generated_folder_missing_configuration"
    READY_FOR_TEMPLATE_ITERATION = "ready_for_template_iteration"

    @property
    def title(self) -> str:
        """Human-readable name, e.g. 'Folder Not Found'."""
        return " ".join(word.capitalize() for word in self.value.split("_"))


@dataclass(frozen=True)
class FolderAnalysis:
    """Snapshot of one directory and its generated counterpart.

    If ``exists`` is False every other flag is False and no counterpart is set.
    """
    path: str
    exists: bool
    is_version_controlled: bool = False
    has_template_configuration: bool = False
    generated_counterpart_path: Optional[str] = None
    generated_counterpart_exists: bool = False
    generated_counterpart_has_configuration: bool = False
    expected_counterpart_path: Optional[str] = None
    analysis_timestamp: datetime = field(default_factory=datetime.now, compare=False)

    @classmethod
    def missing(cls, path: str) -> "FolderAnalysis":
        """Analysis for a path that does not exist."""
        return cls(path=path, exists=False)

    @property
    def is_valid_application_folder(self) -> bool:
        return self.exists and (self.is_version_controlled or self.has_template_configuration)

    @property
    def is_ready_for_iteration(self) -> bool:
        return (
            self.is_valid_application_folder
            and self.generated_counterpart_exists
            and self.generated_counterpart_has_configuration
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "exists": self.exists,
            "is_version_controlled": self.is_version_controlled,
            "has_template_configuration": self.has_template_configuration,
            "generated_counterpart_path": self.generated_counterpart_path,
            "generated_counterpart_exists": self.generated_counterpart_exists,
            "generated_counterpart_has_configuration": self.generated_counterpart_has_configuration,
            "analysis_timestamp": self.analysis_timestamp.isoformat(),
        }
