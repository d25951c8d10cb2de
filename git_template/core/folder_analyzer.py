"""Folder analysis and template development status classification."""
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from git_template.core.config import IterationConfig
from git_template.core.errors import FolderAnalysisError
from git_template.core.logger import get_logger
from git_template.models.folder_analysis import DevelopmentStatus, FolderAnalysis
from git_template.models.template_configuration import TemplateConfiguration

logger = get_logger(__name__)

STATUS_DESCRIPTIONS = {
    DevelopmentStatus.FOLDER_NOT_FOUND: "The specified folder does not exist",
    DevelopmentStatus.NOT_TEMPLATE_PROJECT: "Folder exists but is not set up for template development",
    DevelopmentStatus.APPLICATION_FOLDER_READY_FOR_TEMPLATING: "Application folder is ready to have templates created",
    DevelopmentStatus.TEMPLATE_FOLDER_WITHOUT_GENERATED_VERSION: "Has template configuration but no generated version for testing",
    DevelopmentStatus.GENERATED_FOLDER_MISSING_CONFIGURATION: "Generated folder exists but lacks template configuration",
    DevelopmentStatus.READY_FOR_TEMPLATE_ITERATION: "Ready for template iteration and refinement",
}

STATUS_RECOMMENDATIONS = {
    DevelopmentStatus.FOLDER_NOT_FOUND: (
        "Create the folder first: mkdir -p {path}",
    ),
    DevelopmentStatus.NOT_TEMPLATE_PROJECT: (
        "Initialize a git repository: git init {path}",
        "Or add template configuration: mkdir -p {path}/.git_template",
    ),
    DevelopmentStatus.APPLICATION_FOLDER_READY_FOR_TEMPLATING: (
        "Create template configuration: mkdir -p {path}/.git_template && touch {path}/.git_template/template.rb",
    ),
    DevelopmentStatus.TEMPLATE_FOLDER_WITHOUT_GENERATED_VERSION: (
        "Create the generated folder: git-template iterate {path}",
    ),
    DevelopmentStatus.GENERATED_FOLDER_MISSING_CONFIGURATION: (
        "Copy template configuration into the generated folder: git-template iterate {path}",
    ),
    DevelopmentStatus.READY_FOR_TEMPLATE_ITERATION: (
        "Run template iteration: git-template iterate {path}",
    ),
}


def describe_status(status: Optional[DevelopmentStatus]) -> str:
    return STATUS_DESCRIPTIONS.get(status, "Status requires manual review")


def status_recommendations(status: Optional[DevelopmentStatus], path: str) -> List[str]:
    templates = STATUS_RECOMMENDATIONS.get(
        status, ("Review folder structure and template configuration",)
    )
    return [template.format(path=path) for template in templates]


def classify_development_status(analysis: FolderAnalysis) -> DevelopmentStatus:
    """Map a folder snapshot onto exactly one development status.

    Checks run in precedence order; the first match wins.
    """
    if not analysis.exists:
        return DevelopmentStatus.FOLDER_NOT_FOUND

    if not (analysis.is_version_controlled or analysis.has_template_configuration):
        return DevelopmentStatus.NOT_TEMPLATE_PROJECT

    if not analysis.generated_counterpart_exists:
        if analysis.has_template_configuration:
            return DevelopmentStatus.TEMPLATE_FOLDER_WITHOUT_GENERATED_VERSION
        return DevelopmentStatus.APPLICATION_FOLDER_READY_FOR_TEMPLATING

    if not analysis.generated_counterpart_has_configuration:
        return DevelopmentStatus.GENERATED_FOLDER_MISSING_CONFIGURATION

    return DevelopmentStatus.READY_FOR_TEMPLATE_ITERATION


@dataclass(frozen=True)
class DevelopmentAnalysis:
    """Composite view of an application folder and its generated counterpart."""
    folder_analysis: FolderAnalysis
    development_status: DevelopmentStatus
    description: str
    recommendations: Tuple[str, ...]
    template_configuration: Optional[TemplateConfiguration] = None
    generated_folder_analysis: Optional[FolderAnalysis] = None
    generated_template_configuration: Optional[TemplateConfiguration] = None

    @property
    def path(self) -> str:
        return self.folder_analysis.path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "folder_analysis": self.folder_analysis.to_dict(),
            "development_status": self.development_status.value,
            "description": self.description,
            "recommendations": list(self.recommendations),
            "template_configuration": (
                self.template_configuration.to_dict() if self.template_configuration else None
            ),
            "generated_folder_analysis": (
                self.generated_folder_analysis.to_dict() if self.generated_folder_analysis else None
            ),
            "generated_template_configuration": (
                self.generated_template_configuration.to_dict()
                if self.generated_template_configuration else None
            ),
        }


class FolderAnalyzer:
    """Snapshots folders and classifies their template development status."""

    def __init__(self, config: Optional[IterationConfig] = None, cwd: Optional[Path] = None):
        """
        Args:
            config: Naming conventions for configuration and generated folders
            cwd: Directory generated_root is resolved against (defaults to the process cwd)
        """
        self.config = config or IterationConfig()
        self._cwd = Path(cwd) if cwd else None

    @property
    def cwd(self) -> Path:
        return (self._cwd or Path.cwd()).absolute()

    def analyze(self, path) -> FolderAnalysis:
        """Snapshot ``path``.

        Returns an all-false analysis for a missing path.

        Raises:
            FolderAnalysisError: On I/O failures other than "does not exist"
        """
        folder = Path(os.path.abspath(os.path.expanduser(str(path))))

        if not self._is_directory(folder):
            return FolderAnalysis.missing(str(folder))

        config_dir = self.config.template_dir_name
        counterpart = self.resolve_counterpart(folder)
        counterpart_exists = counterpart is not None
        analysis = FolderAnalysis(
            path=str(folder),
            exists=True,
            is_version_controlled=self._entry_exists(folder / ".git"),
            has_template_configuration=self._is_directory(folder / config_dir),
            generated_counterpart_path=str(counterpart) if counterpart else None,
            generated_counterpart_exists=counterpart_exists,
            generated_counterpart_has_configuration=(
                counterpart_exists and self._is_directory(counterpart / config_dir)
            ),
            expected_counterpart_path=str(self.candidate_counterparts(folder)[0]),
        )
        logger.debug(f"Analyzed {folder}: {analysis.to_dict()}")
        return analysis

    def candidate_counterparts(self, folder: Path) -> List[Path]:
        """Generated-folder locations for ``folder``, in lookup order."""
        folder = Path(folder)
        cwd = self.cwd
        try:
            relative = folder.relative_to(cwd)
        except ValueError:
            relative = Path(*folder.parts[1:]) if folder.is_absolute() else folder

        candidates = [cwd / self.config.generated_root / relative]
        candidates.extend(
            folder.parent / f"{folder.name}{suffix}"
            for suffix in self.config.legacy_suffixes
        )
        return candidates

    def resolve_counterpart(self, folder: Path) -> Optional[Path]:
        """First existing generated folder for ``folder``, or None."""
        for candidate in self.candidate_counterparts(folder):
            if candidate == folder:
                continue
            if self._is_directory(candidate):
                return candidate
        return None

    def analyze_development_status(self, path) -> DevelopmentAnalysis:
        """Analyze ``path`` together with its generated counterpart."""
        folder_analysis = self.analyze(path)
        status = classify_development_status(folder_analysis)

        template_configuration = None
        generated_analysis = None
        generated_configuration = None

        if folder_analysis.has_template_configuration:
            template_configuration = TemplateConfiguration.load(
                Path(folder_analysis.path) / self.config.template_dir_name, self.config
            )

        if folder_analysis.generated_counterpart_exists:
            generated_path = Path(folder_analysis.generated_counterpart_path)
            generated_analysis = FolderAnalysis(
                path=str(generated_path),
                exists=True,
                is_version_controlled=self._entry_exists(generated_path / ".git"),
                has_template_configuration=folder_analysis.generated_counterpart_has_configuration,
            )
            if folder_analysis.generated_counterpart_has_configuration:
                generated_configuration = TemplateConfiguration.load(
                    generated_path / self.config.template_dir_name, self.config
                )

        logger.info(f"{folder_analysis.path}: {status.value}")
        return DevelopmentAnalysis(
            folder_analysis=folder_analysis,
            development_status=status,
            description=describe_status(status),
            recommendations=tuple(status_recommendations(status, folder_analysis.path)),
            template_configuration=template_configuration,
            generated_folder_analysis=generated_analysis,
            generated_template_configuration=generated_configuration,
        )

    @staticmethod
    def _is_directory(path: Path) -> bool:
        try:
            return stat.S_ISDIR(os.stat(path).st_mode)
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as e:
            raise FolderAnalysisError(path, e.strerror or str(e))

    @staticmethod
    def _entry_exists(path: Path) -> bool:
        # A .git file marks a submodule or worktree checkout
        try:
            os.lstat(path)
            return True
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as e:
            raise FolderAnalysisError(path, e.strerror or str(e))
