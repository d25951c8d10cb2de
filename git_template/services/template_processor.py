"""Template setup and completeness checks around the iteration core.

Covers the non-iterating strategies (creating a generated folder, copying a
template configuration into one) and the one-shot completeness check that
applies a template into a scratch directory.
"""
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from git_template.core.comparison_engine import ComparisonEngine
from git_template.core.config import IterationConfig
from git_template.core.errors import (
    FolderAnalysisError,
    GitTemplateError,
    InvalidPathError,
    TemplateProcessingError,
    TemplateValidationError,
)
from git_template.core.folder_analyzer import DevelopmentAnalysis
from git_template.core.logger import get_logger
from git_template.models.template_configuration import TemplateConfiguration
from git_template.services.template_applier import SubprocessTemplateApplier, TemplateApplier

logger = get_logger(__name__)


class TemplateProcessor:
    """Prepares generated folders and checks template completeness."""

    def __init__(
        self,
        applier: Optional[TemplateApplier] = None,
        config: Optional[IterationConfig] = None,
        engine: Optional[ComparisonEngine] = None,
    ):
        self.config = config or IterationConfig()
        self.applier = applier or SubprocessTemplateApplier(self.config)
        self.engine = engine or ComparisonEngine()

    def create_generated_folder(self, analysis: DevelopmentAnalysis) -> Dict[str, Any]:
        """Create the generated counterpart and seed it with the template configuration.

        Raises:
            FolderAnalysisError: If the application folder has no template configuration
            TemplateProcessingError: If the generated folder already exists or copying fails
        """
        folder = analysis.folder_analysis
        source_config = self._require_source_configuration(analysis)

        generated = Path(folder.expected_counterpart_path)
        if generated.exists():
            raise TemplateProcessingError(
                "create_generated_folder", f"Generated folder already exists: {generated}"
            )

        try:
            generated.mkdir(parents=True)
            shutil.copytree(source_config, generated / self.config.template_dir_name)
        except OSError as e:
            raise TemplateProcessingError("create_generated_folder", str(e), cause=e)

        logger.info(f"Created generated folder {generated}")
        return {
            "folder_path": folder.path,
            "iteration_type": "create_generated_folder",
            "generated_folder": str(generated),
        }

    def sync_configuration(self, analysis: DevelopmentAnalysis) -> Dict[str, Any]:
        """Copy the application's template configuration into the generated folder."""
        folder = analysis.folder_analysis
        source_config = self._require_source_configuration(analysis)

        if not folder.generated_counterpart_exists:
            raise FolderAnalysisError(folder.path, "No generated folder to copy configuration into")

        generated = Path(folder.generated_counterpart_path)
        destination = generated / self.config.template_dir_name
        if destination.exists():
            raise TemplateProcessingError(
                "sync_configuration", f"Template configuration already present: {destination}"
            )

        try:
            shutil.copytree(source_config, destination)
        except OSError as e:
            raise TemplateProcessingError("sync_configuration", str(e), cause=e)

        logger.info(f"Copied template configuration into {generated}")
        return {
            "folder_path": folder.path,
            "iteration_type": "sync_configuration",
            "generated_folder": str(generated),
        }

    def validate_template_completeness(self, template_path, reference_path) -> Dict[str, Any]:
        """Apply a template into a scratch directory and compare with a reference app.

        Raises:
            InvalidPathError: If either path is not a directory
            TemplateValidationError: If the template configuration is invalid
            TemplateProcessingError: If applying or comparing fails
        """
        template_path = Path(template_path).absolute()
        reference_path = Path(reference_path).absolute()
        for path in (template_path, reference_path):
            if not path.is_dir():
                raise InvalidPathError(path)

        configuration = TemplateConfiguration.load(template_path, self.config)
        if not configuration.valid:
            raise TemplateValidationError(template_path, configuration.validation_errors)

        with tempfile.TemporaryDirectory(prefix="template_completeness_") as temp_dir:
            scratch = Path(temp_dir) / "application"
            scratch.mkdir()
            try:
                apply_result = self.applier.apply(template_path, scratch)
            except GitTemplateError:
                raise
            except Exception as e:
                raise TemplateProcessingError("validate_template_completeness", str(e), cause=e)

            if not apply_result.success:
                return {
                    "complete": False,
                    "error": "Template application failed",
                    "output": apply_result.output,
                }

            comparison = self.engine.compare(
                reference_path, scratch, exclude=(self.config.template_dir_name,)
            )
            return {
                "complete": not comparison.has_differences,
                "differences_count": comparison.total_differences,
                "comparison_summary": comparison.summary(),
                "differences": [d.to_dict() for d in comparison.differences],
            }

    def _require_source_configuration(self, analysis: DevelopmentAnalysis) -> Path:
        folder = analysis.folder_analysis
        if not folder.has_template_configuration:
            raise FolderAnalysisError(folder.path, "No template configuration found")
        return Path(folder.path) / self.config.template_dir_name
