"""Template iteration: clean, apply, compare and converge.

One call to ``execute_repo_iteration`` runs a single cycle against an
application folder and its generated counterpart:

1. Empty the generated folder, keeping its template configuration.
2. Apply the generated folder's template configuration into it.
3. Compare the application folder (source) with the generated folder (target).
4. When they differ, append a corrective block to the generated folder's
   cleanup phase so the next cycle converges.

The application folder is never written to. Only the generated folder's
content and its cleanup script change.
"""
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from git_template.core.comparison_engine import ComparisonEngine
from git_template.core.config import IterationConfig
from git_template.core.errors import (
    FolderAnalysisError,
    GitTemplateError,
    TemplateProcessingError,
    TemplateValidationError,
    error_type_name,
)
from git_template.core.folder_analyzer import DevelopmentAnalysis
from git_template.core.logger import get_logger
from git_template.models.comparison_result import ComparisonResult
from git_template.models.options import IterationOptions
from git_template.models.results import IterationResult
from git_template.models.template_configuration import TemplateConfiguration
from git_template.services.template_applier import SubprocessTemplateApplier, TemplateApplier

logger = get_logger(__name__)


class TemplateIteration:
    """Runs iteration cycles for analyzed application folders."""

    def __init__(
        self,
        applier: Optional[TemplateApplier] = None,
        config: Optional[IterationConfig] = None,
        engine: Optional[ComparisonEngine] = None,
    ):
        self.config = config or IterationConfig()
        self.applier = applier or SubprocessTemplateApplier(self.config)
        self.engine = engine or ComparisonEngine()

    def execute_repo_iteration(
        self,
        analysis: DevelopmentAnalysis,
        options: Optional[IterationOptions] = None,
    ) -> IterationResult:
        """Run one iteration cycle.

        Never raises for expected failures; they are reported through
        ``IterationResult.success``, ``error_message`` and ``error_type``.

        Args:
            analysis: Development analysis of the application folder
            options: Iteration options (``detailed_comparison`` attaches the comparison)

        Returns:
            IterationResult describing the cycle
        """
        options = options or IterationOptions()
        folder = analysis.folder_analysis
        template_applied = False
        comparison = None
        cleanup_updated = False

        try:
            generated_config = self._check_preconditions(analysis)
            generated = Path(folder.generated_counterpart_path)

            logger.info(f"Iterating {folder.path} -> {generated}")
            self.clean_generated_folder(generated)

            template_applied = self.apply_template(generated_config, generated)
            if not template_applied:
                logger.warning(f"Template application reported failure for {generated}")

            comparison = self.compare_folders(Path(folder.path), generated)
            if comparison.has_differences:
                cleanup_updated = self.update_cleanup_phase(generated_config, comparison)

        except Exception as e:
            logger.error(f"Template iteration failed for {folder.path}: {e}")
            return IterationResult(
                success=False,
                application_folder=folder.path,
                generated_folder=folder.generated_counterpart_path,
                template_applied=template_applied,
                differences_found=bool(comparison and comparison.has_differences),
                differences_count=comparison.total_differences if comparison else 0,
                cleanup_updated=cleanup_updated,
                comparison_result=comparison if options.detailed_comparison else None,
                error_message=str(e),
                error_type=error_type_name(e),
            )

        logger.info(
            f"Iteration of {folder.path} finished with "
            f"{comparison.total_differences} difference(s)"
        )
        return IterationResult(
            success=True,
            application_folder=folder.path,
            generated_folder=str(generated),
            template_applied=template_applied,
            differences_found=comparison.has_differences,
            differences_count=comparison.total_differences,
            cleanup_updated=cleanup_updated,
            comparison_result=comparison if options.detailed_comparison else None,
        )

    def _check_preconditions(self, analysis: DevelopmentAnalysis) -> TemplateConfiguration:
        folder = analysis.folder_analysis

        if not folder.exists:
            raise FolderAnalysisError(folder.path, "Application folder does not exist")

        app_config = analysis.template_configuration
        if app_config is None:
            raise TemplateValidationError(
                Path(folder.path) / self.config.template_dir_name,
                ["Application folder has no template configuration"],
            )
        if not app_config.valid:
            raise TemplateValidationError(app_config.path, app_config.validation_errors)

        if not folder.generated_counterpart_exists:
            raise FolderAnalysisError(folder.path, "Generated folder does not exist")

        generated_config = analysis.generated_template_configuration
        if generated_config is None:
            raise TemplateValidationError(
                Path(folder.generated_counterpart_path) / self.config.template_dir_name,
                ["Generated folder has no template configuration"],
            )
        if not generated_config.valid:
            raise TemplateValidationError(generated_config.path, generated_config.validation_errors)

        return generated_config

    def clean_generated_folder(self, generated: Path) -> None:
        """Remove everything in ``generated`` except its template configuration.

        The configuration directory is moved aside first and restored in every
        case. The backup sits next to the generated folder so the move is a
        rename on the same filesystem. On failure the original error is
        re-raised after the restore; if the restore itself fails the backup
        is left in place.
        """
        generated = Path(generated)
        config_dir = generated / self.config.template_dir_name
        backup_root = Path(tempfile.mkdtemp(
            prefix=f".{generated.name}_backup_", dir=str(generated.parent)
        ))
        backup = backup_root / self.config.template_dir_name
        keep_backup = False

        try:
            if config_dir.exists():
                os.rename(config_dir, backup)
            self._remove_contents(generated)
            if backup.exists():
                os.rename(backup, config_dir)
        except Exception:
            # A backup that exists holds the only complete copy
            if backup.exists():
                keep_backup = not self._restore_configuration(backup, config_dir)
            raise
        finally:
            if not keep_backup:
                shutil.rmtree(backup_root, ignore_errors=True)

        logger.debug(f"Cleaned generated folder {generated}")

    def _restore_configuration(self, backup: Path, config_dir: Path) -> bool:
        try:
            if config_dir.exists():
                shutil.rmtree(config_dir)
            os.rename(backup, config_dir)
        except OSError as restore_error:
            # The original failure is what the caller sees
            logger.error(
                f"Failed to restore template configuration to {config_dir}: {restore_error}. "
                f"Backup kept at {backup}"
            )
            return False
        return True

    @staticmethod
    def _remove_contents(folder: Path) -> None:
        with os.scandir(folder) as it:
            entries = list(it)
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                shutil.rmtree(entry.path)
            else:
                os.unlink(entry.path)

    def apply_template(self, template_config: TemplateConfiguration, generated: Path) -> bool:
        try:
            result = self.applier.apply(Path(template_config.path), generated)
        except GitTemplateError:
            raise
        except Exception as e:
            raise TemplateProcessingError("apply_template", str(e), cause=e)

        if result.output:
            logger.debug(f"Template output:\n{result.output.rstrip()}")
        return result.success

    def compare_folders(self, application: Path, generated: Path) -> ComparisonResult:
        try:
            return self.engine.compare(
                application, generated, exclude=(self.config.template_dir_name,)
            )
        except Exception as e:
            raise TemplateProcessingError("compare_folders", str(e), cause=e)

    def update_cleanup_phase(
        self, template_config: TemplateConfiguration, comparison: ComparisonResult
    ) -> bool:
        script = self.engine.generate_cleanup_script(comparison)
        try:
            template_config.append_cleanup(script)
        except OSError as e:
            raise TemplateProcessingError("update_cleanup_phase", str(e), cause=e)
        return True
