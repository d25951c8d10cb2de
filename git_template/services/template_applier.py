"""Template application collaborators.

The templating engine itself is external; this module only defines the
boundary (``apply(template_config_path, target_path)``) and a subprocess-based
default that shells out to whatever command runs the entry script.
"""
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from git_template.core.config import IterationConfig
from git_template.core.errors import TemplateProcessingError
from git_template.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ApplyResult:
    """Outcome of one template application."""
    success: bool
    output: str = ""


class TemplateApplier(ABC):
    """Abstract interface for applying a template configuration to a directory."""

    @abstractmethod
    def apply(self, template_config_path: Path, target_path: Path) -> ApplyResult:
        """Apply the template found at ``template_config_path`` into ``target_path``.

        Blocks until the template engine finishes; no timeout is enforced.

        Args:
            template_config_path: Template configuration directory
            target_path: Directory receiving the generated files

        Returns:
            ApplyResult with success flag and captured output
        """
        pass


class SubprocessTemplateApplier(TemplateApplier):
    """Runs the configured apply command inside the target directory.

    ``{template}`` in the command is replaced by the entry script path and
    ``{target}`` by the target directory.
    """

    def __init__(self, config: Optional[IterationConfig] = None):
        self.config = config or IterationConfig()

    def build_command(self, template_config_path: Path, target_path: Path) -> list:
        entry_script = Path(template_config_path) / self.config.entry_script
        return [
            part.format(template=str(entry_script), target=str(target_path))
            for part in shlex.split(self.config.apply_command)
        ]

    def apply(self, template_config_path: Path, target_path: Path) -> ApplyResult:
        target_path = Path(target_path)
        target_path.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(template_config_path, target_path)

        logger.info(f"Applying template: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=target_path,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise TemplateProcessingError(
                "apply_template", f"Template command not found: {cmd[0]}", cause=e
            )

        output = (result.stdout or "") + (result.stderr or "")
        if result.returncode != 0:
            logger.warning(f"Template command exited with {result.returncode}")
            if result.stderr:
                logger.debug(f"Error output: {result.stderr.strip()}")

        return ApplyResult(success=result.returncode == 0, output=output)
