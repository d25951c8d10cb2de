"""Template configuration bundle found in a .git_template directory.

Layout under the configuration root::

    template.rb        required entry script
    modules/<phase>/   optional lifecycle phases
    files/             optional static files
    cleanup.rb         optional cleanup phase, appended to by iteration
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from git_template.core.config import IterationConfig
from git_template.core.logger import get_logger

logger = get_logger(__name__)

CLEANUP_MARKER = "# Added by template iteration"


@dataclass(frozen=True)
class TemplateConfiguration:
    """Validated view of one template configuration directory."""
    path: str
    has_entry_script: bool
    has_module_directory: bool
    has_files_directory: bool
    lifecycle_phases: Tuple[str, ...]
    cleanup_content: Optional[str]
    validation_errors: Tuple[str, ...]
    entry_script: str = "template.rb"
    cleanup_script: str = "cleanup.rb"

    @property
    def valid(self) -> bool:
        return not self.validation_errors

    @property
    def entry_script_path(self) -> Path:
        return Path(self.path) / self.entry_script

    @property
    def cleanup_script_path(self) -> Path:
        return Path(self.path) / self.cleanup_script

    @property
    def has_cleanup_phase(self) -> bool:
        return self.cleanup_content is not None

    @classmethod
    def load(cls, path, config: Optional[IterationConfig] = None) -> "TemplateConfiguration":
        """Read and validate the configuration directory at ``path``.

        Never raises for a missing or incomplete bundle; problems end up in
        ``validation_errors``.
        """
        config = config or IterationConfig()
        root = Path(path).absolute()
        errors = []

        try:
            if not root.is_dir():
                errors.append(f"Template configuration directory does not exist: {root}")
                return cls._unusable(root, errors, config)

            entry = root / config.entry_script
            has_entry_script = entry.is_file()
            modules_dir = root / config.modules_dir_name
            has_module_directory = modules_dir.is_dir()
            has_files_directory = (root / config.files_dir_name).is_dir()
            cleanup = root / config.cleanup_script
            has_cleanup = cleanup.is_file()
        except OSError as e:
            errors.append(f"Template configuration directory is not readable: {e}")
            return cls._unusable(root, errors, config)

        if not has_entry_script:
            errors.append(f"Missing required {config.entry_script} file")
        else:
            try:
                entry.read_bytes()
            except OSError as e:
                errors.append(f"Template file is not readable: {e}")

        lifecycle_phases = ()
        if has_module_directory:
            try:
                lifecycle_phases = _lifecycle_phases(modules_dir)
            except OSError as e:
                errors.append(f"Modules directory is not readable: {e}")

        cleanup_content = None
        if has_cleanup:
            try:
                # Undecodable bytes must not stop classification
                cleanup_content = cleanup.read_bytes().decode("utf-8", errors="replace")
            except OSError as e:
                errors.append(f"Cleanup script is not readable: {e}")

        configuration = cls(
            path=str(root),
            has_entry_script=has_entry_script,
            has_module_directory=has_module_directory,
            has_files_directory=has_files_directory,
            lifecycle_phases=lifecycle_phases,
            cleanup_content=cleanup_content,
            validation_errors=tuple(errors),
            entry_script=config.entry_script,
            cleanup_script=config.cleanup_script,
        )
        if errors:
            logger.debug(f"Template configuration {root} has issues: {errors}")
        return configuration

    @classmethod
    def _unusable(cls, root: Path, errors, config: IterationConfig) -> "TemplateConfiguration":
        logger.debug(f"Template configuration {root} is unusable: {errors}")
        return cls(
            path=str(root),
            has_entry_script=False,
            has_module_directory=False,
            has_files_directory=False,
            lifecycle_phases=(),
            cleanup_content=None,
            validation_errors=tuple(errors),
            entry_script=config.entry_script,
            cleanup_script=config.cleanup_script,
        )

    def append_cleanup(self, additional_content: str) -> Path:
        """Append a corrective block to the cleanup script.

        Existing content is kept; the file is created when absent.

        Returns:
            Path of the cleanup script
        """
        cleanup = self.cleanup_script_path
        with open(cleanup, "a") as f:
            f.write(f"\n\n{CLEANUP_MARKER}\n{additional_content}")
        logger.info(f"Appended {len(additional_content.splitlines())} line(s) to {cleanup}")
        return cleanup

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "valid": self.valid,
            "has_entry_script": self.has_entry_script,
            "has_module_directory": self.has_module_directory,
            "has_files_directory": self.has_files_directory,
            "lifecycle_phases": list(self.lifecycle_phases),
            "has_cleanup_phase": self.has_cleanup_phase,
            "validation_errors": list(self.validation_errors),
        }


def _lifecycle_phases(modules_dir: Path) -> Tuple[str, ...]:
    return tuple(sorted(
        entry.name
        for entry in modules_dir.iterdir()
        if entry.is_dir() and not entry.name.startswith(".")
    ))
