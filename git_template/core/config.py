"""git-template runtime configuration and settings."""
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Tuple

import yaml

# Default config search paths (ordered by proximity to current run)
CONFIG_PATHS = [
    "./git-template.yml",
    str(Path.home() / ".config" / "git-template" / "config.yml"),
]


class ConfigError(Exception):
    """Raised when a configuration file cannot be used."""
    pass


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class IterationConfig:
    """Runtime configuration for template iteration.

    Passed explicitly into the analyzer, orchestrator and CLI helpers; nothing
    in the core reads process-wide state on its own.

    Attributes:
        template_dir_name: Name of the template configuration directory
        entry_script: Required entry script inside the configuration directory
        cleanup_script: Appendable cleanup phase script
        generated_root: Top-level directory holding generated counterparts
        legacy_suffixes: Sibling-folder suffixes checked after generated_root
        apply_command: Command used to apply a template ({template} and {target} are substituted)
        verbose: Show informational output
        debug: Show debug output
    """

    template_dir_name: str = ".git_template"
    entry_script: str = "template.rb"
    cleanup_script: str = "cleanup.rb"
    modules_dir_name: str = "modules"
    files_dir_name: str = "files"
    generated_root: str = "templated"
    legacy_suffixes: Tuple[str, ...] = ("-templated", "-templatd")
    apply_command: str = "ruby {template}"
    verbose: bool = False
    debug: bool = False

    @classmethod
    def from_env(cls, base: Optional["IterationConfig"] = None) -> "IterationConfig":
        """Create config from environment variables.

        Environment variables:
            GIT_TEMPLATE_APPLY_COMMAND: Command used to apply a template
            GIT_TEMPLATE_GENERATED_ROOT: Directory holding generated folders
            GIT_TEMPLATE_VERBOSE: Enable verbose output (1/true/yes)
            GIT_TEMPLATE_DEBUG: Enable debug output (1/true/yes)

        Args:
            base: Config to layer the environment on top of (defaults to built-ins)

        Returns:
            IterationConfig instance with values from environment or base
        """
        base = base or cls()
        return replace(
            base,
            apply_command=os.getenv("GIT_TEMPLATE_APPLY_COMMAND", base.apply_command),
            generated_root=os.getenv("GIT_TEMPLATE_GENERATED_ROOT", base.generated_root),
            verbose=_env_flag("GIT_TEMPLATE_VERBOSE", base.verbose),
            debug=_env_flag("GIT_TEMPLATE_DEBUG", base.debug),
        )

    @classmethod
    def from_file(cls, config_path: Path) -> "IterationConfig":
        """Load config values from a YAML file.

        Unknown keys are rejected so typos don't silently fall back to defaults.

        Raises:
            ConfigError: If the file is unreadable, malformed or has unknown keys
        """
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(
                f"Unknown config keys in {config_path}: {', '.join(unknown)}"
            )

        if "legacy_suffixes" in data:
            data["legacy_suffixes"] = tuple(data["legacy_suffixes"] or ())

        return cls(**data)


def find_config(config_path: Optional[str] = None) -> Optional[Path]:
    """Locate the active git-template configuration file, if any."""
    if config_path:
        return Path(config_path)

    if env_config := os.environ.get("GIT_TEMPLATE_CONFIG"):
        return Path(env_config)

    for path in CONFIG_PATHS:
        if Path(path).exists():
            return Path(path)

    return None


def load_config(
    config_path: Optional[str] = None,
    verbose: bool = False,
    debug: bool = False,
) -> IterationConfig:
    """Build the effective configuration.

    Precedence (lowest first): defaults, YAML file, environment, CLI flags.
    """
    found = find_config(config_path)
    config = IterationConfig.from_file(found) if found else IterationConfig()
    config = IterationConfig.from_env(config)

    if verbose or debug:
        config = replace(config, verbose=config.verbose or verbose, debug=config.debug or debug)

    return config
