"""Iteration strategy selection.

Turns a development status into the next action. ``determine_strategy`` does
no I/O; a caller-level ``force`` flag may override ``can_proceed`` before
dispatch but never changes the chosen strategy.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from git_template.core.folder_analyzer import DevelopmentAnalysis
from git_template.models.folder_analysis import DevelopmentStatus, FolderAnalysis
from git_template.models.options import IterationOptions


class StrategyType(Enum):
    REPO_ITERATION = "repo_iteration"
    CREATE_GENERATED_FOLDER = "create_generated_folder"
    SYNC_CONFIGURATION = "sync_configuration"
    CANNOT_ITERATE = "cannot_iterate"
    UNKNOWN = "unknown"

    @property
    def title(self) -> str:
        return " ".join(word.capitalize() for word in self.value.split("_"))


@dataclass(frozen=True)
class IterationStrategyResult:
    """Chosen next action for one folder."""
    strategy_type: StrategyType
    reason: str
    can_proceed: bool
    prerequisites_met: bool
    recommended_action: str
    missing_requirements: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy_type": self.strategy_type.value,
            "reason": self.reason,
            "can_proceed": self.can_proceed,
            "prerequisites_met": self.prerequisites_met,
            "recommended_action": self.recommended_action,
            "missing_requirements": list(self.missing_requirements),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class PrerequisiteValidation:
    """Reporting view of the same facts the strategy is derived from."""
    valid: bool
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors), "warnings": list(self.warnings)}


# status -> (strategy, reason, can_proceed, prerequisites_met, recommended_action, missing)
_STRATEGY_TABLE = {
    DevelopmentStatus.READY_FOR_TEMPLATE_ITERATION: (
        StrategyType.REPO_ITERATION,
        "Folder is ready for template iteration",
        True,
        True,
        "Execute full template iteration process",
        (),
    ),
    DevelopmentStatus.TEMPLATE_FOLDER_WITHOUT_GENERATED_VERSION: (
        StrategyType.CREATE_GENERATED_FOLDER,
        "Template configuration exists but no generated version found",
        True,
        False,
        "Create generated folder and copy template configuration",
        ("generated folder",),
    ),
    DevelopmentStatus.GENERATED_FOLDER_MISSING_CONFIGURATION: (
        StrategyType.SYNC_CONFIGURATION,
        "Generated folder exists but lacks template configuration",
        True,
        False,
        "Copy template configuration to generated folder",
        ("template configuration in generated folder",),
    ),
    DevelopmentStatus.APPLICATION_FOLDER_READY_FOR_TEMPLATING: (
        StrategyType.CANNOT_ITERATE,
        "Application folder needs template configuration first",
        False,
        False,
        "Create template configuration: mkdir -p {path}/.git_template && touch {path}/.git_template/template.rb",
        ("template configuration", "generated folder"),
    ),
    DevelopmentStatus.FOLDER_NOT_FOUND: (
        StrategyType.CANNOT_ITERATE,
        "Folder does not exist",
        False,
        False,
        "Create the folder first: mkdir -p {path}",
        ("folder existence",),
    ),
    DevelopmentStatus.NOT_TEMPLATE_PROJECT: (
        StrategyType.CANNOT_ITERATE,
        "Folder is not set up for template development",
        False,
        False,
        "Initialize as template project or add template configuration",
        ("version control", "template configuration"),
    ),
}

_UNKNOWN_STRATEGY = (
    StrategyType.UNKNOWN,
    "Cannot determine appropriate iteration strategy",
    False,
    False,
    "Review folder structure and run status command for detailed analysis",
    ("manual review required",),
)


def determine_strategy(
    development_status: Union[DevelopmentStatus, str, None],
    options: Optional[IterationOptions] = None,
    folder_path: str = ".",
) -> IterationStrategyResult:
    """Pick the next action for a development status.

    Args:
        development_status: Classification from the folder analyzer (enum or its value)
        options: Iteration options; accepted for interface symmetry, ``force`` is
            applied by the caller
        folder_path: Folder named in recommendations

    Returns:
        IterationStrategyResult; unrecognised statuses map to ``unknown``
    """
    status = _coerce_status(development_status)
    (strategy_type, reason, can_proceed, prerequisites_met,
     recommended_action, missing) = _STRATEGY_TABLE.get(status, _UNKNOWN_STRATEGY)

    recommended_action = recommended_action.format(path=folder_path)
    return IterationStrategyResult(
        strategy_type=strategy_type,
        reason=reason,
        can_proceed=can_proceed,
        prerequisites_met=prerequisites_met,
        recommended_action=recommended_action,
        missing_requirements=tuple(missing),
        recommendations=tuple(
            strategy_recommendations(strategy_type, folder_path, recommended_action)
        ),
    )


def strategy_recommendations(
    strategy_type: StrategyType, folder_path: str, recommended_action: str = ""
) -> List[str]:
    """Ordered next steps for a strategy."""
    if strategy_type == StrategyType.REPO_ITERATION:
        return [
            f"Run: git-template iterate {folder_path}",
            f"Review differences with: git-template iterate {folder_path} --format summary",
        ]
    if strategy_type == StrategyType.CREATE_GENERATED_FOLDER:
        return [
            f"Create generated folder: git-template iterate {folder_path}",
            f"Then run iteration: git-template iterate {folder_path}",
        ]
    if strategy_type == StrategyType.SYNC_CONFIGURATION:
        return [
            f"Copy template configuration to generated folder: git-template iterate {folder_path}",
            f"Then run iteration: git-template iterate {folder_path}",
        ]
    if strategy_type == StrategyType.CANNOT_ITERATE:
        return [
            recommended_action,
            f"Then run: git-template status {folder_path} to verify setup",
        ]
    return [
        f"Run: git-template status {folder_path} --format json for detailed analysis",
        "Review folder structure and template configuration",
    ]


def validate_prerequisites(
    analysis: Union[DevelopmentAnalysis, FolderAnalysis],
) -> PrerequisiteValidation:
    """Re-derive iteration readiness as errors and warnings.

    Uses the same predicates as ``classify_development_status``: valid exactly
    when the folder classifies as ready for iteration and every loaded
    template configuration is valid.
    """
    if isinstance(analysis, DevelopmentAnalysis):
        folder = analysis.folder_analysis
        configurations = (
            ("Main", analysis.template_configuration),
            ("Generated", analysis.generated_template_configuration),
        )
    else:
        folder = analysis
        configurations = ()

    errors: List[str] = []
    warnings: List[str] = []

    if not folder.exists:
        return PrerequisiteValidation(
            valid=False, errors=(f"Folder does not exist: {folder.path}",)
        )

    if not (folder.is_version_controlled or folder.has_template_configuration):
        errors.append("Folder is neither a git repository nor template-configured")
    else:
        if not folder.is_version_controlled:
            warnings.append("Folder is not a git repository")
        if not folder.has_template_configuration:
            warnings.append("No template configuration found in application folder")

    if not folder.generated_counterpart_exists:
        errors.append("No generated folder found")
    elif not folder.generated_counterpart_has_configuration:
        errors.append("Generated folder lacks template configuration")

    for label, configuration in configurations:
        if configuration is not None and not configuration.valid:
            errors.append(f"{label} template configuration is invalid")
            errors.extend(configuration.validation_errors)

    return PrerequisiteValidation(
        valid=not errors, errors=tuple(errors), warnings=tuple(warnings)
    )


def _coerce_status(value) -> Optional[DevelopmentStatus]:
    if isinstance(value, DevelopmentStatus):
        return value
    try:
        return DevelopmentStatus(value)
    except ValueError:
        return None
