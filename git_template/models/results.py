"""Result variants returned by the iteration commands.

The set is closed: ``CommandResult``, ``IterationResult``, ``StrategyReport``
and ``StatusReport``. Each renders itself for every ``OutputFormat``.
"""
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from git_template.core.folder_analyzer import DevelopmentAnalysis
from git_template.core.iteration_strategy import (
    IterationStrategyResult,
    PrerequisiteValidation,
)
from git_template.models.comparison_result import ComparisonResult
from git_template.models.options import OutputFormat

RULE_WIDTH = 80
DIFFERENCE_SAMPLE = 5


def status_indicator(value) -> str:
    return "✓" if value else "✗"


def _label(key: str) -> str:
    return key.replace("_", " ").capitalize()


class Result(ABC):
    """Common rendering entry point for all result variants."""

    @property
    @abstractmethod
    def successful(self) -> bool:
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        pass

    @abstractmethod
    def render_detailed(self) -> str:
        pass

    @abstractmethod
    def render_summary(self) -> str:
        pass

    def render_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)

    def render(self, output_format: Union[OutputFormat, str] = OutputFormat.DETAILED) -> str:
        output_format = OutputFormat(output_format)
        if output_format == OutputFormat.JSON:
            return self.render_json()
        if output_format == OutputFormat.SUMMARY:
            return self.render_summary()
        return self.render_detailed()


@dataclass
class CommandResult(Result):
    """Outcome of a non-iterating command (setup steps, refused runs, errors)."""
    success: bool
    operation: str
    data: Dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None
    error_type: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def failure(cls, operation: str, error: Union[BaseException, str]) -> "CommandResult":
        if isinstance(error, BaseException):
            return cls(
                success=False,
                operation=operation,
                error_message=str(error),
                error_type=type(error).__name__,
            )
        return cls(success=False, operation=operation, error_message=error)

    @property
    def successful(self) -> bool:
        return self.success

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "operation": self.operation,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.success:
            data.update(self.data)
        else:
            data["error"] = self.error_message
            if self.error_type:
                data["error_type"] = self.error_type
        return data

    def render_summary(self) -> str:
        if self.success:
            return f"✅ {self.operation} completed successfully"
        return f"❌ {self.operation} failed: {self.error_message}"

    def render_detailed(self) -> str:
        timestamp = self.timestamp.isoformat(timespec="seconds")
        if not self.success:
            lines = [
                f"❌ Operation: {self.operation}",
                "   Status: Failed",
                f"   Error: {self.error_message}",
            ]
            if self.error_type:
                lines.append(f"   Error Type: {self.error_type}")
            lines.append(f"   Timestamp: {timestamp}")
            return "\n".join(lines)

        lines = [
            f"✅ Operation: {self.operation}",
            "   Status: Success",
            f"   Timestamp: {timestamp}",
        ]
        for key, value in self.data.items():
            lines.append(f"   {_label(key)}: {value}")
        return "\n".join(lines)


@dataclass
class IterationResult(Result):
    """Outcome of one clean/apply/compare/converge cycle."""
    success: bool
    application_folder: str
    generated_folder: Optional[str]
    template_applied: bool = False
    differences_found: bool = False
    differences_count: int = 0
    cleanup_updated: bool = False
    comparison_result: Optional[ComparisonResult] = None
    error_message: Optional[str] = None
    error_type: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def successful(self) -> bool:
        return self.success

    @property
    def complete(self) -> bool:
        """Template reproduces the application exactly."""
        return self.success and not self.differences_found

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "application_folder": self.application_folder,
            "generated_folder": self.generated_folder,
            "template_applied": self.template_applied,
            "differences_found": self.differences_found,
            "differences_count": self.differences_count,
            "cleanup_updated": self.cleanup_updated,
            "comparison": self.comparison_result.to_dict() if self.comparison_result else None,
            "timestamp": self.timestamp.isoformat(),
        }
        if not self.success:
            data["error"] = self.error_message
            data["error_type"] = self.error_type
        return data

    def render_summary(self) -> str:
        lines = [
            "Template Iteration Summary",
            "=" * 40,
            f"Folder: {Path(self.application_folder).name}",
            f"Status: {'Success' if self.success else 'Failed'}",
            f"Differences: {self.differences_count}",
            f"Cleanup Updated: {'Yes' if self.cleanup_updated else 'No'}",
        ]
        if not self.success:
            lines.append(f"Error: {self.error_message}")
        elif self.differences_found:
            lines.extend(["", "Next: Review differences and refine the template"])
        else:
            lines.extend(["", "Template iteration completed successfully"])
        return "\n".join(lines)

    def render_detailed(self) -> str:
        lines = [
            "=" * RULE_WIDTH,
            "Template Iteration Report".center(RULE_WIDTH),
            "=" * RULE_WIDTH,
            "",
            f"Application Folder: {self.application_folder}",
            f"Generated Folder: {self.generated_folder}",
            f"Iteration Time: {self.timestamp.strftime('%Y-%m-%d %H:%M:%S')}",
            "",
            "ITERATION RESULTS",
            "-" * 40,
            f"  Success: {status_indicator(self.success)}",
            f"  Template Applied: {status_indicator(self.template_applied)}",
            f"  Differences Found: {status_indicator(self.differences_found)}",
            f"  Differences Count: {self.differences_count}",
            f"  Cleanup Updated: {status_indicator(self.cleanup_updated)}",
            "",
        ]

        if not self.success:
            lines.extend([
                "ERROR",
                "-" * 40,
                f"  {self.error_type}: {self.error_message}",
                "",
            ])

        if self.comparison_result is not None:
            lines.extend(_comparison_section(self.comparison_result))

        lines.extend(["NEXT STEPS", "-" * 40])
        lines.extend(f"  {i}. {step}" for i, step in enumerate(self._next_steps(), 1))
        lines.extend(["", "=" * RULE_WIDTH])
        return "\n".join(lines)

    def _next_steps(self) -> List[str]:
        if not self.success:
            return [
                "Review error messages above",
                "Fix template configuration issues",
                f"Run: git-template status {self.application_folder} for analysis",
            ]
        if self.differences_found:
            return [
                "Review the differences between application and generated folders",
                "Adjust the template body if needed",
                f"Run iteration again: git-template iterate {self.application_folder}",
            ]
        return [
            "Template iteration completed successfully",
            "No differences found - template is complete",
        ]


def _comparison_section(comparison: ComparisonResult) -> List[str]:
    lines = [
        "COMPARISON DETAILS",
        "-" * 40,
        f"  Added Files: {len(comparison.added_files)}",
        f"  Modified Files: {len(comparison.modified_files)}",
        f"  Deleted Files: {len(comparison.deleted_files)}",
        f"  Total Differences: {comparison.total_differences}",
        "",
    ]
    if not comparison.has_differences:
        return lines

    lines.extend(["DIFFERENCES SUMMARY", "-" * 40])
    shown = 0
    for marker, files in (
        ("+", comparison.added_files),
        ("~", comparison.modified_files),
        ("-", comparison.deleted_files),
    ):
        sample = sorted(files)[:DIFFERENCE_SAMPLE]
        shown += len(sample)
        lines.extend(f"  {marker} {rel_path}" for rel_path in sample)

    remaining = comparison.total_differences - shown
    if remaining > 0:
        lines.append(f"  ... and {remaining} more differences")
    lines.append("")
    return lines


@dataclass
class StrategyReport(Result):
    """Strategy decision for a folder plus the matching prerequisite check."""
    folder_path: str
    strategy: IterationStrategyResult
    validation: Optional[PrerequisiteValidation] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def successful(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "folder_path": self.folder_path,
            "strategy": self.strategy.to_dict(),
            "validation": self.validation.to_dict() if self.validation else None,
            "timestamp": self.timestamp.isoformat(),
        }

    def render_summary(self) -> str:
        strategy = self.strategy
        lines = [
            "Strategy Analysis Summary",
            "=" * 40,
            f"Folder: {self.folder_path}",
            f"Strategy: {strategy.strategy_type.title}",
            f"Can Proceed: {status_indicator(strategy.can_proceed)}",
            f"Prerequisites Met: {status_indicator(strategy.prerequisites_met)}",
        ]
        if strategy.missing_requirements:
            lines.extend(["", "Missing Requirements:"])
            lines.extend(f"  - {req}" for req in strategy.missing_requirements)
        if strategy.recommendations:
            lines.extend(["", "Next Steps:"])
            lines.extend(
                f"  {i}. {rec}" for i, rec in enumerate(strategy.recommendations[:3], 1)
            )
        return "\n".join(lines)

    def render_detailed(self) -> str:
        strategy = self.strategy
        lines = [
            "=" * RULE_WIDTH,
            "Iteration Strategy Report".center(RULE_WIDTH),
            "=" * RULE_WIDTH,
            "",
            f"Folder: {self.folder_path}",
            "",
            "STRATEGY",
            "-" * 40,
            f"  Type: {strategy.strategy_type.title}",
            f"  Reason: {strategy.reason}",
            f"  Can Proceed: {status_indicator(strategy.can_proceed)}",
            f"  Prerequisites Met: {status_indicator(strategy.prerequisites_met)}",
            f"  Recommended Action: {strategy.recommended_action}",
            "",
        ]
        if strategy.missing_requirements:
            lines.extend(["MISSING REQUIREMENTS", "-" * 40])
            lines.extend(f"  - {req}" for req in strategy.missing_requirements)
            lines.append("")

        if self.validation is not None:
            lines.extend(["VALIDATION", "-" * 40, f"  Valid: {status_indicator(self.validation.valid)}"])
            lines.extend(f"  Error: {error}" for error in self.validation.errors)
            lines.extend(f"  Warning: {warning}" for warning in self.validation.warnings)
            lines.append("")

        lines.extend(["RECOMMENDATIONS", "-" * 40])
        lines.extend(f"  {i}. {rec}" for i, rec in enumerate(strategy.recommendations, 1))
        lines.extend(["", "=" * RULE_WIDTH])
        return "\n".join(lines)


@dataclass
class StatusReport(Result):
    """Development status of a folder and its generated counterpart."""
    analysis: DevelopmentAnalysis
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def successful(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        data = self.analysis.to_dict()
        data["timestamp"] = self.timestamp.isoformat()
        return data

    def render_summary(self) -> str:
        analysis = self.analysis
        lines = [
            f"{Path(analysis.path).name}: {analysis.development_status.title}",
            f"  {analysis.description}",
        ]
        if analysis.recommendations:
            lines.append(f"  Next: {analysis.recommendations[0]}")
        return "\n".join(lines)

    def render_detailed(self) -> str:
        analysis = self.analysis
        folder = analysis.folder_analysis
        lines = [
            "=" * RULE_WIDTH,
            "Template Status Report".center(RULE_WIDTH),
            "=" * RULE_WIDTH,
            "",
            f"Folder: {folder.path}",
            f"Analysis Time: {folder.analysis_timestamp.strftime('%Y-%m-%d %H:%M:%S')}",
            "",
            "FOLDER STATUS",
            "-" * 40,
            f"  Exists: {status_indicator(folder.exists)}",
            f"  Git Repository: {status_indicator(folder.is_version_controlled)}",
            f"  Template Configuration: {status_indicator(folder.has_template_configuration)}",
            f"  Generated Folder: {status_indicator(folder.generated_counterpart_exists)}",
        ]
        if folder.generated_counterpart_path:
            lines.append(f"  Generated Folder Path: {folder.generated_counterpart_path}")
        lines.append("")

        for title, configuration in (
            ("MAIN TEMPLATE", analysis.template_configuration),
            ("GENERATED TEMPLATE", analysis.generated_template_configuration),
        ):
            if configuration is None:
                continue
            lines.extend([
                title,
                "-" * 40,
                f"  Valid: {status_indicator(configuration.valid)}",
                f"  Lifecycle Phases: {len(configuration.lifecycle_phases)}",
                f"  Has Cleanup Phase: {status_indicator(configuration.has_cleanup_phase)}",
            ])
            lines.extend(f"    - {error}" for error in configuration.validation_errors)
            lines.append("")

        lines.extend([
            "DEVELOPMENT STATUS",
            "-" * 40,
            f"  Status: {analysis.development_status.title}",
            f"  Description: {analysis.description}",
            "",
            "RECOMMENDATIONS",
            "-" * 40,
        ])
        lines.extend(f"  {i}. {rec}" for i, rec in enumerate(analysis.recommendations, 1))
        lines.extend(["", "=" * RULE_WIDTH])
        return "\n".join(lines)
