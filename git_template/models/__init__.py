"""Data models for git-template."""
from git_template.models.comparison_result import ComparisonResult, Difference, DifferenceType
from git_template.models.folder_analysis import DevelopmentStatus, FolderAnalysis
from git_template.models.options import IterationOptions, OutputFormat
from git_template.models.template_configuration import TemplateConfiguration

__all__ = [
    'ComparisonResult',
    'Difference',
    'DifferenceType',
    'DevelopmentStatus',
    'FolderAnalysis',
    'IterationOptions',
    'OutputFormat',
    'TemplateConfiguration',
]
