"""Result of comparing two folder trees."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


class DifferenceType(Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True)
class Difference:
    """A single file-level difference."""
    type: DifferenceType
    file: str
    description: str
    source_hash: Optional[str] = None
    target_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": self.type.value,
            "file": self.file,
            "description": self.description,
        }
        if self.type == DifferenceType.MODIFIED:
            data["source_hash"] = self.source_hash
            data["target_hash"] = self.target_hash
        return data


@dataclass(frozen=True)
class ComparisonResult:
    """Added/modified/deleted sets between a source and a target tree.

    "Added" files exist only under the source, "deleted" files only under the
    target, "modified" files under both with different content.
    """
    source_path: str
    target_path: str
    added_files: FrozenSet[str] = frozenset()
    modified_files: FrozenSet[str] = frozenset()
    deleted_files: FrozenSet[str] = frozenset()
    differences: Tuple[Difference, ...] = ()
    comparison_timestamp: datetime = field(default_factory=datetime.now, compare=False)

    @property
    def total_differences(self) -> int:
        return len(self.added_files) + len(self.modified_files) + len(self.deleted_files)

    @property
    def has_differences(self) -> bool:
        return self.total_differences > 0

    def summary(self) -> Dict[str, Any]:
        return {
            "source_path": self.source_path,
            "target_path": self.target_path,
            "added_files": len(self.added_files),
            "modified_files": len(self.modified_files),
            "deleted_files": len(self.deleted_files),
            "total_differences": self.total_differences,
            "has_differences": self.has_differences,
            "comparison_timestamp": self.comparison_timestamp.isoformat(),
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.summary()
        data["added_files"] = sorted(self.added_files)
        data["modified_files"] = sorted(self.modified_files)
        data["deleted_files"] = sorted(self.deleted_files)
        data["differences"] = [d.to_dict() for d in self.differences]
        return data
