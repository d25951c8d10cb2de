"""Content-addressed comparison of two directory trees."""
import hashlib
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from git_template.core.errors import FolderAnalysisError
from git_template.core.logger import get_logger
from git_template.models.comparison_result import (
    ComparisonResult,
    Difference,
    DifferenceType,
)

logger = get_logger(__name__)

# Version-control metadata never takes part in a comparison
VCS_ENTRIES = frozenset({".git"})

UNREADABLE_PREFIX = "unreadable:"

_CHUNK_SIZE = 1024 * 1024


def file_digest(path: Path) -> str:
    """SHA-256 of a file's bytes, or an ``unreadable:`` marker.

    A single bad file must not abort a whole comparison, so read errors are
    folded into the digest instead of raised.
    """
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")
        return f"{UNREADABLE_PREFIX}{e.strerror or e}"
    return digest.hexdigest()


class ComparisonEngine:
    """Compares a source tree with a target tree by file digest.

    Works purely on relative paths; directories only matter through the files
    they contain, so an empty directory is invisible to the comparison.
    """

    def __init__(self, ignored: Iterable[str] = VCS_ENTRIES):
        """
        Args:
            ignored: Entry names skipped wherever they appear in the tree
        """
        self.ignored = frozenset(ignored)

    def compare(
        self,
        source_dir,
        target_dir,
        exclude: Optional[Iterable[str]] = None,
    ) -> ComparisonResult:
        """Compare two directory trees.

        Args:
            source_dir: Reference tree (e.g. the application folder)
            target_dir: Tree under test (e.g. the generated folder)
            exclude: Extra top-level entry names to leave out of the comparison

        Raises:
            FolderAnalysisError: If either path is not a directory
        """
        source = Path(source_dir).absolute()
        target = Path(target_dir).absolute()

        if not (source.is_dir() and target.is_dir()):
            raise FolderAnalysisError(
                f"{source} or {target}", "One or both paths are not directories"
            )

        top_level_excludes = frozenset(exclude or ())
        source_files = self.file_digests(source, top_level_excludes)
        target_files = self.file_digests(target, top_level_excludes)

        added = source_files.keys() - target_files.keys()
        deleted = target_files.keys() - source_files.keys()
        modified = {
            rel_path
            for rel_path in source_files.keys() & target_files.keys()
            if source_files[rel_path] != target_files[rel_path]
        }

        differences = self._build_differences(added, modified, deleted, source_files, target_files)

        result = ComparisonResult(
            source_path=str(source),
            target_path=str(target),
            added_files=frozenset(added),
            modified_files=frozenset(modified),
            deleted_files=frozenset(deleted),
            differences=tuple(differences),
        )
        logger.debug(
            f"Compared {source} -> {target}: +{len(added)} ~{len(modified)} -{len(deleted)}"
        )
        return result

    def file_digests(self, root: Path, top_level_excludes=frozenset()) -> Dict[str, str]:
        """Map every file under ``root`` (posix relative path) to its digest."""
        files: Dict[str, str] = {}

        def _on_walk_error(error: OSError):
            logger.warning(f"Skipping unreadable directory {error.filename}: {error.strerror}")

        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_walk_error):
            current = Path(dirpath)
            at_top = current == root

            # Prune in place so os.walk never descends into ignored directories
            dirnames[:] = [
                name for name in dirnames
                if name not in self.ignored and not (at_top and name in top_level_excludes)
            ]

            for name in filenames:
                if name in self.ignored or (at_top and name in top_level_excludes):
                    continue
                full_path = current / name
                rel_path = full_path.relative_to(root).as_posix()
                files[rel_path] = file_digest(full_path)

        return files

    @staticmethod
    def _build_differences(added, modified, deleted, source_files, target_files) -> List[Difference]:
        differences = [
            Difference(
                type=DifferenceType.ADDED,
                file=rel_path,
                description=f"File added in source: {rel_path}",
            )
            for rel_path in sorted(added)
        ]
        differences.extend(
            Difference(
                type=DifferenceType.DELETED,
                file=rel_path,
                description=f"File deleted from source: {rel_path}",
            )
            for rel_path in sorted(deleted)
        )
        differences.extend(
            Difference(
                type=DifferenceType.MODIFIED,
                file=rel_path,
                description=f"File modified: {rel_path}",
                source_hash=source_files[rel_path],
                target_hash=target_files[rel_path],
            )
            for rel_path in sorted(modified)
        )
        return differences

    @staticmethod
    def generate_diff_script(result: ComparisonResult) -> str:
        """Render a declarative fix-up list, one instruction per difference.

        Added and modified files are copied from the source tree; deleted files
        are removed.
        """
        lines = []

        for rel_path in sorted(result.added_files):
            source_file = os.path.join(result.source_path, rel_path)
            lines.append(f"# Add file: {rel_path}")
            lines.append(f"copy_file {_quote(source_file)}, {_quote(rel_path)}")

        for rel_path in sorted(result.modified_files):
            source_file = os.path.join(result.source_path, rel_path)
            lines.append(f"# Modify file: {rel_path}")
            lines.append(f"copy_file {_quote(source_file)}, {_quote(rel_path)}, force: true")

        for rel_path in sorted(result.deleted_files):
            lines.append(f"# Remove file: {rel_path}")
            lines.append(f"remove_file {_quote(rel_path)}")

        return "\n".join(lines)

    @classmethod
    def generate_cleanup_script(cls, result: ComparisonResult) -> str:
        """Diff script with the header used when appending to a cleanup phase."""
        header = [
            "# Cleanup phase - generated by template iteration",
            f"# Generated at: {datetime.now().isoformat(timespec='seconds')}",
            f"# Differences found: {result.total_differences}",
            "",
        ]
        return "\n".join(header) + cls.generate_diff_script(result)


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"
