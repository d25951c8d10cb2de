"""Per-folder locking for template iteration.

Two iterate runs against the same generated folder would wipe each other's
output, so the CLI holds an exclusive ``flock`` for the duration of a cycle.
"""
import fcntl
import hashlib
import os
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Optional

from git_template.core.logger import get_logger

logger = get_logger(__name__)

POLL_INTERVAL = 0.5


class LockError(Exception):
    """Raised when unable to acquire lock."""
    pass


def default_lock_path(target: Path) -> Path:
    """Lock file for a generated folder, kept outside the folder it protects."""
    digest = hashlib.sha1(str(Path(target).absolute()).encode("utf-8")).hexdigest()[:16]
    return Path(tempfile.gettempdir()) / "git-template" / f"iterate-{digest}.lock"


class IterationLock:
    """Exclusive lock on one generated folder.

    The lock file records the holder's PID, start time and target so a
    blocked run can say who it is waiting for.
    """

    def __init__(self, target: Path, lock_file: Optional[Path] = None, timeout: int = 0):
        """
        Args:
            target: Generated folder being protected
            lock_file: Explicit lock file (defaults to default_lock_path(target))
            timeout: Seconds to wait for a busy lock (0 = fail immediately)
        """
        self.target = Path(target)
        self.lock_file = Path(lock_file) if lock_file else default_lock_path(self.target)
        self.timeout = timeout
        self.lock_fd = None

    def acquire(self) -> bool:
        """Take the lock, waiting up to ``timeout`` seconds.

        Raises:
            LockError: If another process keeps holding the lock
        """
        self.lock_file.parent.mkdir(parents=True, exist_ok=True)
        # a+ leaves the current holder's details intact until we own the file
        self.lock_fd = open(self.lock_file, "a+")

        deadline = time.monotonic() + self.timeout
        while not self._try_lock():
            if time.monotonic() >= deadline:
                holder = self._read_holder()
                self._close_fd()
                raise LockError(self._busy_message(holder))
            time.sleep(POLL_INTERVAL)

        self._write_holder()
        logger.debug(f"Acquired lock: {self.lock_file}")
        return True

    def _try_lock(self) -> bool:
        try:
            fcntl.flock(self.lock_fd.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            return False
        return True

    def _write_holder(self):
        self.lock_fd.seek(0)
        self.lock_fd.truncate()
        self.lock_fd.write(f"{os.getpid()}\n{time.strftime('%Y-%m-%d %H:%M:%S')}\n{self.target}\n")
        self.lock_fd.flush()

    def _read_holder(self) -> Dict[str, str]:
        try:
            lines = self.lock_file.read_text().splitlines()
        except OSError:
            lines = []
        if len(lines) < 2:
            return {"pid": "unknown", "time": "unknown"}
        return {"pid": lines[0].strip(), "time": lines[1].strip()}

    def _busy_message(self, holder: Dict[str, str]) -> str:
        if self.timeout:
            return (
                f"Timeout waiting for lock after {self.timeout}s.\n"
                f"Lock held by PID {holder['pid']} since {holder['time']}"
            )
        return (
            f"Another iteration of {self.target} is in progress.\n"
            f"Lock held by PID {holder['pid']} since {holder['time']}\n"
            "Wait for it to complete and retry."
        )

    def release(self):
        """Release the lock.

        The lock file is left in place so every run locks the same inode.
        """
        if self.lock_fd is None:
            return

        try:
            fcntl.flock(self.lock_fd.fileno(), fcntl.LOCK_UN)
            logger.debug(f"Released lock: {self.lock_file}")
        except OSError as e:
            logger.warning(f"Error releasing lock: {e}")
        finally:
            self._close_fd()

    def _close_fd(self):
        if self.lock_fd is not None:
            self.lock_fd.close()
            self.lock_fd = None

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False


@contextmanager
def iteration_lock(target: Path, timeout: int = 0, lock_file: Optional[Path] = None):
    """Hold an IterationLock on ``target`` for the body of a ``with`` block.

    Usage:
        with iteration_lock(generated_folder):
            orchestrator.execute_repo_iteration(analysis, options)

    Raises:
        LockError: If unable to acquire lock
    """
    with IterationLock(target, lock_file=lock_file, timeout=timeout) as lock:
        yield lock
