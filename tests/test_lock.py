"""Tests for the per-folder iteration lock."""
import os
import time

import pytest

from git_template.core.lock import IterationLock, LockError, default_lock_path, iteration_lock


class TestIterationLock:
    """Test file-based locking mechanism."""

    def test_acquire_and_release(self, tmp_path):
        """Can acquire and release lock."""
        lock_file = tmp_path / "test.lock"
        lock = IterationLock(tmp_path / "generated", lock_file=lock_file)

        assert lock.acquire() is True
        assert lock_file.exists()

        lock.release()
        assert lock_file.exists()
        second = IterationLock(tmp_path / "generated", lock_file=lock_file)
        assert second.acquire() is True
        second.release()

    def test_concurrent_lock_fails(self, tmp_path):
        """Second lock attempt fails when first is held."""
        lock_file = tmp_path / "test.lock"
        target = tmp_path / "generated"

        lock1 = IterationLock(target, lock_file=lock_file, timeout=0)
        lock1.acquire()

        lock2 = IterationLock(target, lock_file=lock_file, timeout=0)
        with pytest.raises(LockError) as exc_info:
            lock2.acquire()

        assert f"Another iteration of {target} is in progress" in str(exc_info.value)
        assert f"PID {os.getpid()}" in str(exc_info.value)

        lock1.release()

    def test_context_manager(self, tmp_path):
        """Lock works as context manager."""
        lock_file = tmp_path / "test.lock"

        with IterationLock(tmp_path, lock_file=lock_file):
            assert lock_file.exists()

        assert lock_file.exists()
        with IterationLock(tmp_path, lock_file=lock_file) as again:
            assert again.lock_fd is not None

    def test_lock_timeout(self, tmp_path):
        """Lock times out after specified period."""
        lock_file = tmp_path / "test.lock"

        lock1 = IterationLock(tmp_path, lock_file=lock_file)
        lock1.acquire()

        lock2 = IterationLock(tmp_path, lock_file=lock_file, timeout=1)
        start = time.time()

        with pytest.raises(LockError) as exc_info:
            lock2.acquire()

        elapsed = time.time() - start
        assert elapsed >= 1.0
        assert elapsed < 3.0
        assert "Timeout waiting for lock" in str(exc_info.value)

        lock1.release()

    def test_lock_info_written(self, tmp_path):
        """Lock file contains PID, timestamp and target."""
        lock_file = tmp_path / "test.lock"
        target = tmp_path / "generated"

        with IterationLock(target, lock_file=lock_file):
            lines = lock_file.read_text().splitlines()

        assert lines[0] == str(os.getpid())
        assert lines[2] == str(target)

    def test_release_without_acquire(self, tmp_path):
        IterationLock(tmp_path, lock_file=tmp_path / "never.lock").release()


def test_default_lock_path_is_stable_per_target(tmp_path):
    first = default_lock_path(tmp_path / "a")

    assert first == default_lock_path(tmp_path / "a")
    assert first != default_lock_path(tmp_path / "b")
    assert first.name.startswith("iterate-")


def test_iteration_lock_context(tmp_path):
    lock_file = tmp_path / "ctx.lock"

    with iteration_lock(tmp_path, lock_file=lock_file) as lock:
        assert lock.lock_file == lock_file
        with pytest.raises(LockError):
            IterationLock(tmp_path, lock_file=lock_file).acquire()

    with iteration_lock(tmp_path, lock_file=lock_file):
        assert lock_file.exists()


def test_lock_file_survives_release_and_stays_exclusive(tmp_path):
    lock_file = tmp_path / "shared.lock"
    holder = IterationLock(tmp_path, lock_file=lock_file)
    holder.acquire()

    waiter = IterationLock(tmp_path, lock_file=lock_file, timeout=0)
    with pytest.raises(LockError):
        waiter.acquire()
    holder.release()

    with IterationLock(tmp_path, lock_file=lock_file):
        with pytest.raises(LockError):
            IterationLock(tmp_path, lock_file=lock_file).acquire()
