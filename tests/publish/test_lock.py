"""Tests for the repository lock."""

import threading

import pytest

from pluginuploader.publish import (
    LockChangedError,
    LockClaimedError,
    LockCleanupError,
    LockExistsError,
    RemoteLock,
)
from pluginuploader.publish.lock import LOCK_CONTENT_TYPE
from pluginuploader.remote import RemoteStorageException

from ..fakes import InMemoryStorage, fail_n_times

LOCK_PATH = "updatePlugins.xml.lock"


def tokens(*values):
    it = iter(values)
    return lambda: next(it)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def lock(storage, sleeps):
    return RemoteLock(
        storage,
        LOCK_PATH,
        lock_id_factory=tokens("token-a", "token-b"),
        retry_times=3,
        retry_delay=0.5,
        sleep=sleeps.append,
    )


@pytest.mark.short
class TestAcquire:
    def test_acquire_writes_token(self, lock, storage):
        token = lock.acquire()

        assert token == "token-a"
        assert storage.text(LOCK_PATH) == "token-a"
        assert storage.content_types[LOCK_PATH] == LOCK_CONTENT_TYPE
        assert lock.read() == "token-a"

    def test_read_without_lock(self, lock):
        assert lock.read() is None

    def test_existing_lock(self, lock, storage):
        storage.objects[LOCK_PATH] = b"someone-else"

        with pytest.raises(LockExistsError) as exc_info:
            lock.acquire()

        assert exc_info.value.lock_path == LOCK_PATH
        assert storage.count("upload", LOCK_PATH) == 0
        assert storage.text(LOCK_PATH) == "someone-else"

    def test_overwritten_between_write_and_reread(self, lock, storage):
        def overwrite(operation, path):
            if operation == "upload" and path == LOCK_PATH:
                storage.objects[LOCK_PATH] = b"intruder"

        storage.after = overwrite

        with pytest.raises(LockClaimedError):
            lock.acquire()

    def test_failed_write_is_reported_by_reread(self, lock, storage, capture_logs):
        storage.before = fail_n_times("upload", LOCK_PATH, 1)

        with pytest.raises(LockClaimedError):
            lock.acquire()

        assert "Failed to upload lock" in capture_logs.getvalue()

    def test_default_tokens_are_unique(self, storage):
        first = RemoteLock(storage, "a.lock").acquire()
        second = RemoteLock(storage, "b.lock").acquire()
        assert first != second

    def test_concurrent_publishers(self):
        """Both publishers see no lock and both write; only the last writer wins."""
        storage = InMemoryStorage()
        written = threading.Barrier(2, timeout=5)
        reread = threading.Barrier(2, timeout=5)

        def before(operation, path):
            if operation == "upload" and path == LOCK_PATH:
                written.wait()

        def after(operation, path):
            if operation == "upload" and path == LOCK_PATH:
                reread.wait()

        storage.before = before
        storage.after = after

        results = {}

        def publish(name):
            try:
                results[name] = RemoteLock(
                    storage, LOCK_PATH, lock_id_factory=lambda: name
                ).acquire()
            except LockClaimedError as e:
                results[name] = e

        threads = [threading.Thread(target=publish, args=(n,)) for n in ("a", "b")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        winners = [name for name, r in results.items() if r == name]
        losers = [name for name, r in results.items() if isinstance(r, LockClaimedError)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert storage.text(LOCK_PATH) == winners[0]


@pytest.mark.short
class TestRelease:
    def test_release_deletes_lock(self, lock, storage, sleeps):
        token = lock.acquire()
        lock.release(token)

        assert LOCK_PATH not in storage.objects
        assert sleeps == []

    def test_changed_lock(self, lock, storage):
        token = lock.acquire()
        storage.objects[LOCK_PATH] = b"someone-else"

        with pytest.raises(LockChangedError):
            lock.release(token)

        assert storage.count("delete", LOCK_PATH) == 0

    def test_missing_lock_counts_as_changed(self, lock, storage):
        token = lock.acquire()
        del storage.objects[LOCK_PATH]

        with pytest.raises(LockChangedError):
            lock.release(token)

    def test_transient_delete_failure(self, lock, storage, sleeps):
        token = lock.acquire()
        storage.before = fail_n_times("delete", LOCK_PATH, 2)

        lock.release(token)

        assert LOCK_PATH not in storage.objects
        assert storage.count("delete", LOCK_PATH) == 3
        assert sleeps == [0.5, 0.5]

    def test_cleanup_failure(self, lock, storage, sleeps):
        token = lock.acquire()
        storage.before = fail_n_times("delete", LOCK_PATH, 100)

        with pytest.raises(LockCleanupError) as exc_info:
            lock.release(token)

        assert "cleaned up manually" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RemoteStorageException)
        assert storage.count("delete", LOCK_PATH) == 3
        assert sleeps == [0.5, 0.5]
        assert storage.text(LOCK_PATH) == token
