"""
Advisory lock object stored next to the catalog.

The lock is optimistic: a publisher checks that no lock exists, writes its
own token and reads the lock back. Two publishers can both see no lock and
both write; the reread then tells all but the last writer that they lost.
A publisher that writes after the other's reread is not detected, so the
lock narrows the race window without closing it.
"""

import logging
import time
import uuid
from typing import Callable, Optional

from pluginuploader.remote import RemoteStorage, RemoteStorageException

from .exceptions import (
    LockChangedError,
    LockClaimedError,
    LockCleanupError,
    LockExistsError,
)

logger = logging.getLogger(__name__)

LOCK_CONTENT_TYPE = "text/plain"


class RemoteLock:
    """
    Lock object at ``path`` in a remote storage.

    Args:
        storage: The repository holding the lock
        path: Lock path relative to the repository url
        lock_id_factory: Creates the token identifying this publisher
        retry_times: Attempts to delete the lock on release
        retry_delay: Seconds between delete attempts
        sleep: Called with retry_delay between delete attempts
    """

    def __init__(
        self,
        storage: RemoteStorage,
        path: str,
        lock_id_factory: Callable[[], object] = uuid.uuid4,
        retry_times: int = 5,
        retry_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.storage = storage
        self.path = path
        self.lock_id_factory = lock_id_factory
        self.retry_times = max(1, retry_times)
        self.retry_delay = retry_delay
        self.sleep = sleep

    def read(self) -> Optional[str]:
        """Current token, or None if nobody holds the lock."""
        lock = self.storage.get(self.path)
        if not lock.exists:
            return None
        return lock.text()

    def _write(self, token: str) -> None:
        try:
            self.storage.upload_bytes(self.path, token.encode("utf-8"), LOCK_CONTENT_TYPE)
        except RemoteStorageException as e:
            # the reread in acquire() reports the failure
            logger.error(f"Failed to upload lock {self.path}: {e}")

    def acquire(self) -> str:
        """
        Claim the lock.

        Returns:
            The token written to the lock, needed to release it

        Raises:
            LockExistsError: If another publisher holds the lock
            LockClaimedError: If another publisher claimed the lock concurrently
        """
        if self.read() is not None:
            raise LockExistsError(self.path)
        token = str(self.lock_id_factory())
        self._write(token)
        if self.read() != token:
            raise LockClaimedError(self.path)
        logger.debug(f"Acquired lock {self.path} ({token})")
        return token

    def release(self, token: str) -> None:
        """
        Delete the lock if it still holds ``token``.

        Raises:
            LockChangedError: If the lock no longer holds ``token``
            LockCleanupError: If the lock could not be deleted
        """
        if self.read() != token:
            raise LockChangedError(self.path)

        for attempt in range(1, self.retry_times + 1):
            try:
                self.storage.delete(self.path)
                logger.debug(f"Released lock {self.path} ({token})")
                return
            except RemoteStorageException as e:
                logger.warning(
                    f"Failed to delete lock {self.path} (attempt {attempt}/{self.retry_times}): {e}"
                )
                if attempt == self.retry_times:
                    raise LockCleanupError(self.path) from e
                self.sleep(self.retry_delay)
