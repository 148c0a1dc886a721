"""
Exception classes for the publish module.

Errors are either retryable (the publish attempt may succeed if repeated,
for example while another publisher holds the lock) or fatal (repeating the
attempt cannot help, or could damage the repository).
"""


class PublishError(Exception):
    """Base exception for all publish errors."""

    pass


class RetryableCoordinationError(PublishError):
    """Raised when an attempt failed but may succeed if repeated."""

    pass


class LockExistsError(RetryableCoordinationError):
    """Raised when the lock object already exists."""

    def __init__(self, lock_path: str):
        self.lock_path = lock_path
        super().__init__(
            f"Lock {lock_path} exists on host. Can not proceed until the lock is cleared. "
            "This could be another process currently running."
        )


class LockClaimedError(RetryableCoordinationError):
    """Raised when another publisher overwrote the lock while it was being claimed."""

    def __init__(self, lock_path: str):
        self.lock_path = lock_path
        super().__init__(
            f"Another process claimed the lock {lock_path} while we were trying to claim it. "
            "Please try again later."
        )


class FatalPublishError(PublishError):
    """Raised when publishing must stop immediately."""

    pass


class InvalidPublishRequestError(FatalPublishError):
    """Raised when the publish request is incomplete or inconsistent."""

    pass


class VersionAlreadyPublishedError(FatalPublishError):
    """Raised when the plugin version is already in the catalog and overwriting is not allowed."""

    def __init__(self, plugin_id: str, version: str):
        self.plugin_id = plugin_id
        self.version = version
        super().__init__(
            f"Plugin '{plugin_id}' with version {version} already published to repository. "
            "Because `allow_overwrite` is set to false (default), this publishing attempt will be aborted."
        )


class LockChangedError(FatalPublishError):
    """Raised when the lock content changed while it was held."""

    def __init__(self, lock_path: str):
        self.lock_path = lock_path
        super().__init__(
            f"The lock value of {lock_path} changed during execution. "
            "The catalog may be inconsistent and the release may be invalid."
        )


class LockCleanupError(FatalPublishError):
    """Raised when a held lock could not be deleted."""

    def __init__(self, lock_path: str):
        self.lock_path = lock_path
        super().__init__(
            f"Failed to clean up {lock_path}. The lock must be cleaned up manually."
        )


class PublishFailedError(PublishError):
    """Raised when every publish attempt failed with a retryable error."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Failed to publish plugin after {attempts} attempt(s)")
