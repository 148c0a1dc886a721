from .coordinator import PluginUploader, PublishState
from .exceptions import (
    FatalPublishError,
    InvalidPublishRequestError,
    LockChangedError,
    LockClaimedError,
    LockCleanupError,
    LockExistsError,
    PublishError,
    PublishFailedError,
    RetryableCoordinationError,
    VersionAlreadyPublishedError,
)
from .lock import RemoteLock
from .request import PublishRequest

__all__ = [
    "PluginUploader",
    "PublishState",
    "FatalPublishError",
    "InvalidPublishRequestError",
    "LockChangedError",
    "LockClaimedError",
    "LockCleanupError",
    "LockExistsError",
    "PublishError",
    "PublishFailedError",
    "RetryableCoordinationError",
    "VersionAlreadyPublishedError",
    "RemoteLock",
    "PublishRequest",
]
