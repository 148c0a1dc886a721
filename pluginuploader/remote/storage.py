import logging
from enum import Enum
from typing import Optional, Union

from .exception import RemoteStorageInvalidInputException
from .FileSystemStorage import FileSystemStorage
from .RemoteStorage import DEFAULT_TIMEOUT, RemoteStorage
from .RestStorage import RestStorage
from .S3Storage import S3Storage

logger = logging.getLogger(__name__)


class RepoType(str, Enum):
    REST_POST = "REST_POST"
    REST_PUT = "REST_PUT"
    S3 = "S3"
    FILE = "FILE"

    @classmethod
    def from_string(cls, value: Union[str, "RepoType"]) -> "RepoType":
        if isinstance(value, RepoType):
            return value
        try:
            return cls(value.strip().upper().replace("-", "_"))
        except ValueError:
            raise RemoteStorageInvalidInputException(
                f"Unknown repository type {value}, expected one of {', '.join(t.value for t in cls)}"
            )


def get_storage(
    repo_type: Union[str, RepoType],
    url: str,
    authentication: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> RemoteStorage:
    """
    Selects a remote storage type.

    Args:
    - repo_type (RepoType): The type of the repository.
    - url (str): The repository url.
    - authentication (str): Credentials for the repository, optional.
    - timeout (float): Timeout in seconds for a single request.

    Returns:
    - RemoteStorage: The remote storage object.
    """
    repo_type = RepoType.from_string(repo_type)
    logger.debug(f"Using {repo_type.value} repository at {url}")
    if repo_type == RepoType.REST_POST:
        return RestStorage(url, authentication, upload_method="POST", timeout=timeout)
    if repo_type == RepoType.REST_PUT:
        return RestStorage(url, authentication, upload_method="PUT", timeout=timeout)
    if repo_type == RepoType.S3:
        return S3Storage(url, authentication, timeout=timeout)
    return FileSystemStorage(url, authentication, timeout=timeout)
