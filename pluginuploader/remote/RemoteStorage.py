"""Base class for remote storage."""

import os
import tempfile
from abc import ABCMeta, abstractmethod
from pathlib import Path
from typing import Optional, Union

from .exception import RemoteStorageInvalidInputException

DEFAULT_TIMEOUT = 60


class RemoteObject:
    """Result of a get request: whether the object exists, and its content."""

    __slots__ = ("exists", "data")

    def __init__(self, exists: bool, data: Optional[bytes] = None):
        self.exists = exists
        self.data = data

    @classmethod
    def empty(cls) -> "RemoteObject":
        return cls(False, None)

    @classmethod
    def of(cls, data: bytes) -> "RemoteObject":
        return cls(True, data)

    def text(self, encoding: str = "utf-8") -> Optional[str]:
        if self.data is None:
            return None
        return self.data.decode(encoding)

    def __repr__(self) -> str:
        size = len(self.data) if self.data is not None else 0
        return f"RemoteObject(exists={self.exists}, size={size})"


class RemoteStorage(metaclass=ABCMeta):
    """
    A repository holding plugin files and the updatePlugins.xml catalog.

    Paths passed to the methods are relative to the repository url.

    Attributes:
    - base_url (str): The repository url.
    - authentication (str): Credentials, their format depends on the implementation.
    - timeout (float): Timeout in seconds for a single request.

    Methods:
    - get(path): Fetches an object, returning RemoteObject.empty() if it is missing.
    - upload(path, local_file, content_type): Uploads a local file.
    - delete(path): Deletes an object.
    """

    def __init__(
        self,
        base_url: str,
        authentication: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if not isinstance(base_url, str) or not base_url.strip():
            raise RemoteStorageInvalidInputException("base_url must be a non-empty string")
        self.base_url = base_url.strip()
        self.authentication = authentication
        self.timeout = timeout

    @staticmethod
    def normalize_path(path: str) -> str:
        """Strip leading slashes and reject empty paths."""
        normalized = str(path).replace("\\", "/").lstrip("/")
        if not normalized:
            raise RemoteStorageInvalidInputException("path must not be empty")
        return normalized

    @abstractmethod
    def get(self, path: str) -> RemoteObject:
        """
        Fetches an object from the repository.

        Args:
            path: Path relative to the repository url

        Returns:
            RemoteObject, empty if the object does not exist

        Raises:
            RemoteStorageException: If the request failed
        """
        raise NotImplementedError

    @abstractmethod
    def upload(self, path: str, local_file: Union[str, Path], content_type: str) -> None:
        """
        Uploads a local file, replacing any existing object.

        Args:
            path: Path relative to the repository url
            local_file: File to upload
            content_type: Media type of the file

        Raises:
            RemoteStorageException: If the upload failed
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, path: str) -> None:
        """
        Deletes an object from the repository.

        Raises:
            RemoteStorageException: If the request failed
        """
        raise NotImplementedError

    def upload_bytes(self, path: str, data: bytes, content_type: str) -> None:
        """Uploads in-memory content through a temporary file."""
        fd, tmp_name = tempfile.mkstemp(prefix="pluginuploader-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            self.upload(path, tmp_name, content_type)
        finally:
            Path(tmp_name).unlink(missing_ok=True)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.base_url!r})"
