"""Repositories in a local (or mounted) directory."""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlparse

from filelock import FileLock

from .exception import RemoteStorageException, RemoteStorageInvalidInputException
from .RemoteStorage import DEFAULT_TIMEOUT, RemoteObject, RemoteStorage

logger = logging.getLogger(__name__)

LOCK_FILE = ".storage.lock"


def path_from_url(url: str) -> Path:
    """Accept ``file://`` urls as well as plain paths."""
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(url).expanduser()


class FileSystemStorage(RemoteStorage):
    """
    Repository stored in a directory.

    Writes go to a temporary file that replaces the target, so readers never
    see a partially written object. Writers in different processes are
    serialized with a file lock in the repository directory.
    """

    def __init__(
        self,
        base_url: str,
        authentication: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(base_url, authentication, timeout)
        self.base_dir = path_from_url(self.base_url)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.lock = FileLock(self.base_dir / LOCK_FILE, timeout=timeout)

    def _path(self, path: str) -> Path:
        target = (self.base_dir / self.normalize_path(path)).resolve()
        if not target.is_relative_to(self.base_dir.resolve()):
            raise RemoteStorageInvalidInputException(f"{path} is outside of {self.base_dir}")
        return target

    def get(self, path: str) -> RemoteObject:
        target = self._path(path)
        try:
            return RemoteObject.of(target.read_bytes())
        except FileNotFoundError:
            return RemoteObject.empty()
        except OSError as e:
            raise RemoteStorageException(f"Failed to read {target}: {e}") from e

    def upload(self, path: str, local_file: Union[str, Path], content_type: str) -> None:
        target = self._path(path)
        logger.debug(f"Copying {local_file} to {target}")
        try:
            with self.lock:
                target.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
                try:
                    with os.fdopen(fd, "wb") as dst, open(local_file, "rb") as src:
                        shutil.copyfileobj(src, dst)
                    os.replace(tmp_name, target)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
        except OSError as e:
            raise RemoteStorageException(f"Failed to write {target}: {e}") from e

    def delete(self, path: str) -> None:
        target = self._path(path)
        try:
            with self.lock:
                target.unlink()
        except FileNotFoundError:
            logger.debug(f"{target} already deleted")
        except OSError as e:
            raise RemoteStorageException(f"Failed to delete {target}: {e}") from e
