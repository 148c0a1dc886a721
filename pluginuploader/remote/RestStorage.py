"""Repositories served over plain HTTP."""

import logging
from pathlib import Path
from typing import Optional, Union

import requests

from .exception import RemoteStorageException, RemoteStorageInvalidInputException
from .RemoteStorage import DEFAULT_TIMEOUT, RemoteObject, RemoteStorage

logger = logging.getLogger(__name__)

UPLOAD_METHODS = ("POST", "PUT")


class RestStorage(RemoteStorage):
    """
    Repository accepting uploads through POST or PUT requests.

    Objects are fetched with GET; a 404 response means the object does not
    exist. The authentication string, if any, is sent verbatim as the
    ``Authorization`` header of uploads and deletes.
    """

    def __init__(
        self,
        base_url: str,
        authentication: Optional[str] = None,
        upload_method: str = "POST",
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(base_url, authentication, timeout)
        upload_method = upload_method.upper()
        if upload_method not in UPLOAD_METHODS:
            raise RemoteStorageInvalidInputException(
                f"Unsupported upload method {upload_method}, expected one of {', '.join(UPLOAD_METHODS)}"
            )
        self.upload_method = upload_method
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{self.normalize_path(path)}"

    def _headers(self, content_type: Optional[str] = None) -> dict:
        headers = {}
        if content_type:
            headers["Content-Type"] = content_type
        if self.authentication:
            headers["Authorization"] = self.authentication
        return headers

    def get(self, path: str) -> RemoteObject:
        url = self._url(path)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise RemoteStorageException(f"Failed to get {url}: {e}") from e

        if response.status_code == 404:
            logger.debug(f"{url} not found")
            return RemoteObject.empty()
        if not response.ok:
            raise RemoteStorageException(
                f"Received status code {response.status_code} while retrieving {url}"
            )
        return RemoteObject.of(response.content)

    def upload(self, path: str, local_file: Union[str, Path], content_type: str) -> None:
        url = self._url(path)
        logger.debug(f"{self.upload_method} {local_file} to {url}")
        try:
            with open(local_file, "rb") as f:
                response = self.session.request(
                    self.upload_method,
                    url,
                    data=f,
                    headers=self._headers(content_type),
                    timeout=self.timeout,
                )
        except requests.RequestException as e:
            raise RemoteStorageException(f"Failed to upload {url}: {e}") from e

        if not response.ok:
            raise RemoteStorageException(
                f"Failed to upload {url} with status: {response.status_code}"
            )

    def delete(self, path: str) -> None:
        url = self._url(path)
        try:
            response = self.session.delete(
                url, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as e:
            raise RemoteStorageException(f"Failed to delete {url}: {e}") from e

        if not response.ok:
            raise RemoteStorageException(
                f"Failed to delete {url} with status: {response.status_code}"
            )
