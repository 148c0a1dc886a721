"""
Publish a plugin file and record it in the repository catalog.

Publishing with a catalog update runs under the repository lock:

1. acquire the lock
2. fetch the catalog and refuse to replace a published version
3. upload the plugin file and its auxiliary files
4. add the plugin to the catalog and upload it
5. release the lock

The whole sequence is retried a fixed number of times, with a fixed delay,
when it fails with a retryable error.
"""

import logging
import time
import uuid
from enum import Enum
from typing import Callable, Optional, TypeVar

from pluginuploader.catalog import (
    Catalog,
    CatalogFormatError,
    catalog_header,
    dump_catalog,
    parse_catalog,
    update_or_add,
)
from pluginuploader.remote import (
    RemoteStorage,
    RemoteStorageException,
    RemoteStorageInvalidInputException,
    get_storage,
)
from pluginuploader.versioning import BuildNumberFormatError

from .exceptions import (
    FatalPublishError,
    InvalidPublishRequestError,
    LockChangedError,
    LockCleanupError,
    PublishFailedError,
    RetryableCoordinationError,
    VersionAlreadyPublishedError,
)
from .lock import RemoteLock
from .request import PublishRequest, content_type_for

logger = logging.getLogger(__name__)

PLUGIN_CONTENT_TYPE = "application/zip"
CATALOG_CONTENT_TYPE = "application/xml"

T = TypeVar("T")


class PublishState(Enum):
    IDLE = "idle"
    LOCK_HELD = "lock held"
    CATALOG_FETCHED = "catalog fetched"
    ARTIFACT_UPLOADED = "artifact uploaded"
    CATALOG_UPLOADED = "catalog uploaded"
    LOCK_RELEASED = "lock released"
    FAILED = "failed"


class PluginUploader:
    """
    Publishes one plugin file described by a PublishRequest.

    Args:
        request: What to publish and where
        storage: Repository to publish to, created from the request if omitted
        lock_id_factory: Creates the lock token of each attempt
        sleep: Called with the retry delay between attempts
    """

    def __init__(
        self,
        request: PublishRequest,
        storage: Optional[RemoteStorage] = None,
        lock_id_factory: Callable[[], object] = uuid.uuid4,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.request = request
        self.storage = storage or get_storage(
            request.repo_type, request.url, request.authentication, request.timeout
        )
        self.sleep = sleep
        self.lock = RemoteLock(
            self.storage,
            request.lock_file,
            lock_id_factory=lock_id_factory,
            retry_times=request.retry_times,
            retry_delay=request.retry_delay,
            sleep=sleep,
        )
        self.state = PublishState.IDLE

    def _set_state(self, state: PublishState) -> None:
        logger.debug(f"{self.request.plugin_id} {self.request.version}: {state.value}")
        self.state = state

    def _validate(self) -> None:
        if not self.request.file.is_file():
            raise InvalidPublishRequestError(f"Plugin file {self.request.file} does not exist")
        for path in self.request.auxiliary_files:
            if not path.is_file():
                raise InvalidPublishRequestError(f"Auxiliary file {path} does not exist")

    def fetch_catalog(self) -> Catalog:
        """The repository catalog, empty if it does not exist yet."""
        update_file = self.request.update_file
        catalog = self.storage.get(update_file)
        if not catalog.exists:
            logger.info(f"No {update_file} found. Creating new file.")
            return Catalog()
        return parse_catalog(catalog.data, source=update_file)

    def fetch_catalog_check_overwrite(self) -> Catalog:
        """
        Fetch the catalog, refusing to replace an already published version.

        Raises:
            VersionAlreadyPublishedError: If the plugin version is in the catalog
                and overwriting is not allowed
        """
        catalog = self.fetch_catalog()
        if catalog.find(self.request.plugin_id, self.request.version) is not None:
            if not self.request.overwrite_allowed:
                raise VersionAlreadyPublishedError(
                    self.request.plugin_id, self.request.version
                )
            logger.info(
                f"Replacing published version {self.request.version} of '{self.request.plugin_id}'"
            )
        return catalog

    def upload_plugin(self) -> None:
        """Upload the plugin file and the auxiliary files."""
        request = self.request
        logger.info(f"Uploading {request.file.name} to {request.url}/{request.plugin_path}")
        self.storage.upload(request.plugin_path, request.file, PLUGIN_CONTENT_TYPE)
        for path in request.auxiliary_files:
            logger.debug(f"Uploading {path.name}")
            self.storage.upload(request.auxiliary_path(path), path, content_type_for(path))
        self._set_state(PublishState.ARTIFACT_UPLOADED)

    def upload_catalog(self, catalog: Catalog) -> None:
        document = dump_catalog(catalog, catalog_header(self.request.plugin_id))
        self.storage.upload_bytes(
            self.request.update_file, document.encode("utf-8"), CATALOG_CONTENT_TYPE
        )
        self._set_state(PublishState.CATALOG_UPLOADED)

    def _release(self, token: str, published: bool) -> None:
        try:
            self.lock.release(token)
        except LockChangedError:
            raise
        except (LockCleanupError, RemoteStorageException) as e:
            if not published:
                if isinstance(e, LockCleanupError):
                    raise
                raise LockCleanupError(self.lock.path) from e
            logger.warning(f"Plugin published, but the lock was not released: {e}")
            return
        self._set_state(PublishState.LOCK_RELEASED)

    def publish_and_update_catalog(self) -> Catalog:
        """One locked attempt at publishing the plugin and updating the catalog."""
        token = self.lock.acquire()
        self._set_state(PublishState.LOCK_HELD)
        try:
            catalog = self.fetch_catalog_check_overwrite()
            self._set_state(PublishState.CATALOG_FETCHED)

            self.upload_plugin()

            entry = self.request.catalog_entry()
            catalog = catalog.with_plugins(update_or_add(entry, catalog.plugins))
            self.upload_catalog(catalog)
        except Exception as error:
            try:
                self._release(token, published=False)
            except FatalPublishError as cleanup_error:
                raise cleanup_error from error
            raise
        self._release(token, published=True)
        return catalog

    def _with_retries(self, action: Callable[[], T]) -> T:
        retry_times = self.request.retry_times
        first_error = None
        for attempt in range(1, retry_times + 1):
            try:
                return action()
            except FatalPublishError:
                raise
            except (BuildNumberFormatError, CatalogFormatError) as e:
                raise FatalPublishError(
                    f"Invalid catalog {self.request.update_file}: {e}"
                ) from e
            except RemoteStorageInvalidInputException as e:
                raise InvalidPublishRequestError(e.message) from e
            except (RetryableCoordinationError, RemoteStorageException) as e:
                if first_error is None:
                    first_error = e
                logger.warning(f"Attempt {attempt}/{retry_times} failed: {e}")
                if attempt < retry_times:
                    self.sleep(self.request.retry_delay)
        raise PublishFailedError(retry_times) from first_error

    def execute(self) -> Optional[Catalog]:
        """
        Publish the plugin.

        Returns:
            The uploaded catalog, or None if the catalog is not updated

        Raises:
            FatalPublishError: If publishing was aborted
            PublishFailedError: If every attempt failed, caused by the first failure
        """
        request = self.request
        logger.info(
            f"Publishing '{request.plugin_id}' version {request.version} to {request.url}"
        )
        try:
            self._validate()
            self._with_retries(self.fetch_catalog_check_overwrite)

            if not request.update_catalog:
                self._with_retries(self.upload_plugin)
                logger.info(f"Published {request.file.name}, catalog not updated")
                return None

            catalog = self._with_retries(self.publish_and_update_catalog)
        except Exception:
            self._set_state(PublishState.FAILED)
            raise

        logger.info(
            f"Published '{request.plugin_id}' version {request.version} and updated {request.update_file}"
        )
        return catalog
