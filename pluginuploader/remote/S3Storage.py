"""S3 and S3-compatible repositories."""

import logging
from pathlib import Path
from typing import Any, Optional, Union
from urllib.parse import urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .exception import RemoteStorageInvalidInputException, S3StorageException
from .RemoteStorage import DEFAULT_TIMEOUT, RemoteObject, RemoteStorage
from .S3config import S3_access_config_from_auth, S3_access_config_from_env

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"

_NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")


def parse_s3_url(url: str) -> dict:
    """
    Split a repository url into bucket, region, endpoint and key prefix.

    Two forms are understood:

    - ``https://<bucket>.s3.<region>.amazonaws.com/<prefix>`` for AWS
    - ``http(s)://<bucket>@<host>[:<port>]/<prefix>`` for S3-compatible
      services such as MinIO, accessed with path-style requests

    Returns:
        dict with keys bucket, region, endpoint (None for AWS) and prefix
    """
    parsed = urlparse(url)
    host = parsed.hostname or ""
    host_parts = host.split(".")

    prefix = parsed.path.lstrip("/")
    if prefix and not prefix.endswith("/"):
        prefix += "/"

    if len(host_parts) == 5 and host_parts[1] == "s3" and host_parts[3] == "amazonaws":
        return {
            "bucket": host_parts[0],
            "region": host_parts[2],
            "endpoint": None,
            "prefix": prefix,
        }

    if not parsed.username:
        raise RemoteStorageInvalidInputException(
            f"Cannot determine the bucket of {url}: expected "
            "https://<bucket>.s3.<region>.amazonaws.com/<path> or http(s)://<bucket>@<host>/<path>"
        )
    endpoint = f"{parsed.scheme}://{host}"
    if parsed.port is not None:
        endpoint += f":{parsed.port}"
    return {
        "bucket": parsed.username,
        "region": DEFAULT_REGION,
        "endpoint": endpoint,
        "prefix": prefix,
    }


class S3Storage(RemoteStorage):
    """
    Repository stored in an S3 bucket.

    Credentials come from the authentication string
    (``access_key:secret_key[:session_token]``), otherwise from the
    environment (see S3config), otherwise from boto3's default chain.
    """

    def __init__(
        self,
        base_url: str,
        authentication: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: Any = None,
    ):
        super().__init__(base_url, authentication, timeout)
        location = parse_s3_url(self.base_url)
        self.bucket = location["bucket"]
        self.region = location["region"]
        self.endpoint = location["endpoint"]
        self.prefix = location["prefix"]
        self.client = client if client is not None else self._create_client()

    def _auth_options(self) -> dict:
        if self.authentication:
            return S3_access_config_from_auth(self.authentication)
        return S3_access_config_from_env(required=False)

    def _create_client(self):
        auth_options = self._auth_options()
        kwargs = {
            "region_name": self.region,
            "config": Config(
                connect_timeout=self.timeout,
                read_timeout=self.timeout,
                s3={"addressing_style": "path" if self.endpoint else "auto"},
            ),
        }
        if self.endpoint:
            kwargs["endpoint_url"] = self.endpoint
        if auth_options:
            kwargs["aws_access_key_id"] = auth_options["access_key"]
            kwargs["aws_secret_access_key"] = auth_options["secret_key"]
            if "session_token" in auth_options:
                kwargs["aws_session_token"] = auth_options["session_token"]
        else:
            logger.debug("No S3 credentials configured, using the default boto3 chain")
        return boto3.client("s3", **kwargs)

    def _key(self, path: str) -> str:
        return f"{self.prefix}{self.normalize_path(path)}"

    def get(self, path: str) -> RemoteObject:
        key = self._key(path)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return RemoteObject.of(response["Body"].read())
        except ClientError as e:
            error = e.response.get("Error", {})
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            if error.get("Code") in _NOT_FOUND_CODES or status == 404:
                logger.debug(f"s3://{self.bucket}/{key} not found")
                return RemoteObject.empty()
            logger.error(
                f"Failed to get object '{key}', response code from s3: {status} "
                f"message: {error.get('Message')}"
            )
            raise S3StorageException(f"Failed to get object {key} from s3") from e
        except BotoCoreError as e:
            raise S3StorageException(f"Failed to get object {key} from s3: {e}") from e

    def upload(self, path: str, local_file: Union[str, Path], content_type: str) -> None:
        key = self._key(path)
        logger.debug(f"Uploading {local_file} to s3://{self.bucket}/{key}")
        try:
            with open(local_file, "rb") as f:
                self.client.put_object(
                    Bucket=self.bucket, Key=key, Body=f, ContentType=content_type
                )
        except (ClientError, BotoCoreError) as e:
            raise S3StorageException(f"Failed to upload {key} to s3: {e}") from e

    def delete(self, path: str) -> None:
        key = self._key(path)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise S3StorageException(f"Failed to delete {key} from s3: {e}") from e
