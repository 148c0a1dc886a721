import json
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from .exception import RemoteStorageInvalidInputException

logger = logging.getLogger(__name__)

ACCESS_KEY_ENV = "PLUGIN_UPLOADER_S3_ACCESS_KEY"
SECRET_KEY_ENV = "PLUGIN_UPLOADER_S3_SECRET_KEY"
SESSION_TOKEN_ENV = "PLUGIN_UPLOADER_S3_SESSION_TOKEN"
CONFIG_FILE_ENV = "PLUGIN_UPLOADER_S3_CONFIG"


# Load .env file from the current working directory or one of its parents
# This allows users to store S3 credentials in a .env file
current_path = Path.cwd()
for parent in [current_path] + list(current_path.parents):
    dotenv_path = parent / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path, override=False)
        break


def S3_access_config_from_auth(authentication: str) -> dict:
    """Parse an ``access_key:secret_key[:session_token]`` string.

    Raises:
        RemoteStorageInvalidInputException: If the string does not have 2 or 3 parts
    """
    parts = authentication.split(":")
    if len(parts) not in (2, 3) or not all(parts):
        raise RemoteStorageInvalidInputException(
            "S3 authentication has an invalid number of parts, expected colon separated "
            "values for access key, secret key and session token (if applicable)"
        )
    auth_options = {"access_key": parts[0], "secret_key": parts[1]}
    if len(parts) == 3:
        auth_options["session_token"] = parts[2]
    return auth_options


def S3_access_config_from_env(required: bool = False) -> dict:
    """Get S3 access config from environment variables or file

    Args:
        required: If True, raise an error when credentials are missing.
                 If False, return empty dict when credentials are missing.

    Returns:
        dict: Dictionary with access_key, secret_key and optionally session_token
    """
    if ACCESS_KEY_ENV in os.environ and SECRET_KEY_ENV in os.environ:
        auth_options = {
            "access_key": os.environ[ACCESS_KEY_ENV],
            "secret_key": os.environ[SECRET_KEY_ENV],
        }
        if SESSION_TOKEN_ENV in os.environ:
            auth_options["session_token"] = os.environ[SESSION_TOKEN_ENV]
        return auth_options
    elif CONFIG_FILE_ENV in os.environ:
        with open(os.environ[CONFIG_FILE_ENV], "r") as file:
            auth_options = json.load(file)
        if "access_key" in auth_options and "secret_key" in auth_options:
            return auth_options
        if required:
            raise RemoteStorageInvalidInputException(
                f"Missing access_key or secret_key in config file: {os.environ[CONFIG_FILE_ENV]}"
            )
        logger.warning(
            f"Ignoring {os.environ[CONFIG_FILE_ENV]}: missing access_key or secret_key"
        )
        return {}
    else:
        if required:
            raise RemoteStorageInvalidInputException(
                f"Missing S3 credentials. Set {ACCESS_KEY_ENV} and {SECRET_KEY_ENV}, or {CONFIG_FILE_ENV}"
            )
        return {}
