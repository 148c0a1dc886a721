"""User configuration with defaults for publishing."""

import configparser
import logging
import os
import platform
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

APP_NAME = "plugin-uploader"

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")

PUBLISH_SECTION = "publish"

default_cfg = {
    PUBLISH_SECTION: {"retry_times": "5", "retry_delay": "1.0", "timeout": "60"}
}

if platform.system() == "Darwin":
    # macOS
    config_dir = Path(f"~/Library/Application Support/{APP_NAME}").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))


def get_config_file() -> Path:
    return Path(os.environ.get("PLUGIN_UPLOADER_CONFIG") or config_dir / f"{APP_NAME}.cfg")


class ConfigAccessor:
    """
    A dict-like accessor for configuration files.

    Missing sections or keys fall back to the given default.

    Usage:
        config = ConfigAccessor()
        value = config.get('publish', 'retry_times', default='5')
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else get_config_file()
        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            self.config.read(self.config_path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the specified section and key.

        Args:
            section: The configuration section
            key: The configuration key
            default: Value to return if the section or key doesn't exist

        Returns:
            The configuration value if it exists, otherwise the default value
        """
        try:
            return self.config[section][key]
        except KeyError:
            return default

    def get_int(self, section: str, key: str, default: int) -> int:
        value = self.get(section, key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning(
                f"Ignoring {section}.{key} = {value!r} in {self.config_path}: not an integer"
            )
            return default

    def get_float(self, section: str, key: str, default: float) -> float:
        value = self.get(section, key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning(
                f"Ignoring {section}.{key} = {value!r} in {self.config_path}: not a number"
            )
            return default


def get_publish_defaults(config: Optional[ConfigAccessor] = None) -> dict:
    """
    Retry and timeout settings used when a publish request leaves them unset.

    Returns:
        dict with retry_times, retry_delay and timeout
    """
    config = config or ConfigAccessor()
    defaults = default_cfg[PUBLISH_SECTION]
    return {
        "retry_times": config.get_int(
            PUBLISH_SECTION, "retry_times", int(defaults["retry_times"])
        ),
        "retry_delay": config.get_float(
            PUBLISH_SECTION, "retry_delay", float(defaults["retry_delay"])
        ),
        "timeout": config.get_float(PUBLISH_SECTION, "timeout", float(defaults["timeout"])),
    }
