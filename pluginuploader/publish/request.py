"""Everything needed to publish one plugin file."""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from pluginuploader.catalog import CatalogEntry
from pluginuploader.remote import RemoteStorageInvalidInputException, RepoType
from pluginuploader.versioning import BuildNumber

logger = logging.getLogger(__name__)

UPDATE_PLUGINS_FILENAME = "updatePlugins.xml"
LOCK_FILE_EXTENSION = ".lock"

# Same effect as allow_overwrite, for emergency re-releases from CI
SKIP_RELEASE_CHECK_ENV = "PLUGIN_UPLOADER_SKIP_RELEASE_CHECK"

DEFAULT_RETRY_TIMES = 5
DEFAULT_RETRY_DELAY = 1.0

_CONTENT_TYPES = {
    ".zip": "application/zip",
    ".jar": "application/java-archive",
    ".json": "application/json",
    ".xml": "application/xml",
    ".txt": "text/plain",
}


def content_type_for(path: Union[str, Path]) -> str:
    return _CONTENT_TYPES.get(Path(path).suffix.lower(), "application/octet-stream")


def skip_release_check() -> bool:
    return os.environ.get(SKIP_RELEASE_CHECK_ENV, "false").strip().lower() == "true"


class PublishRequest(BaseModel):
    """A plugin file to publish and the repository to publish it to."""

    url: str = Field(..., description="Repository url")
    plugin_name: str = Field(..., description="Plugin name, the folder holding its files")
    file: Path = Field(..., description="Plugin file to upload")
    plugin_id: str = Field(..., description="Plugin id")
    version: str = Field(..., description="Plugin version")
    update_file: str = Field(
        UPDATE_PLUGINS_FILENAME, description="Catalog path relative to the repository url"
    )
    repo_type: RepoType = Field(RepoType.REST_POST, description="Repository type")
    authentication: Optional[str] = Field(None, description="Repository credentials")
    description: Optional[str] = Field(None, description="Plugin description")
    change_notes: Optional[str] = Field(None, description="Change notes")
    since_build: Optional[str] = Field(None, description="First supported IDE build")
    until_build: Optional[str] = Field(None, description="Last supported IDE build")
    update_catalog: bool = Field(True, description="Add the plugin to the catalog")
    allow_overwrite: bool = Field(
        False, description="Allow replacing an already published version"
    )
    download_url_prefix: Optional[str] = Field(
        None, description="Prefix of the download urls written to the catalog"
    )
    absolute_download_urls: bool = Field(
        False, description="Deprecated, use download_url_prefix"
    )
    auxiliary_files: List[Path] = Field(
        default_factory=list, description="Extra files uploaded next to the plugin file"
    )
    retry_times: int = Field(DEFAULT_RETRY_TIMES, ge=1, description="Publish attempts")
    retry_delay: float = Field(
        DEFAULT_RETRY_DELAY, ge=0, description="Seconds between publish attempts"
    )
    timeout: float = Field(60.0, gt=0, description="Timeout of a single request")

    @field_validator("url", "plugin_name", "plugin_id", "version", "update_file")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("repo_type", mode="before")
    @classmethod
    def parse_repo_type(cls, v):
        if isinstance(v, str):
            try:
                return RepoType.from_string(v)
            except RemoteStorageInvalidInputException as e:
                raise ValueError(e.message) from e
        return v

    @field_validator("since_build", "until_build")
    @classmethod
    def validate_build(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        BuildNumber.parse(v)
        return v.strip()

    @model_validator(mode="after")
    def validate_build_range(self) -> "PublishRequest":
        since = BuildNumber.from_string(self.since_build)
        until = BuildNumber.from_string(self.until_build)
        if since is not None and until is not None and since.compare_to(until) > 0:
            raise ValueError(
                f"since_build {self.since_build} is greater than until_build {self.until_build}"
            )
        return self

    @classmethod
    def from_yaml(cls, path_or_content: Union[str, Path], **overrides) -> "PublishRequest":
        """Load a request from a YAML file or string content.

        Keys may be written with dashes or underscores. Relative file paths
        are resolved against the directory of the YAML file.
        """
        base_dir = None
        if isinstance(path_or_content, Path) or "\n" not in str(path_or_content):
            path = Path(path_or_content)
            with open(path, "r") as f:
                data = yaml.safe_load(f)
            base_dir = path.parent
        else:
            data = yaml.safe_load(str(path_or_content))

        data = {str(k).replace("-", "_"): v for k, v in (data or {}).items()}
        data.update({k: v for k, v in overrides.items() if v is not None})

        if base_dir is not None:
            if "file" in data and not Path(data["file"]).is_absolute():
                data["file"] = base_dir / data["file"]
            data["auxiliary_files"] = [
                f if Path(f).is_absolute() else base_dir / f
                for f in data.get("auxiliary_files") or []
            ]
        return cls(**data)

    @property
    def lock_file(self) -> str:
        return f"{self.update_file}{LOCK_FILE_EXTENSION}"

    @property
    def plugin_path(self) -> str:
        """Repository path of the plugin file."""
        return f"{self.plugin_name}/{self.file.name}"

    def auxiliary_path(self, path: Path) -> str:
        return f"{self.plugin_name}/{Path(path).name}"

    @property
    def download_prefix(self) -> str:
        if self.download_url_prefix:
            if self.absolute_download_urls:
                logger.warning(
                    "absolute_download_urls is ignored because download_url_prefix is set"
                )
            return self.download_url_prefix
        if self.absolute_download_urls:
            logger.warning(
                "DEPRECATED: absolute_download_urls has been replaced by download_url_prefix. "
                "It may be removed in future releases"
            )
            return self.url
        return "."

    @property
    def overwrite_allowed(self) -> bool:
        return self.allow_overwrite or skip_release_check()

    def catalog_entry(self) -> CatalogEntry:
        """The catalog entry describing the plugin file."""
        return CatalogEntry.create(
            plugin_id=self.plugin_id,
            version=self.version,
            plugin_name=self.plugin_name,
            file_name=self.file.name,
            since_build=self.since_build,
            until_build=self.until_build,
            description=self.description,
            change_notes=self.change_notes,
            download_url_prefix=self.download_prefix,
        )
