"""Pydantic models for updatePlugins.xml entries."""

from typing import List, Optional, Tuple
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pluginuploader.versioning import BuildNumber

# Characters that may appear unescaped in a url fragment
_URL_FRAGMENT_SAFE = "/?:@!$&'()*+,;=-._~"


def build_download_url(prefix: Optional[str], plugin_name: str, file_name: str) -> str:
    """
    Build the download url stored in the catalog for a plugin file.

    Args:
        prefix: Repository url or relative prefix, defaults to "."
        plugin_name: Plugin name, used as the directory holding the file
        file_name: Name of the uploaded plugin file

    Returns:
        ``<prefix>/<plugin_name>/<file_name>`` with the path escaped
    """
    prefix = (prefix or ".").rstrip("/") or "."
    return quote(f"{prefix}/{plugin_name}/{file_name}", safe=_URL_FRAGMENT_SAFE)


class SupportRange(BaseModel):
    """Inclusive range of application builds a plugin version supports."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    since: Optional[BuildNumber] = Field(None, description="First supported build")
    until: Optional[BuildNumber] = Field(None, description="Last supported build")

    @field_validator("since", "until", mode="before")
    @classmethod
    def parse_build(cls, v):
        if isinstance(v, str):
            return BuildNumber.from_string(v)
        return v

    @model_validator(mode="after")
    def validate_bounds(self) -> "SupportRange":
        if self.since is not None and self.until is not None:
            if self.since.compare_to(self.until) > 0:
                raise ValueError(
                    f"since-build {self.since} is greater than until-build {self.until}"
                )
        return self

    def with_until(self, until: Optional[BuildNumber]) -> "SupportRange":
        # no re-validation: a clamped bound may have fewer components than since
        return self.model_copy(update={"until": until})

    def overlaps(self, other: "SupportRange") -> bool:
        """True if both ranges contain at least one common build."""
        # unset bounds are open-ended
        if (
            self.until is not None
            and other.since is not None
            and self.until.compare_to(other.since) < 0
        ):
            return False
        if (
            other.until is not None
            and self.since is not None
            and other.until.compare_to(self.since) < 0
        ):
            return False
        return True

    def __str__(self) -> str:
        since = self.since.as_string() if self.since else ""
        until = self.until.as_string() if self.until else ""
        return f"[{since}, {until}]"


class CatalogEntry(BaseModel):
    """One ``<plugin>`` element of the catalog."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str = Field(..., description="Plugin id, shared by all versions")
    version: str = Field(..., description="Plugin version")
    url: Optional[str] = Field(None, description="Download url")
    name: Optional[str] = Field(None, description="Plugin name")
    description: Optional[str] = Field(None, description="Plugin description")
    change_notes: Optional[str] = Field(None, description="Change notes")
    support_range: Optional[SupportRange] = Field(
        None, description="Supported application builds"
    )

    @field_validator("id", "version")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must be a non-empty string")
        return v

    @classmethod
    def create(
        cls,
        plugin_id: str,
        version: str,
        plugin_name: str,
        file_name: str,
        since_build: Optional[str] = None,
        until_build: Optional[str] = None,
        description: Optional[str] = None,
        change_notes: Optional[str] = None,
        download_url_prefix: Optional[str] = None,
    ) -> "CatalogEntry":
        """Create the entry for a plugin file about to be published."""
        support_range = None
        if since_build is not None or until_build is not None:
            support_range = SupportRange(
                since=BuildNumber.from_string(since_build),
                until=BuildNumber.from_string(until_build),
            )
        return cls(
            id=plugin_id,
            version=version,
            url=build_download_url(download_url_prefix, plugin_name, file_name),
            name=plugin_name,
            description=description,
            change_notes=change_notes,
            support_range=support_range,
        )

    @property
    def since(self) -> Optional[BuildNumber]:
        return self.support_range.since if self.support_range else None

    @property
    def until(self) -> Optional[BuildNumber]:
        return self.support_range.until if self.support_range else None

    def with_until(self, until: Optional[BuildNumber]) -> "CatalogEntry":
        """Return a copy whose support range ends at ``until``."""
        support_range = self.support_range or SupportRange()
        return self.model_copy(update={"support_range": support_range.with_until(until)})


class Catalog(BaseModel):
    """Ordered list of catalog entries, the content of updatePlugins.xml."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    plugins: Tuple[CatalogEntry, ...] = ()

    def find(self, plugin_id: str, version: str) -> Optional[CatalogEntry]:
        for plugin in self.plugins:
            if plugin.id == plugin_id and plugin.version == version:
                return plugin
        return None

    def siblings(self, plugin_id: str) -> List[CatalogEntry]:
        return [plugin for plugin in self.plugins if plugin.id == plugin_id]

    def with_plugins(self, plugins: List[CatalogEntry]) -> "Catalog":
        return Catalog(plugins=tuple(plugins))
