"""Read and write updatePlugins.xml documents."""

import datetime
import xml.etree.ElementTree as ET
from typing import Optional, Union

from pydantic import ValidationError

from pluginuploader import __version__
from pluginuploader.versioning import BuildNumber

from .entry import Catalog, CatalogEntry, SupportRange
from .exceptions import CatalogFormatError

ROOT_ELEMENT = "plugins"
PLUGIN_ELEMENT = "plugin"
VERSION_ELEMENT = "idea-version"
SINCE_ATTRIBUTE = "since-build"
UNTIL_ATTRIBUTE = "until-build"

INDENT = "    "


def catalog_header(
    plugin_id: str, now: Optional[datetime.datetime] = None, version: str = __version__
) -> str:
    """Comment prepended to every uploaded catalog."""
    if now is None:
        now = datetime.datetime.now(datetime.timezone.utc)
    timestamp = now.astimezone(datetime.timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    return (
        f"<!-- File updated on {timestamp} updating '{plugin_id}' "
        f"using plugin uploader version {version} -->"
    )


def _child_text(element: ET.Element, tag: str) -> Optional[str]:
    child = element.find(tag)
    if child is None:
        return None
    return child.text or ""


def _parse_plugin(element: ET.Element) -> CatalogEntry:
    support_range = None
    version_element = element.find(VERSION_ELEMENT)
    if version_element is not None:
        # stored ranges are not re-checked: a clamped until may sort below a longer since
        support_range = SupportRange.model_construct(
            since=BuildNumber.from_string(version_element.get(SINCE_ATTRIBUTE)),
            until=BuildNumber.from_string(version_element.get(UNTIL_ATTRIBUTE)),
        )
    return CatalogEntry(
        id=element.get("id", ""),
        version=element.get("version", ""),
        url=element.get("url"),
        name=_child_text(element, "name"),
        description=_child_text(element, "description"),
        change_notes=_child_text(element, "change-notes"),
        support_range=support_range,
    )


def parse_catalog(data: Union[bytes, str], source: str = "<catalog>") -> Catalog:
    """
    Parse an updatePlugins.xml document.

    Args:
        data: Document content
        source: Name used in error messages

    Returns:
        Catalog with the plugin entries in document order

    Raises:
        CatalogFormatError: If the document is not a valid catalog
        BuildNumberFormatError: If a since/until build cannot be parsed
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not data.strip():
        return Catalog()
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise CatalogFormatError(source, str(e)) from e
    if root.tag != ROOT_ELEMENT:
        raise CatalogFormatError(
            source, f"expected root element <{ROOT_ELEMENT}>, found <{root.tag}>"
        )

    plugins = []
    for element in root.findall(PLUGIN_ELEMENT):
        try:
            plugins.append(_parse_plugin(element))
        except ValidationError as e:
            raise CatalogFormatError(source, str(e)) from e
    return Catalog(plugins=tuple(plugins))


def _plugin_element(plugin: CatalogEntry) -> ET.Element:
    element = ET.Element(PLUGIN_ELEMENT)
    element.set("id", plugin.id)
    if plugin.url is not None:
        element.set("url", plugin.url)
    element.set("version", plugin.version)
    if plugin.description is not None:
        ET.SubElement(element, "description").text = plugin.description
    if plugin.change_notes is not None:
        ET.SubElement(element, "change-notes").text = plugin.change_notes
    if plugin.name is not None:
        ET.SubElement(element, "name").text = plugin.name
    if plugin.support_range is not None:
        version_element = ET.SubElement(element, VERSION_ELEMENT)
        if plugin.since is not None:
            version_element.set(SINCE_ATTRIBUTE, plugin.since.as_string())
        if plugin.until is not None:
            version_element.set(UNTIL_ATTRIBUTE, plugin.until.as_string())
    return element


def dump_catalog(catalog: Catalog, header: Optional[str] = None) -> str:
    """
    Serialize a catalog, optionally preceded by a header comment line.

    The document is written without an XML declaration so that the header
    comment can stay on the first line.
    """
    root = ET.Element(ROOT_ELEMENT)
    for plugin in catalog.plugins:
        root.append(_plugin_element(plugin))
    ET.indent(root, space=INDENT)
    document = ET.tostring(root, encoding="unicode")
    if header:
        return f"{header}\n{document}\n"
    return f"{document}\n"
