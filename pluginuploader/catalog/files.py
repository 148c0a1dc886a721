"""Local updatePlugins.xml files."""

import logging
from pathlib import Path

from .entry import Catalog, CatalogEntry
from .reconcile import update_or_add
from .serialization import catalog_header, dump_catalog, parse_catalog

logger = logging.getLogger(__name__)


def read_catalog_file(path: Path) -> Catalog:
    """Read a catalog file, returning an empty catalog if it does not exist."""
    path = Path(path)
    if not path.exists():
        logger.info(f"{path.name} not found, creating new file")
        return Catalog()
    return parse_catalog(path.read_bytes(), source=str(path))


def write_catalog_file(path: Path, catalog: Catalog, plugin_id: str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_catalog(catalog, catalog_header(plugin_id)), encoding="utf-8")


def update_catalog_file(path: Path, plugin: CatalogEntry) -> Catalog:
    """
    Add or update ``plugin`` in a local catalog file.

    Args:
        path: Path of the updatePlugins.xml file, created if missing
        plugin: The entry to store

    Returns:
        The catalog as written
    """
    catalog = read_catalog_file(path)
    updated = catalog.with_plugins(update_or_add(plugin, catalog.plugins))
    write_catalog_file(path, updated, plugin.id)
    return updated
