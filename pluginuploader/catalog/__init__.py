from .entry import Catalog, CatalogEntry, SupportRange, build_download_url
from .exceptions import CatalogError, CatalogFormatError
from .files import read_catalog_file, update_catalog_file, write_catalog_file
from .reconcile import (
    MIN_MULTI_VERSION_BUILD,
    find_overlaps,
    update_or_add,
    uses_multiple_versions,
)
from .serialization import catalog_header, dump_catalog, parse_catalog

__all__ = [
    "Catalog",
    "CatalogEntry",
    "SupportRange",
    "build_download_url",
    "CatalogError",
    "CatalogFormatError",
    "read_catalog_file",
    "update_catalog_file",
    "write_catalog_file",
    "MIN_MULTI_VERSION_BUILD",
    "find_overlaps",
    "update_or_add",
    "uses_multiple_versions",
    "catalog_header",
    "dump_catalog",
    "parse_catalog",
]
