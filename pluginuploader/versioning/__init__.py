"""
Versioning module for pluginuploader.

Build numbers (``241.14494.240``, ``IC-233.*``) describe which consumer
application builds a plugin release supports. All parsing, ordering and
stepping of build numbers lives here so that the catalog and the publisher
share one set of rules.
"""

from .build_number import (
    SNAPSHOT_VALUE,
    BuildNumber,
    compare_build_numbers,
    get_baseline_for_historic_build,
    parse_build_number,
)
from .exceptions import BuildNumberFormatError, VersioningError

__all__ = [
    "SNAPSHOT_VALUE",
    "BuildNumber",
    "compare_build_numbers",
    "get_baseline_for_historic_build",
    "parse_build_number",
    "BuildNumberFormatError",
    "VersioningError",
]
