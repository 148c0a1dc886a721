"""
Exception classes for the catalog module.
"""


class CatalogError(Exception):
    """Base exception for catalog errors."""

    pass


class CatalogFormatError(CatalogError):
    """Raised when a catalog document cannot be read."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Malformed catalog {source}: {message}")
