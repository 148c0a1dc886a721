"""
Exception classes for the versioning module.
"""


class VersioningError(Exception):
    """Base exception for all versioning-related errors."""

    pass


class BuildNumberFormatError(VersioningError, ValueError):
    """Raised when a build number string has an invalid format."""

    def __init__(self, version_string: str, reason: str = ""):
        self.version_string = version_string
        self.reason = reason
        message = f"Invalid build number: '{version_string}'"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
