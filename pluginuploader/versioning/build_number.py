"""
Build number utilities.

A build number identifies a consumer application build, for example
``IC-241.14494.240`` or ``241.*``. Build numbers are ordered, can be stepped
one build forwards or backwards, and understand the flat build numbers used
before the dotted format was introduced.
"""

import re
from typing import Optional, Tuple

from .exceptions import BuildNumberFormatError

STAR = "*"

# Wildcard component. Sorts above every finite component.
SNAPSHOT_VALUE = 2**31 - 1

# Flat build numbers up to this value are read as a baseline version.
MAX_BASELINE_VERSION = 2000

# ASCII digits only
_COMPONENT = re.compile(r"[0-9]+")

# (lowest build number, baseline) pairs, highest first
_HISTORIC_BASELINES = (
    (10000, 88),  # Maia, 9x builds
    (9500, 85),  # 8.1 builds
    (9100, 81),  # 8.0.x builds
    (8000, 80),  # 8.0, including pre-release builds
    (7500, 75),  # 7.0.2+
    (7200, 72),  # 7.0 final
    (6900, 69),  # 7.0 pre-M2
    (6500, 65),  # 7.0 pre-M1
    (6000, 60),  # 6.0.2+
    (5000, 55),  # 6.0 branch, including all 6.0 EAP builds
    (4000, 50),  # 5.1 branch
)
_DEFAULT_HISTORIC_BASELINE = 40


def get_baseline_for_historic_build(build_number: int) -> int:
    """Return the baseline version a pre-dotted build number belongs to."""
    for lowest, baseline in _HISTORIC_BASELINES:
        if build_number >= lowest:
            return baseline
    return _DEFAULT_HISTORIC_BASELINE


def _parse_component(version: str, text: str) -> int:
    if text == STAR:
        return SNAPSHOT_VALUE
    if not _COMPONENT.fullmatch(text):
        raise BuildNumberFormatError(version, f"'{text}' is not a number")
    value = int(text)
    if value >= SNAPSHOT_VALUE:
        raise BuildNumberFormatError(version, f"component {text} is too large")
    return value


class BuildNumber:
    """
    An immutable, comparable build number.

    A build number is an optional product code plus a non-empty sequence of
    components. Any component may be the wildcard ``*``, which compares
    greater than every number at the same position; parsing drops whatever
    follows a wildcard.
    """

    __slots__ = ("_product_code", "_components")

    def __init__(self, product_code: str, *components: int):
        if not components:
            raise ValueError("A build number needs at least one component")
        for component in components:
            if component < 0 or component > SNAPSHOT_VALUE:
                raise ValueError(f"Component out of range: {component}")
        self._product_code = product_code or ""
        self._components: Tuple[int, ...] = tuple(components)

    @classmethod
    def parse(cls, version: str) -> "BuildNumber":
        """
        Parse a build number of the form ``[CODE-]n(.n)*``.

        Args:
            version: Build number string, ``*`` allowed as a component

        Returns:
            BuildNumber

        Raises:
            BuildNumberFormatError: If the string is not a valid build number
        """
        if version is None:
            raise BuildNumberFormatError("None", "no build number given")
        original = str(version)
        code = original.strip()
        if not code:
            raise BuildNumberFormatError(original, "empty build number")

        product_code = ""
        product_separator = code.find("-")
        if product_separator > 0:
            product_code = code[:product_separator]
            code = code[product_separator + 1 :]

        if code.find(".") > 0:
            components = []
            for text in code.split("."):
                component = _parse_component(original, text)
                components.append(component)
                if component == SNAPSHOT_VALUE:
                    break
            return cls(product_code, *components)

        build_number = _parse_component(original, code)
        if build_number <= MAX_BASELINE_VERSION:
            # a baseline, not a build number
            return cls(product_code, build_number, 0)
        return cls(
            product_code, get_baseline_for_historic_build(build_number), build_number
        )

    @classmethod
    def from_string(cls, version: Optional[str]) -> Optional["BuildNumber"]:
        """Parse ``version``, returning None for None or blank input."""
        if version is None or not str(version).strip():
            return None
        return cls.parse(version)

    @property
    def product_code(self) -> str:
        return self._product_code

    @property
    def components(self) -> Tuple[int, ...]:
        return self._components

    @property
    def baseline_version(self) -> int:
        return self._components[0]

    @property
    def is_snapshot(self) -> bool:
        """True if any component is the wildcard."""
        return SNAPSHOT_VALUE in self._components

    def as_string(self) -> str:
        components = ".".join(
            STAR if c == SNAPSHOT_VALUE else str(c) for c in self._components
        )
        if self._product_code:
            return f"{self._product_code}-{components}"
        return components

    def compare_to(self, other: "BuildNumber") -> int:
        """
        Compare two build numbers, ignoring product codes.

        Returns:
            -1, 0 or 1
        """
        c1 = self._components
        c2 = other._components
        for a, b in zip(c1, c2):
            if a == b == SNAPSHOT_VALUE:
                return 0
            if a == SNAPSHOT_VALUE:
                return 1
            if b == SNAPSHOT_VALUE:
                return -1
            if a != b:
                return -1 if a < b else 1
        if len(c1) == len(c2):
            return 0
        return -1 if len(c1) < len(c2) else 1

    def minus_one(self) -> "BuildNumber":
        """Return the build immediately before this one."""
        components = list(self._components)
        for i in range(len(components) - 1, -1, -1):
            if components[i] > 0:
                components[i] -= 1
                break
            components[i] = SNAPSHOT_VALUE - 1
        return BuildNumber(self._product_code, *components)

    def plus_one(self) -> "BuildNumber":
        """Return the build immediately after this one."""
        components = list(self._components)
        for i in range(len(components) - 1, -1, -1):
            if components[i] < SNAPSHOT_VALUE - 1:
                components[i] += 1
                break
            components[i] = 0
        return BuildNumber(self._product_code, *components)

    predecessor = minus_one
    successor = plus_one

    def __str__(self) -> str:
        return self.as_string()

    def __repr__(self) -> str:
        return f"BuildNumber('{self.as_string()}')"

    def __eq__(self, other) -> bool:
        if not isinstance(other, BuildNumber):
            return False
        return (self._product_code, self._components) == (
            other._product_code,
            other._components,
        )

    def __hash__(self) -> int:
        return hash((self._product_code, self._components))

    def __lt__(self, other) -> bool:
        if not isinstance(other, BuildNumber):
            return NotImplemented
        return self.compare_to(other) < 0

    def __le__(self, other) -> bool:
        if not isinstance(other, BuildNumber):
            return NotImplemented
        return self.compare_to(other) <= 0

    def __gt__(self, other) -> bool:
        if not isinstance(other, BuildNumber):
            return NotImplemented
        return self.compare_to(other) > 0

    def __ge__(self, other) -> bool:
        if not isinstance(other, BuildNumber):
            return NotImplemented
        return self.compare_to(other) >= 0


def parse_build_number(version: str) -> BuildNumber:
    """
    Parse a build number string.

    Raises:
        BuildNumberFormatError: If the string is invalid
    """
    return BuildNumber.parse(version)


def compare_build_numbers(version1: str, version2: str) -> int:
    """
    Compare two build number strings.

    Returns:
        -1 if version1 < version2
         0 if version1 == version2
         1 if version1 > version2
    """
    return BuildNumber.parse(version1).compare_to(BuildNumber.parse(version2))

