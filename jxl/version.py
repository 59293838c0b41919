"""
Semantic version parsing and ordering.

Versions are ``major.minor.patch`` with an optional ``-prerelease`` and
``+build`` suffix; a leading ``v`` is tolerated. Ordering follows SemVer 2.0
precedence: pre-releases sort before their release, pre-release identifiers
compare numerically when both are numeric and by ASCII otherwise, and build
metadata is ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering

from .errors import ParseError


_IDENT = r"(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)"

SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    rf"(?:-(?P<prerelease>{_IDENT}(?:\.{_IDENT})*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$",
    re.ASCII,
)


def _prerelease_key(prerelease: str) -> tuple:
    # Numeric identifiers sort below alphanumeric ones; a shorter list of
    # otherwise equal identifiers sorts first.
    return tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part)
        for part in prerelease.split(".")
    )


@total_ordering
@dataclass(frozen=True, eq=False)
class SemanticVersion:
    """
    A parsed, totally ordered semantic version.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
        prerelease: Pre-release identifier without the leading dash
        build: Build metadata without the leading plus (ignored for ordering)
    """
    major: int
    minor: int
    patch: int
    prerelease: str = ""
    build: str = ""
    _key: tuple = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.prerelease:
            key = (self.major, self.minor, self.patch, 0, _prerelease_key(self.prerelease))
        else:
            key = (self.major, self.minor, self.patch, 1, ())
        object.__setattr__(self, "_key", key)

    @classmethod
    def parse(cls, text: str) -> SemanticVersion:
        """
        Parse a version string.

        Args:
            text: Version text, e.g. "1.2.3", "v1.2.3-rc.1"

        Returns:
            SemanticVersion instance

        Raises:
            ParseError: If text is not a semantic version
        """
        match = SEMVER_RE.match((text or "").strip())
        if not match:
            raise ParseError(f"invalid semantic version: {text!r}")
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            prerelease=match.group("prerelease") or "",
            build=match.group("build") or "",
        )

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text = f"{text}-{self.prerelease}"
        return text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._key == other._key

    def __lt__(self, other: SemanticVersion) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._key < other._key

    def __hash__(self) -> int:
        return hash(self._key)


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two version strings.

    Args:
        v1: First version
        v2: Second version

    Returns:
        -1 if v1 < v2, 0 if v1 == v2, 1 if v1 > v2

    Raises:
        ParseError: If either version cannot be parsed
    """
    ver1 = SemanticVersion.parse(v1)
    ver2 = SemanticVersion.parse(v2)
    if ver1 < ver2:
        return -1
    elif ver1 > ver2:
        return 1
    return 0


def get_version() -> str:
    """Return the version of the running jxl build."""
    from . import __version__
    return __version__


def get_semver_version() -> SemanticVersion:
    """
    Parse the running jxl version.

    Raises:
        ParseError: If the embedded version string is malformed
    """
    text = get_version()
    try:
        return SemanticVersion.parse(text)
    except ParseError as e:
        raise ParseError(f"getting current jxl version: {e.message}") from e
