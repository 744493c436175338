"""Release tag model and version resolution.

This package parses release tags into totally ordered versions and turns a
repository classification into the published version fields.
"""

from .errors import VersionError, MalformedTag, ReleaseTagError, RepositoryError, OptionsError
from .tag import VersionTag, TagFormat, parse_tag, STANDARD_PRERELEASE_NAMES
from .models import PreviousRelease, RepositoryClassification, ResolvedVersion
from .resolver import VersionResolver, resolve_version

__all__ = [
    "VersionError",
    "MalformedTag",
    "ReleaseTagError",
    "RepositoryError",
    "OptionsError",
    "VersionTag",
    "TagFormat",
    "parse_tag",
    "STANDARD_PRERELEASE_NAMES",
    "PreviousRelease",
    "RepositoryClassification",
    "ResolvedVersion",
    "VersionResolver",
    "resolve_version",
]
