"""Release tag model: parsing, total ordering and canonical renderings.

A release tag reads ``MAJOR.MINOR.PATCH[-NAME[.NUMBER[.FIX]]]`` with an
optional leading ``v``. Pre-release names are ranked by their position in
``STANDARD_PRERELEASE_NAMES``; a final release (no name) ranks above every
pre-release of the same major.minor.patch.

The ordered value packs the six ordering fields into disjoint digit ranges of
a single integer. Both the name list and the multipliers below are part of
the published contract: changing them reorders every version already released.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import MalformedTag

STANDARD_PRERELEASE_NAMES: Tuple[str, ...] = (
    "alpha",
    "beta",
    "delta",
    "epsilon",
    "gamma",
    "kappa",
    "prerelease",
    "rc",
)
# Slot used for non standard names without an explicit mapping.
DEFAULT_MAPPED_NAME = "prerelease"

MAX_MAJOR = 99999
MAX_MINOR = 99999
MAX_PATCH = 9999
MAX_PRERELEASE_NUMBER = 99
MAX_PRERELEASE_FIX = 99

MUL_NUM = MAX_PRERELEASE_FIX + 1
MUL_NAME = MUL_NUM * (MAX_PRERELEASE_NUMBER + 1)
MUL_PATCH = MUL_NAME * len(STANDARD_PRERELEASE_NAMES) + 1
MUL_MINOR = MUL_PATCH * (MAX_PATCH + 2)
MUL_MAJOR = MUL_MINOR * (MAX_MINOR + 1)
MAX_ORDERED_VALUE = MAX_MAJOR * MUL_MAJOR + MAX_MINOR * MUL_MINOR + (MAX_PATCH + 1) * MUL_PATCH

_TAG_RE = re.compile(
    r"^v?(?P<major>[0-9]+)\.(?P<minor>[0-9]+)\.(?P<patch>[0-9]+)"
    r"(?:-(?P<name>[^.]*)(?:\.(?P<number>[0-9]+))?(?:\.(?P<fix>[0-9]+))?)?$",
    re.IGNORECASE,
)
_NAME_RE = re.compile(r"^[a-z]+$", re.IGNORECASE)
_VERSION_LIKE_RE = re.compile(r"^v?[0-9]+\.[0-9]+", re.IGNORECASE)


class TagFormat(Enum):
    """Renderings supported by :meth:`VersionTag.render`."""

    SEMVER = "semver"
    SEMVER_WITH_MARKER = "semver-marker"
    PACKAGE = "package"
    DOTTED_ORDERED_VERSION = "dotted"


@functools.total_ordering
@dataclass(frozen=True)
class VersionTag:
    """Immutable release version.

    Equality, hashing and ordering only consider the six version fields;
    the original text and the name flags are informational.
    """

    major: int
    minor: int
    patch: int
    prerelease_name: str = ""
    prerelease_number: int = 0
    prerelease_fix: int = 0
    original_tag_text: Optional[str] = field(default=None, compare=False)
    is_name_standard: bool = field(default=True, compare=False)
    prerelease_name_from_tag: str = field(default="", compare=False)

    def __post_init__(self):
        if not 0 <= self.major <= MAX_MAJOR:
            raise ValueError(f"major must be between 0 and {MAX_MAJOR}")
        if not 0 <= self.minor <= MAX_MINOR:
            raise ValueError(f"minor must be between 0 and {MAX_MINOR}")
        if not 0 <= self.patch <= MAX_PATCH:
            raise ValueError(f"patch must be between 0 and {MAX_PATCH}")
        if self.prerelease_name:
            if self.prerelease_name not in STANDARD_PRERELEASE_NAMES:
                raise ValueError(f"unknown pre-release name '{self.prerelease_name}'")
            if not 0 <= self.prerelease_number <= MAX_PRERELEASE_NUMBER:
                raise ValueError("pre-release number must be between 0 and 99")
            if not 0 <= self.prerelease_fix <= MAX_PRERELEASE_FIX:
                raise ValueError("pre-release fix must be between 0 and 99")
        elif self.prerelease_number or self.prerelease_fix:
            raise ValueError("pre-release number and fix require a pre-release name")

    def __lt__(self, other):
        if not isinstance(other, VersionTag):
            return NotImplemented
        return self.ordered_value < other.ordered_value

    def __str__(self) -> str:
        return self.render(TagFormat.SEMVER)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease_name)

    @property
    def is_prerelease_fix(self) -> bool:
        return self.prerelease_fix > 0

    @property
    def prerelease_rank(self) -> int:
        """Index of the pre-release name, or the name count for a final release."""
        if not self.prerelease_name:
            return len(STANDARD_PRERELEASE_NAMES)
        return STANDARD_PRERELEASE_NAMES.index(self.prerelease_name)

    @property
    def ordered_value(self) -> int:
        """Positive integer whose natural order is the release precedence."""
        value = self.major * MUL_MAJOR + self.minor * MUL_MINOR
        if not self.is_prerelease:
            return value + (self.patch + 1) * MUL_PATCH
        return (
            value
            + self.patch * MUL_PATCH
            + 1
            + self.prerelease_rank * MUL_NAME
            + self.prerelease_number * MUL_NUM
            + self.prerelease_fix
        )

    @classmethod
    def from_ordered_value(cls, value: int) -> "VersionTag":
        """Rebuild the (synthesized) tag whose ordered value is ``value``."""
        if not 0 < value <= MAX_ORDERED_VALUE:
            raise ValueError(f"ordered value out of range: {value}")
        major, rest = divmod(value, MUL_MAJOR)
        minor, rest = divmod(rest, MUL_MINOR)
        patch, rest = divmod(rest, MUL_PATCH)
        if rest == 0:
            if patch == 0:
                raise ValueError(f"not an ordered value: {value}")
            return cls(major, minor, patch - 1)
        rank, rest = divmod(rest - 1, MUL_NAME)
        number, fix = divmod(rest, MUL_NUM)
        return cls(major, minor, patch, STANDARD_PRERELEASE_NAMES[rank], number, fix)

    def render(self, fmt: TagFormat = TagFormat.SEMVER) -> str:
        """Render this version; never looks at the original tag text."""
        if fmt is TagFormat.DOTTED_ORDERED_VERSION:
            return dotted_ordered_version(self.ordered_value)
        core = f"{self.major}.{self.minor}.{self.patch}"
        if not self.is_prerelease:
            return core
        if fmt is TagFormat.PACKAGE:
            text = f"{core}-{self.prerelease_name}"
            if self.prerelease_number or self.prerelease_fix:
                text += f"-{self.prerelease_number:02d}"
            if self.is_prerelease_fix:
                text += f"-{self.prerelease_fix:02d}"
            return text
        text = f"{core}-{self.prerelease_name}"
        if self.prerelease_number or self.prerelease_fix:
            text += f".{self.prerelease_number}"
        if self.is_prerelease_fix:
            text += f".{self.prerelease_fix}"
        if fmt is TagFormat.SEMVER_WITH_MARKER and not self.is_name_standard:
            text += "+mapped"
        return text

    def direct_successors(self) -> List["VersionTag"]:
        """Versions that may be released right after this one, sorted."""
        result: List[VersionTag] = []
        if self.is_prerelease:
            if self.prerelease_number < MAX_PRERELEASE_NUMBER:
                result.append(self._synthesized(self.prerelease_name, self.prerelease_number + 1, 0))
            if self.prerelease_fix < MAX_PRERELEASE_FIX:
                result.append(self._synthesized(self.prerelease_name, self.prerelease_number, self.prerelease_fix + 1))
            for name in STANDARD_PRERELEASE_NAMES[self.prerelease_rank + 1:]:
                result.append(VersionTag(self.major, self.minor, self.patch, name))
            result.append(VersionTag(self.major, self.minor, self.patch))
        else:
            if self.patch < MAX_PATCH:
                result.extend(_release_and_prereleases(self.major, self.minor, self.patch + 1))
            if self.minor < MAX_MINOR:
                result.extend(_release_and_prereleases(self.major, self.minor + 1, 0))
            if self.major < MAX_MAJOR:
                result.extend(_release_and_prereleases(self.major + 1, 0, 0))
        return sorted(result)

    def _synthesized(self, name: str, number: int, fix: int) -> "VersionTag":
        return replace(
            self,
            prerelease_name=name,
            prerelease_number=number,
            prerelease_fix=fix,
            original_tag_text=None,
            is_name_standard=True,
            prerelease_name_from_tag="",
        )


def _release_and_prereleases(major: int, minor: int, patch: int) -> List[VersionTag]:
    versions = [VersionTag(major, minor, patch, name) for name in STANDARD_PRERELEASE_NAMES]
    versions.append(VersionTag(major, minor, patch))
    return versions


def first_possible_versions() -> List[VersionTag]:
    """Versions allowed on a repository that has no release yet."""
    versions = [VersionTag(0, 0, 0, name) for name in STANDARD_PRERELEASE_NAMES]
    versions.extend(_release_and_prereleases(0, 1, 0))
    versions.extend(_release_and_prereleases(1, 0, 0))
    return sorted(versions)


def dotted_ordered_version(value: int) -> str:
    """Split an ordered value into four 16 bits parts: ``a.b.c.d``."""
    return ".".join(str((value >> shift) & 0xFFFF) for shift in (48, 32, 16, 0))


def is_version_like(text: str) -> bool:
    """True when a tag was obviously meant to be a version."""
    return bool(_VERSION_LIKE_RE.match(text or ""))


def canonical_prerelease_name(name: str, name_mapping: Optional[Dict[str, str]] = None) -> Tuple[str, bool]:
    """Return ``(canonical name, is_standard)`` for a pre-release name."""
    lowered = name.lower()
    if lowered in STANDARD_PRERELEASE_NAMES:
        return lowered, True
    if name_mapping:
        for source, target in name_mapping.items():
            if source.lower() == lowered and target.lower() in STANDARD_PRERELEASE_NAMES:
                return target.lower(), False
    return DEFAULT_MAPPED_NAME, False


def _parse_int(tag_text: str, digits: str, label: str, minimum: int, maximum: int) -> int:
    if len(digits) > 1 and digits.startswith("0"):
        raise MalformedTag(tag_text, f"{label} '{digits}' has a leading zero")
    value = int(digits)
    if not minimum <= value <= maximum:
        raise MalformedTag(tag_text, f"{label} must be between {minimum} and {maximum}")
    return value


def parse_tag(text: str, name_mapping: Optional[Dict[str, str]] = None) -> VersionTag:
    """Parse a tag text into a :class:`VersionTag`.

    Args:
        text: Raw tag text, e.g. ``v1.2.0-beta.3``.
        name_mapping: Optional overrides for non standard pre-release names.

    Returns:
        The parsed tag, with ``is_name_standard`` False when the name was mapped.

    Raises:
        MalformedTag: If the text is not a valid release tag.
    """
    match = _TAG_RE.fullmatch(text or "")
    if not match:
        raise MalformedTag(text, "expected MAJOR.MINOR.PATCH[-NAME[.NUMBER[.FIX]]]")

    major = _parse_int(text, match.group("major"), "major", 0, MAX_MAJOR)
    minor = _parse_int(text, match.group("minor"), "minor", 0, MAX_MINOR)
    patch = _parse_int(text, match.group("patch"), "patch", 0, MAX_PATCH)

    name_text = match.group("name")
    if name_text is None:
        return VersionTag(major, minor, patch, original_tag_text=text)

    if not name_text:
        if match.group("fix") is not None:
            raise MalformedTag(text, "fix number without pre-release name")
        if match.group("number") is not None:
            raise MalformedTag(text, "pre-release number without pre-release name")
        raise MalformedTag(text, "empty pre-release name")
    if not _NAME_RE.fullmatch(name_text):
        raise MalformedTag(text, f"pre-release name '{name_text}' must only contain letters")

    number = 0
    if match.group("number") is not None:
        number = _parse_int(text, match.group("number"), "pre-release number", 0, MAX_PRERELEASE_NUMBER)
    fix = 0
    if match.group("fix") is not None:
        fix = _parse_int(text, match.group("fix"), "pre-release fix", 1, MAX_PRERELEASE_FIX)

    name, standard = canonical_prerelease_name(name_text, name_mapping)
    return VersionTag(
        major,
        minor,
        patch,
        name,
        number,
        fix,
        original_tag_text=text,
        is_name_standard=standard,
        prerelease_name_from_tag=name_text,
    )
