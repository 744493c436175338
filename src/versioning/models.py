"""Data models for repository classification and resolved versions."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .tag import VersionTag


@dataclass(frozen=True)
class PreviousRelease:
    """Most recent final release found among the ancestors."""
    tag: VersionTag
    commit_sha: str


@dataclass(frozen=True)
class RepositoryClassification:
    """Snapshot of what the repository says about the current commit.

    Built once per analysis. When ``error_text`` is set every other field is
    left to its default and must not be trusted.
    """
    commit_sha: Optional[str] = None
    commit_date_utc: Optional[datetime] = None
    is_dirty: bool = False
    tag_on_current_commit: Optional[VersionTag] = None
    nearest_ancestor_tag: Optional[VersionTag] = None
    previous_release: Optional[PreviousRelease] = None
    candidate_versions: Tuple[VersionTag, ...] = ()
    error_text: Optional[str] = None
    branch_name: Optional[str] = None
    ci_builds_enabled: bool = True
    ci_build_name: Optional[str] = None  # "detached" when not known
    commits_since_base: int = 0
    current_user_name: Optional[str] = None

    @classmethod
    def from_error(cls, error_text: str) -> "RepositoryClassification":
        return cls(error_text=error_text)

    @property
    def has_error(self) -> bool:
        return bool(self.error_text)

    @property
    def error_summary(self) -> Optional[str]:
        """First line of the error text."""
        if not self.error_text:
            return None
        return self.error_text.split("\n", 1)[0]

    @property
    def ci_base_tag(self) -> Optional[VersionTag]:
        """Base tag of a CI build: only for untagged commits with CI builds enabled."""
        if self.tag_on_current_commit is not None or not self.ci_builds_enabled:
            return None
        return self.nearest_ancestor_tag


@dataclass(frozen=True)
class ResolvedVersion:
    """Published version fields for one analysis run."""
    is_valid_release: bool = False
    is_valid_ci_build: bool = False
    major: int = 0
    minor: int = 0
    patch: int = 0
    prerelease_name: str = ""
    prerelease_number: int = 0
    prerelease_fix: int = 0
    ordered_version: int = 0
    dotted_ordered_version: str = "0.0.0.0"
    sem_ver: str = ""
    package_version: str = ""
    major_minor: str = "0.0"
    major_minor_patch: str = "0.0.0"
    original_tag_text: Optional[str] = None
    commit_sha: Optional[str] = None
    commit_date_utc: Optional[datetime] = None
    current_user_name: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        """Either a valid release or a valid CI build."""
        assert self.ordered_version >= 0
        assert (self.ordered_version == 0) == (not (self.is_valid_release or self.is_valid_ci_build))
        return self.ordered_version != 0

    def to_published_fields(self) -> Dict[str, Any]:
        """Flat output contract consumed by packaging tools."""
        return {
            "isValid": self.is_valid,
            "isValidRelease": self.is_valid_release,
            "isValidCIBuild": self.is_valid_ci_build,
            "major": self.major,
            "minor": self.minor,
            "patch": self.patch,
            "preReleaseName": self.prerelease_name,
            "preReleaseNumber": self.prerelease_number,
            "preReleaseFix": self.prerelease_fix,
            "majorMinor": self.major_minor,
            "majorMinorPatch": self.major_minor_patch,
            "dottedOrderedVersion": self.dotted_ordered_version,
            "orderedVersion": self.ordered_version,
            "semVer": self.sem_ver,
            "packageVersion": self.package_version,
            "originalTagText": self.original_tag_text,
            "commitSha": self.commit_sha,
            "commitDateUtc": self.commit_date_utc.isoformat() if self.commit_date_utc else None,
            "currentUserName": self.current_user_name,
        }
