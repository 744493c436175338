"""CI build version strings synthesized from a base release tag.

A CI build of an untagged commit is versioned after its base tag and before
every direct successor of that tag:

- final base ``1.2.0`` gives ``1.2.1--ci-develop.5``: the leading dash of the
  identifier sorts before any real pre-release of ``1.2.1``;
- pre-release base ``1.2.0-beta.3`` gives ``1.2.0-beta.3.0.ci-develop.5``:
  the explicit ``0`` fix sorts before the first fix ``1.2.0-beta.3.1``.

The package variant uses the same identifiers joined with dashes and a depth
zero padded to six digits so that ordinal comparison keeps the same order;
depths above 999999 are rejected.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

import semantic_version

from .tag import VersionTag

_INVALID_CHARS_RE = re.compile(r"[^0-9A-Za-z-]+")
MAX_BUILD_NAME_LENGTH = 20
MAX_CI_DEPTH = 999999


def sanitize_build_name(name: str) -> str:
    """Turn a branch name into a pre-release identifier (``feature/x`` -> ``feature-x``)."""
    cleaned = _INVALID_CHARS_RE.sub("-", name or "").strip("-")
    return cleaned[:MAX_BUILD_NAME_LENGTH].rstrip("-") or "detached"


def format_ci_build(base: VersionTag, build_name: Optional[str], depth: int) -> Tuple[str, str]:
    """Return ``(semver, package_version)`` of a CI build.

    Args:
        base: The release tag the build is based on.
        build_name: Branch (or configured) name, sanitized here.
        depth: Number of commits since the base tag.

    Raises:
        ValueError: If depth is negative or above MAX_CI_DEPTH.
    """
    if not 0 <= depth <= MAX_CI_DEPTH:
        raise ValueError(f"depth must be between 0 and {MAX_CI_DEPTH}")
    name = sanitize_build_name(build_name)
    if base.is_prerelease:
        prefix = f"{base.major}.{base.minor}.{base.patch}-{base.prerelease_name}"
        semver = f"{prefix}.{base.prerelease_number}.{base.prerelease_fix}.ci-{name}.{depth}"
        package = (
            f"{prefix}-{base.prerelease_number:02d}-{base.prerelease_fix:02d}"
            f"-ci-{name}-{depth:06d}"
        )
    else:
        core = f"{base.major}.{base.minor}.{base.patch + 1}"
        semver = f"{core}--ci-{name}.{depth}"
        package = f"{core}--ci-{name}-{depth:06d}"
    # Raises ValueError if the synthesized string is not a valid semantic version.
    semantic_version.Version(semver)
    return semver, package
