"""Decision table turning a repository classification into published versions.

Guards are evaluated in a fixed order: error > dirty > CI build > no tag >
release. Whatever the branch taken, a fully populated
:class:`ResolvedVersion` is returned; nothing is raised to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Sequence

from .ci import format_ci_build
from .models import RepositoryClassification, ResolvedVersion
from .tag import TagFormat, VersionTag

DIRTY_WORKING_FOLDER_REASON = "Working folder has uncommitted changes."
NO_RELEASE_TAG_REASON = "No valid release tag."


def _version_fields(tag: VersionTag) -> Dict[str, Any]:
    return {
        "major": tag.major,
        "minor": tag.minor,
        "patch": tag.patch,
        "prerelease_name": tag.prerelease_name,
        "prerelease_number": tag.prerelease_number,
        "prerelease_fix": tag.prerelease_fix,
        "dotted_ordered_version": tag.render(TagFormat.DOTTED_ORDERED_VERSION),
        "ordered_version": tag.ordered_value,
    }


def _invalid_fields(reason: str) -> Dict[str, Any]:
    # The reason goes where a version is expected so that packaging fails loudly.
    return {
        "major": 0,
        "minor": 0,
        "patch": 0,
        "prerelease_name": "",
        "prerelease_number": 0,
        "prerelease_fix": 0,
        "dotted_ordered_version": "0.0.0.0",
        "ordered_version": 0,
        "sem_ver": reason,
        "package_version": reason,
    }


def _build(fields: Dict[str, Any]) -> ResolvedVersion:
    fields["major_minor"] = f"{fields['major']}.{fields['minor']}"
    fields["major_minor_patch"] = f"{fields['major_minor']}.{fields['patch']}"
    return ResolvedVersion(**fields)


def log_candidate_versions(logger: logging.Logger, candidates: Sequence[VersionTag]) -> None:
    """Tell which tags could be put on the current commit."""
    if not candidates:
        logger.info("Not a releasable commit.")
    elif len(candidates) == 1:
        logger.info("This can be released with '%s' tag.", candidates[0])
    else:
        logger.info("Possible release tags are: %s", ", ".join(str(v) for v in candidates))


def resolve_version(classification: RepositoryClassification, logger: logging.Logger) -> ResolvedVersion:
    """Apply the decision table to a classification.

    Args:
        classification: Result of the repository analysis.
        logger: Sink for diagnostics (debug is used for benign states).

    Returns:
        The resolved version; invalid results carry their reason in
        ``sem_ver`` and ``package_version``.
    """
    c = classification
    if c.has_error:
        logger.error(c.error_text)
        return _build(_invalid_fields(c.error_summary))

    fields: Dict[str, Any] = {
        "commit_sha": c.commit_sha,
        "commit_date_utc": c.commit_date_utc,
        "current_user_name": c.current_user_name,
    }
    tag = c.tag_on_current_commit
    if tag is not None and tag.is_prerelease and not tag.is_name_standard:
        logger.warning(
            "Non standard pre-release name '%s' in tag '%s' is mapped to '%s'.",
            tag.prerelease_name_from_tag,
            tag.original_tag_text,
            tag.prerelease_name,
        )
    if c.is_dirty:
        logger.debug(DIRTY_WORKING_FOLDER_REASON)
        fields.update(_invalid_fields(DIRTY_WORKING_FOLDER_REASON))
        return _build(fields)

    if c.previous_release is not None:
        logger.debug(
            "Previous release found '%s' on commit '%s'.",
            c.previous_release.tag,
            c.previous_release.commit_sha,
        )

    ci_base = c.ci_base_tag
    if ci_base is not None:
        try:
            sem_ver, package_version = format_ci_build(ci_base, c.ci_build_name, c.commits_since_base)
        except ValueError as exc:
            reason = f"Unable to build CI version from '{ci_base}': {exc}"
            logger.error(reason)
            fields.update(_invalid_fields(reason))
            return _build(fields)
        fields.update(_version_fields(ci_base))
        fields.update(is_valid_ci_build=True, sem_ver=sem_ver, package_version=package_version)
        logger.info("CI release: '%s'.", sem_ver)
        log_candidate_versions(logger, c.candidate_versions)
        return _build(fields)

    if tag is None:
        logger.debug(NO_RELEASE_TAG_REASON)
        fields.update(_invalid_fields(NO_RELEASE_TAG_REASON))
        log_candidate_versions(logger, c.candidate_versions)
        return _build(fields)

    fields.update(_version_fields(tag))
    fields.update(
        is_valid_release=True,
        original_tag_text=tag.original_tag_text,
        sem_ver=tag.render(TagFormat.SEMVER_WITH_MARKER),
        package_version=tag.render(TagFormat.PACKAGE),
    )
    return _build(fields)


class VersionResolver:
    """Resolves classifications with a fixed logger."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def resolve(self, classification: RepositoryClassification) -> ResolvedVersion:
        return resolve_version(classification, self.logger)
