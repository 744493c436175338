"""Classification of the current commit from the repository history.

The analyzer reads tags and ancestry through a :class:`RepositoryAccess` and
produces an immutable :class:`RepositoryClassification`. Tag problems found
along the way are aggregated into a single :class:`ReleaseTagError`; any
:class:`VersionError` ends the analysis with an error classification.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional, Set, Tuple

from constants import Constants
from versioning.errors import MalformedTag, ReleaseTagError, RepositoryError, VersionError
from versioning.models import PreviousRelease, RepositoryClassification
from versioning.tag import VersionTag, first_possible_versions, is_version_like, parse_tag

from .backend import RepositoryAccess
from .options import RepositoryOptions


def _short(sha: str) -> str:
    return sha[:7]


def _tag_text(tag: VersionTag) -> str:
    return tag.original_tag_text or str(tag)


def branch_from_environment() -> Optional[str]:
    """Branch name published by common CI servers for detached checkouts."""
    for name in Constants.BRANCH_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            if value.startswith("refs/heads/"):
                value = value[len("refs/heads/"):]
            return value
    return None


def _collect_tags(
    repo: RepositoryAccess,
    reachable: Set[str],
    options: RepositoryOptions,
    logger: logging.Logger,
) -> Tuple[Dict[str, List[VersionTag]], List[str]]:
    """Parse every tag; return the tags per commit and the problems found in history."""
    by_commit: Dict[str, List[VersionTag]] = {}
    problems: List[str] = []
    for ref in repo.tags():
        try:
            tag = parse_tag(ref.name, options.prerelease_name_mapping)
        except MalformedTag as exc:
            if not is_version_like(ref.name):
                continue
            if ref.commit_sha in reachable:
                problems.append(str(exc))
            else:
                logger.debug("Ignoring %s (commit %s is not in history)", exc, _short(ref.commit_sha))
            continue
        tags = by_commit.setdefault(ref.commit_sha, [])
        # "v1.0.0" and "1.0.0" on the same commit are one version.
        if tag not in tags:
            tags.append(tag)
    return by_commit, problems


def _walk_ancestors(
    ancestors: List[str],
    by_commit: Dict[str, List[VersionTag]],
) -> Tuple[Optional[VersionTag], Optional[str], Optional[PreviousRelease]]:
    """Highest tag and highest final release among the ancestors, nearest first."""
    base: Optional[VersionTag] = None
    base_sha: Optional[str] = None
    previous: Optional[PreviousRelease] = None
    for sha in ancestors:
        for tag in by_commit.get(sha, ()):
            if base is None or tag > base:
                base, base_sha = tag, sha
            if not tag.is_prerelease and (previous is None or tag > previous.tag):
                previous = PreviousRelease(tag=tag, commit_sha=sha)
    return base, base_sha, previous


def analyze_repository(
    repo: RepositoryAccess,
    options: Optional[RepositoryOptions] = None,
    logger: Optional[logging.Logger] = None,
) -> RepositoryClassification:
    """Classify the current commit of ``repo``.

    Never raises a :class:`VersionError`: callers check ``error_text`` on the
    returned classification instead.
    """
    options = options or RepositoryOptions()
    logger = logger or logging.getLogger(__name__)
    try:
        return _analyze(repo, options, logger)
    except VersionError as exc:
        return RepositoryClassification.from_error(str(exc))


def _analyze(repo: RepositoryAccess, options: RepositoryOptions, logger: logging.Logger) -> RepositoryClassification:
    commit_sha, commit_date_utc = repo.head_commit()
    if options.ignore_dirty_working_folder:
        logger.debug("Working folder changes are ignored by configuration.")
        is_dirty = False
    else:
        is_dirty = repo.is_dirty(options.ignore_modified_files)

    ancestry = repo.ancestry()
    reachable = set(ancestry)
    reachable.add(commit_sha)
    ancestors = [sha for sha in ancestry if sha != commit_sha]

    by_commit, problems = _collect_tags(repo, reachable, options, logger)

    commits_by_version: Dict[VersionTag, Set[str]] = {}
    for sha, tags in by_commit.items():
        for tag in tags:
            commits_by_version.setdefault(tag, set()).add(sha)

    for version in sorted(commits_by_version):
        in_history = sorted(_short(s) for s in commits_by_version[version] if s in reachable and s != commit_sha)
        if len(in_history) > 1:
            problems.append(f"Version '{version}' is tagged on more than one commit: {', '.join(in_history)}.")

    current_tags = by_commit.get(commit_sha, [])
    if len(current_tags) > 1:
        texts = ", ".join(f"'{_tag_text(t)}'" for t in sorted(current_tags))
        raise RepositoryError(f"Ambiguous release point: commit '{_short(commit_sha)}' has tags {texts}.")
    tag_on_current = current_tags[0] if current_tags else None

    base, base_sha, previous = _walk_ancestors(ancestors, by_commit)

    if tag_on_current is not None:
        others = sorted(_short(s) for s in commits_by_version[tag_on_current] if s != commit_sha)
        if others:
            problems.append(
                f"Tag '{_tag_text(tag_on_current)}' on the current commit is already used by commit {', '.join(others)}."
            )
        if base is not None and tag_on_current <= base:
            problems.append(
                f"Tag '{_tag_text(tag_on_current)}' on the current commit must be greater than "
                f"'{_tag_text(base)}' found in its history."
            )
    if problems:
        raise ReleaseTagError(problems)

    used = {v for v, shas in commits_by_version.items() if shas - {commit_sha}}
    successors = base.direct_successors() if base is not None else first_possible_versions()
    candidates = tuple(v for v in successors if v not in used)

    branch_name = repo.current_branch() or branch_from_environment()
    ci_build_name = options.ci_build_name(branch_name)
    commits_since_base = 0
    if tag_on_current is None and base is not None:
        if ci_build_name is None:
            logger.debug("CI builds are disabled for branch '%s'.", branch_name)
        else:
            commits_since_base = repo.count_commits_since(base_sha)

    return RepositoryClassification(
        commit_sha=commit_sha,
        commit_date_utc=commit_date_utc,
        is_dirty=is_dirty,
        tag_on_current_commit=tag_on_current,
        nearest_ancestor_tag=base,
        previous_release=previous,
        candidate_versions=candidates,
        branch_name=branch_name,
        ci_builds_enabled=ci_build_name is not None,
        ci_build_name=ci_build_name,
        commits_since_base=commits_since_base,
        current_user_name=repo.current_user_name(),
    )
