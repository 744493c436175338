"""Tests for commit classification over an in-memory repository."""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

import pytest

from constants import Constants
from repository.analyzer import analyze_repository, branch_from_environment
from repository.backend import TagRef
from repository.options import BranchOptions, RepositoryOptions
from versioning.errors import RepositoryError
from versioning.resolver import resolve_version
from versioning.tag import first_possible_versions, parse_tag

A = "a" * 40
B = "b" * 40
C = "c" * 40
D = "d" * 40
SIDE = "f" * 40
HEAD_DATE = datetime(2024, 1, 2, tzinfo=timezone.utc)


class FakeRepository:
    """Linear history, nearest commit first; the first entry is the current commit."""

    def __init__(
        self,
        history: List[str],
        tags: Optional[Dict[str, str]] = None,
        dirty: bool = False,
        branch: Optional[str] = "main",
        user: Optional[str] = "Jane Doe",
    ):
        self.history = history
        self._tags = tags or {}
        self.dirty = dirty
        self.branch = branch
        self.user = user
        self.dirty_calls: List[Sequence[str]] = []
        self.count_calls: List[str] = []

    def head_commit(self):
        return self.history[0], HEAD_DATE

    def is_dirty(self, ignored=()):
        self.dirty_calls.append(list(ignored))
        return self.dirty

    def tags(self):
        return [TagRef(name, sha) for name, sha in self._tags.items()]

    def ancestry(self):
        return list(self.history)

    def count_commits_since(self, commit_sha):
        self.count_calls.append(commit_sha)
        return self.history.index(commit_sha)

    def current_branch(self):
        return self.branch

    def current_user_name(self):
        return self.user


class BrokenRepository(FakeRepository):
    def head_commit(self):
        raise RepositoryError("Repository 'x' has no commit.")


@pytest.fixture(autouse=True)
def no_ci_environment(monkeypatch):
    for name in Constants.BRANCH_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestClassification:
    """Facts gathered for the current commit."""

    def test_no_tags(self):
        c = analyze_repository(FakeRepository([B, A]))
        assert not c.has_error
        assert c.commit_sha == B
        assert c.commit_date_utc == HEAD_DATE
        assert c.tag_on_current_commit is None
        assert c.nearest_ancestor_tag is None
        assert c.previous_release is None
        assert list(c.candidate_versions) == first_possible_versions()
        assert c.branch_name == "main"
        assert c.ci_build_name == "main"
        assert c.ci_builds_enabled
        assert c.commits_since_base == 0
        assert c.current_user_name == "Jane Doe"

    def test_tagged_head(self):
        c = analyze_repository(FakeRepository([B, A], {"v1.0.0": B}))
        assert c.tag_on_current_commit == parse_tag("1.0.0")
        assert c.tag_on_current_commit.original_tag_text == "v1.0.0"
        assert c.nearest_ancestor_tag is None
        assert c.ci_base_tag is None

    def test_ci_base_and_previous_release(self):
        repo = FakeRepository([D, C, B, A], {"1.0.0": A, "1.1.0-beta": B})
        c = analyze_repository(repo)
        assert c.tag_on_current_commit is None
        assert c.nearest_ancestor_tag == parse_tag("1.1.0-beta")
        assert c.previous_release.tag == parse_tag("1.0.0")
        assert c.previous_release.commit_sha == A
        assert c.commits_since_base == 2
        assert repo.count_calls == [B]
        assert c.ci_base_tag == parse_tag("1.1.0-beta")
        assert list(c.candidate_versions) == parse_tag("1.1.0-beta").direct_successors()

    def test_highest_ancestor_is_the_base(self):
        # A higher tag further away wins over a lower but nearer one.
        c = analyze_repository(FakeRepository([C, B, A], {"2.0.0": A, "1.5.0": B}))
        assert c.nearest_ancestor_tag == parse_tag("2.0.0")
        assert c.commits_since_base == 2

    def test_versions_used_elsewhere_are_not_candidates(self):
        c = analyze_repository(FakeRepository([B, A], {"1.0.0": A, "1.0.1": SIDE}))
        assert parse_tag("1.0.1") not in c.candidate_versions
        assert parse_tag("1.0.1-rc") in c.candidate_versions
        assert not c.has_error

    def test_same_version_twice_on_head(self):
        c = analyze_repository(FakeRepository([B, A], {"v1.0.0": B, "1.0.0": B}))
        assert not c.has_error
        assert c.tag_on_current_commit == parse_tag("1.0.0")

    def test_non_version_tags_are_ignored(self):
        c = analyze_repository(FakeRepository([B, A], {"latest": B, "build-42": A, "release": A}))
        assert not c.has_error
        assert c.tag_on_current_commit is None
        assert c.nearest_ancestor_tag is None

    def test_malformed_tag_outside_history_is_ignored(self, caplog):
        caplog.set_level(logging.DEBUG, logger="tests.analyzer")
        c = analyze_repository(FakeRepository([B, A], {"1.0": SIDE}), logger=logging.getLogger("tests.analyzer"))
        assert not c.has_error
        assert any("not in history" in r.getMessage() for r in caplog.records)

    def test_name_mapping(self):
        options = RepositoryOptions(prerelease_name_mapping={"preview": "rc"})
        c = analyze_repository(FakeRepository([B, A], {"1.0.0-preview.2": B}), options)
        tag = c.tag_on_current_commit
        assert tag.prerelease_name == "rc"
        assert tag.prerelease_number == 2
        assert not tag.is_name_standard
        assert tag.prerelease_name_from_tag == "preview"


class TestReleaseTagErrors:
    """Tag conflicts make the whole analysis fail."""

    def test_ambiguous_release_point(self):
        c = analyze_repository(FakeRepository([B, A], {"1.0.0": B, "1.1.0": B}))
        assert c.has_error
        assert c.error_text.startswith("Ambiguous release point")
        assert "'1.0.0'" in c.error_text
        assert "'1.1.0'" in c.error_text

    def test_malformed_tag_in_history(self):
        c = analyze_repository(FakeRepository([B, A], {"1.0": A, "v2.0.x": B}))
        assert c.has_error
        assert c.error_summary == "Found 2 release tag errors."
        assert "Malformed tag '1.0'" in c.error_text
        assert "Malformed tag 'v2.0.x'" in c.error_text

    def test_head_tag_must_be_greater(self):
        c = analyze_repository(FakeRepository([B, A], {"1.0.0": B, "1.1.0": A}))
        assert c.error_summary == "Found 1 release tag error."
        assert "must be greater than '1.1.0'" in c.error_text

    def test_head_tag_already_used(self):
        c = analyze_repository(FakeRepository([B, A], {"1.0.0": B, "v1.0.0": SIDE}))
        assert c.has_error
        assert "already used by commit fffffff" in c.error_text

    def test_same_version_on_two_ancestors(self):
        c = analyze_repository(FakeRepository([C, B, A], {"1.0.0": A, "v1.0.0": B}))
        assert c.has_error
        assert "Version '1.0.0' is tagged on more than one commit: aaaaaaa, bbbbbbb." in c.error_text

    def test_all_problems_are_reported(self):
        c = analyze_repository(FakeRepository([C, B, A], {"1.0.0": A, "v1.0.0": B, "1.2": B}))
        assert c.error_summary == "Found 2 release tag errors."

    def test_backend_failure(self):
        c = analyze_repository(BrokenRepository([A]))
        assert c.error_text == "Repository 'x' has no commit."


class TestWorkingFolder:
    """Dirty state and its configuration."""

    def test_dirty(self):
        repo = FakeRepository([A], dirty=True)
        assert analyze_repository(repo).is_dirty
        assert repo.dirty_calls == [[]]

    def test_ignore_dirty_working_folder(self):
        repo = FakeRepository([A], dirty=True)
        c = analyze_repository(repo, RepositoryOptions(ignore_dirty_working_folder=True))
        assert not c.is_dirty
        assert repo.dirty_calls == []

    def test_ignored_patterns_are_forwarded(self):
        repo = FakeRepository([A])
        analyze_repository(repo, RepositoryOptions(ignore_modified_files=["docs/*"]))
        assert repo.dirty_calls == [["docs/*"]]


class TestBranches:
    """CI build name selection."""

    def test_ci_disabled_for_branch(self):
        options = RepositoryOptions(branches=[BranchOptions(name="release/*", ci_builds=False)])
        repo = FakeRepository([B, A], {"1.0.0": A}, branch="release/1.0")
        c = analyze_repository(repo, options)
        assert c.ci_build_name is None
        assert not c.ci_builds_enabled
        assert c.commits_since_base == 0
        assert c.ci_base_tag is None
        assert repo.count_calls == []

    def test_version_name_override(self):
        options = RepositoryOptions(branches=[BranchOptions(name="develop", version_name="dev")])
        c = analyze_repository(FakeRepository([A], branch="develop"), options)
        assert c.branch_name == "develop"
        assert c.ci_build_name == "dev"

    def test_detached_head_uses_environment(self, monkeypatch):
        monkeypatch.setenv("BRANCH_NAME", "refs/heads/feature/login")
        c = analyze_repository(FakeRepository([A], branch=None))
        assert c.branch_name == "feature/login"

    def test_detached_head_without_environment(self):
        c = analyze_repository(FakeRepository([A], branch=None))
        assert c.branch_name is None
        assert c.ci_build_name == "detached"

    def test_environment_order(self, monkeypatch):
        monkeypatch.setenv("GITHUB_REF_NAME", "main")
        monkeypatch.setenv("BRANCH_NAME", "other")
        assert branch_from_environment() == "main"


class TestEndToEnd:
    """Analysis followed by resolution."""

    def test_ci_build_after_release(self):
        logger = logging.getLogger("tests.analyzer")
        c = analyze_repository(FakeRepository([B, A], {"v1.2.0": A}, branch="develop"), logger=logger)
        result = resolve_version(c, logger)
        assert result.is_valid_ci_build
        assert result.sem_ver == "1.2.1--ci-develop.1"
        assert result.package_version == "1.2.1--ci-develop-000001"

    def test_release_on_tagged_commit(self):
        logger = logging.getLogger("tests.analyzer")
        c = analyze_repository(FakeRepository([B, A], {"v1.2.0": A, "v1.3.0-rc.1": B}), logger=logger)
        result = resolve_version(c, logger)
        assert result.is_valid_release
        assert result.sem_ver == "1.3.0-rc.1"
        assert result.original_tag_text == "v1.3.0-rc.1"
