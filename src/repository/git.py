"""Git repository access through the ``git`` executable.

Only read-only plumbing commands are run. Every failure surfaces as a
:class:`RepositoryError`; nothing is retried.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import subprocess
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from constants import Constants
from common.logging_utils import Timer, extra_context, is_debug_enabled
from versioning.errors import RepositoryError

from .backend import TagRef

_TAG_PREFIX = "refs/tags/"


class GitRepository:
    """Scoped access to one git working copy.

    Use :meth:`open` inside a ``with`` block; once closed, every query raises.
    """

    def __init__(self, root: str, logger: Optional[logging.Logger] = None, git_executable: Optional[str] = None):
        self.root = root
        self.logger = logger or logging.getLogger(__name__)
        self._git = git_executable or Constants.GIT_EXECUTABLE
        self._closed = False

    @classmethod
    def open(cls, path: str, logger: Optional[logging.Logger] = None) -> "GitRepository":
        """Open the repository containing ``path``, which may be below its root.

        Raises:
            RepositoryError: If ``path`` is not inside a git working copy.
        """
        if not os.path.isdir(path):
            raise RepositoryError(f"Path '{path}' is not a directory.")
        probe = cls(path, logger)
        root = probe._run("rev-parse", "--show-toplevel").strip()
        return cls(root, logger)

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "GitRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _run(self, *args: str, allow_failure: bool = False) -> Optional[str]:
        """Run a git command in the repository and return its stdout.

        Returns None instead of raising when ``allow_failure`` is set and git
        exits with a non-zero status.
        """
        if self._closed:
            raise RepositoryError(f"Repository '{self.root}' is closed.")
        command = [self._git, "-C", self.root, *args]
        with Timer() as t:
            try:
                result = subprocess.run(
                    command,
                    capture_output=True,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                    timeout=Constants.GIT_TIMEOUT_SEC,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                raise RepositoryError(
                    f"git {args[0]} timed out after {Constants.GIT_TIMEOUT_SEC} seconds."
                ) from exc
            except OSError as exc:
                raise RepositoryError(f"Unable to run '{self._git}': {exc}") from exc

        if is_debug_enabled(self.logger):
            self.logger.debug(
                "git %s",
                args[0],
                extra=extra_context(
                    event="git_command",
                    component="git",
                    action=args[0],
                    outcome="success" if result.returncode == 0 else "failure",
                    return_code=result.returncode,
                    duration_ms=t.duration_ms(),
                ),
            )
        if result.returncode != 0:
            if allow_failure:
                return None
            message = result.stderr.strip() or f"exit code {result.returncode}"
            raise RepositoryError(f"git {' '.join(args)} failed in '{self.root}': {message}")
        return result.stdout

    def head_commit(self) -> Tuple[str, datetime]:
        # Only an unborn HEAD is reported as an empty repository.
        if self._run("rev-parse", "--verify", "-q", "HEAD", allow_failure=True) is None:
            raise RepositoryError(f"Repository '{self.root}' has no commit.")
        out = self._run("log", "-1", "--format=%H%n%ct", "HEAD")
        sha, timestamp = out.split()
        return sha, datetime.fromtimestamp(int(timestamp), tz=timezone.utc)

    def is_dirty(self, ignored: Sequence[str] = ()) -> bool:
        out = self._run("status", "--porcelain", "-z", "--untracked-files=all")
        entries = out.split("\0")
        paths: List[str] = []
        i = 0
        while i < len(entries):
            entry = entries[i]
            i += 1
            if not entry:
                continue
            status, path = entry[:2], entry[3:]
            paths.append(path)
            # Renames and copies are followed by their source path.
            if "R" in status or "C" in status:
                if i < len(entries):
                    paths.append(entries[i])
                i += 1
        for path in paths:
            if not any(fnmatch.fnmatch(path, pattern) for pattern in ignored):
                return True
        return False

    def tags(self) -> List[TagRef]:
        out = self._run(
            "for-each-ref",
            "--format=%(refname)%09%(objectname)%09%(*objectname)",
            "refs/tags",
        )
        refs: List[TagRef] = []
        for line in out.splitlines():
            if not line.strip():
                continue
            refname, objectname, peeled = (line.split("\t") + ["", ""])[:3]
            # Annotated tags are peeled to the commit they point to.
            refs.append(TagRef(refname[len(_TAG_PREFIX):], peeled or objectname))
        return refs

    def ancestry(self) -> List[str]:
        out = self._run("rev-list", "--topo-order", "HEAD")
        return [line.strip() for line in out.splitlines() if line.strip()]

    def count_commits_since(self, commit_sha: str) -> int:
        out = self._run("rev-list", "--count", f"{commit_sha}..HEAD")
        return int(out.strip())

    def current_branch(self) -> Optional[str]:
        out = self._run("symbolic-ref", "--short", "-q", "HEAD", allow_failure=True)
        if out is None:
            return None
        return out.strip() or None

    def current_user_name(self) -> Optional[str]:
        out = self._run("config", "user.name", allow_failure=True)
        if out and out.strip():
            return out.strip()
        return os.environ.get("USERNAME") or os.environ.get("USER")
