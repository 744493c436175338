"""Read-only repository access required by the analyzer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol, Sequence, Tuple


@dataclass(frozen=True)
class TagRef:
    """A tag name and the commit it points to (peeled for annotated tags)."""
    name: str
    commit_sha: str


class RepositoryAccess(Protocol):
    """Narrow view of a version control repository."""

    def head_commit(self) -> Tuple[str, datetime]:
        """Sha and UTC commit date of the current commit."""
        ...

    def is_dirty(self, ignored: Sequence[str] = ()) -> bool:
        """Whether the working tree differs from the current commit.

        ``ignored`` holds glob patterns of paths whose changes do not count.
        """
        ...

    def tags(self) -> List[TagRef]:
        """Every tag of the repository."""
        ...

    def ancestry(self) -> List[str]:
        """Commits reachable from the current one, nearest first (current included)."""
        ...

    def count_commits_since(self, commit_sha: str) -> int:
        """Commits reachable from the current commit and not from ``commit_sha``."""
        ...

    def current_branch(self) -> Optional[str]:
        """Checked out branch, None on a detached HEAD."""
        ...

    def current_user_name(self) -> Optional[str]:
        ...
