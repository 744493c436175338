"""Error taxonomy for tag parsing and repository analysis."""

from typing import Iterable, List


class VersionError(Exception):
    """Base class for every failure that invalidates a version computation."""

    @property
    def summary(self) -> str:
        """First line of the message, suitable for a version field."""
        return str(self).split("\n", 1)[0]


class MalformedTag(VersionError):
    """A single tag text that cannot be parsed as a release version."""

    def __init__(self, tag_text: str, reason: str):
        self.tag_text = tag_text
        self.reason = reason
        super().__init__(f"Malformed tag '{tag_text}': {reason}.")


class ReleaseTagError(VersionError):
    """Conflicting, ambiguous or malformed release tags across history.

    Aggregates every problem found: the first line of the message is a short
    summary and each following line describes one problem.
    """

    def __init__(self, problems: Iterable[str]):
        self.problems: List[str] = list(problems)
        count = len(self.problems)
        header = f"Found {count} release tag error{'s' if count > 1 else ''}."
        lines = [header] + [f"- {p}" for p in self.problems]
        super().__init__("\n".join(lines))


class RepositoryError(VersionError):
    """Repository missing or unreadable, or an ambiguous release point."""


class OptionsError(VersionError):
    """The options file exists but cannot be read or is invalid."""
