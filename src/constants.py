"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    UNKNOWN_FIELD = 1
    INVALID_VERSION = 3


class OutputFormats(Enum):
    """Output formats for the published fields.

    Args:
        Enum (string): Output formats supported by the program.
    """

    JSON = "json"
    TEXT = "text"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOGGER_NAME = "simplegitversion"
    ENV_LOG_LEVEL = "SIMPLEGITVERSION_LOG_LEVEL"
    OUTPUT_FORMATS = [OutputFormats.JSON.value, OutputFormats.TEXT.value]

    GIT_EXECUTABLE = "git"
    GIT_TIMEOUT_SEC = 60  # Timeout in seconds for every git command

    # Looked up, in order, at the repository root when no --config is given
    OPTIONS_FILES = [
        ".simplegitversion.yml",
        ".simplegitversion.yaml",
        ".simplegitversion.json",
    ]

    # Branch name sources for detached HEAD checkouts on CI servers
    BRANCH_ENV_VARS = [
        "GITHUB_HEAD_REF",
        "GITHUB_REF_NAME",
        "CI_COMMIT_REF_NAME",
        "BUILD_SOURCEBRANCHNAME",
        "BRANCH_NAME",
    ]
