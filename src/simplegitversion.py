"""SimpleGitVersion - version of a git working copy from its release tags.

Opens the repository, reads the optional options file, classifies the
current commit and prints the published version fields.

    Returns:
        int: Exit code
"""
import json
import logging
import sys
from typing import Any, Optional

from constants import Constants, ExitCodes, OutputFormats
from common.logging_utils import configure_logging
from args import parse_args
from repository.analyzer import analyze_repository
from repository.git import GitRepository
from repository.options import find_options_file, load_options
from versioning.errors import VersionError
from versioning.models import RepositoryClassification, ResolvedVersion
from versioning.resolver import resolve_version


def load_from_path(path: str, logger: logging.Logger, options_path: Optional[str] = None) -> ResolvedVersion:
    """Compute the version of the repository containing ``path``.

    Args:
        path: Any directory inside the working copy.
        logger: Receives the diagnostics of the analysis.
        options_path: Explicit options file; defaults to the one at the repository root.

    Returns:
        The resolved version. Failures to open the repository or to read the
        options produce an invalid result, they are not raised.
    """
    try:
        with GitRepository.open(path, logger) as repo:
            options = load_options(options_path or find_options_file(repo.root), logger)
            classification = analyze_repository(repo, options, logger)
    except VersionError as exc:
        classification = RepositoryClassification.from_error(str(exc))
    return resolve_version(classification, logger)


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def main(argv=None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE, args.QUIET)
    logger = logging.getLogger(Constants.LOGGER_NAME)

    resolved = load_from_path(args.PATH, logger, args.CONFIG)
    fields = resolved.to_published_fields()

    if args.FIELD:
        if args.FIELD not in fields:
            logger.error("Unknown field '%s'. Known fields: %s", args.FIELD, ", ".join(fields))
            return ExitCodes.UNKNOWN_FIELD.value
        print(_format_value(fields[args.FIELD]))
    elif args.OUTPUT_FORMAT == OutputFormats.TEXT.value:
        for name, value in fields.items():
            print(f"{name}={_format_value(value)}")
    else:
        print(json.dumps(fields, indent=2))

    if args.ERROR_ON_INVALID and not resolved.is_valid:
        logger.error("No valid version for the current commit, exiting with non-zero status code.")
        return ExitCodes.INVALID_VERSION.value
    return ExitCodes.SUCCESS.value


if __name__ == "__main__":
    sys.exit(main())
