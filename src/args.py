"""Argument parsing functionality for SimpleGitVersion."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="simplegitversion",
        description=(
            "SimpleGitVersion - Computes the version of a git working copy from its release tags"
        ),
        add_help=True,
    )

    parser.add_argument("-p", "--path",
                        dest="PATH",
                        help="Path inside the repository to analyze (default: current directory)",
                        action="store", type=str,
                        default=".")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to options file (YAML, YML, or JSON). "
                             "Defaults to .simplegitversion.yml at the repository root.",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format of the published fields (default: json)",
                        action="store",
                        type=str.lower,
                        choices=Constants.OUTPUT_FORMATS,
                        default="json")
    parser.add_argument("--field",
                        dest="FIELD",
                        help="Print only this published field, e.g. semVer",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not log to the console.",
                        action="store_true")
    parser.add_argument("--error-on-invalid",
                        dest="ERROR_ON_INVALID",
                        help="Exit with a non-zero status code if no valid version can be computed.",
                        action="store_true")

    return parser.parse_args(argv)
