"""Tests for the simplegitversion command line entry point."""

import json
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

import simplegitversion
from args import parse_args
from constants import ExitCodes
from versioning.models import ResolvedVersion

RELEASE = ResolvedVersion(
    is_valid_release=True,
    major=1,
    minor=2,
    patch=0,
    ordered_version=12345,
    dotted_ordered_version="0.0.0.12345",
    sem_ver="1.2.0",
    package_version="1.2.0",
    major_minor="1.2",
    major_minor_patch="1.2.0",
    original_tag_text="v1.2.0",
    commit_sha="abc",
    commit_date_utc=datetime(2024, 1, 2, tzinfo=timezone.utc),
)
INVALID = ResolvedVersion(sem_ver="No valid release tag.", package_version="No valid release tag.")


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("simplegitversion.configure_logging"):
        yield


def run(argv, resolved=RELEASE):
    with patch("simplegitversion.load_from_path", return_value=resolved) as loader:
        code = simplegitversion.main(argv)
    return code, loader


class TestParseArgs:
    """Command line defaults."""

    def test_defaults(self):
        args = parse_args([])
        assert args.PATH == "."
        assert args.CONFIG is None
        assert args.OUTPUT_FORMAT == "json"
        assert args.FIELD is None
        assert args.LOG_LEVEL is None
        assert not args.QUIET
        assert not args.ERROR_ON_INVALID

    def test_format_is_case_insensitive(self):
        assert parse_args(["-f", "TEXT"]).OUTPUT_FORMAT == "text"

    def test_unknown_format(self):
        with pytest.raises(SystemExit):
            parse_args(["--format", "xml"])


class TestMain:
    """Output and exit codes."""

    def test_json_output(self, capsys):
        code, loader = run(["-p", "/work", "-c", "opts.yml"])
        assert code == ExitCodes.SUCCESS.value
        loader.assert_called_once()
        assert loader.call_args[0][0] == "/work"
        assert loader.call_args[0][2] == "opts.yml"
        data = json.loads(capsys.readouterr().out)
        assert data["semVer"] == "1.2.0"
        assert data["isValid"] is True
        assert data["commitDateUtc"] == "2024-01-02T00:00:00+00:00"

    def test_text_output(self, capsys):
        code, _ = run(["--format", "text"])
        assert code == 0
        lines = capsys.readouterr().out.splitlines()
        assert "semVer=1.2.0" in lines
        assert "isValidCIBuild=false" in lines
        assert "currentUserName=" in lines

    def test_single_field(self, capsys):
        code, _ = run(["--field", "packageVersion"])
        assert code == 0
        assert capsys.readouterr().out == "1.2.0\n"

    def test_unknown_field(self, capsys):
        code, _ = run(["--field", "nope"])
        assert code == ExitCodes.UNKNOWN_FIELD.value
        assert capsys.readouterr().out == ""

    def test_invalid_version_is_not_an_error_by_default(self, capsys):
        code, _ = run([], resolved=INVALID)
        assert code == 0
        assert json.loads(capsys.readouterr().out)["isValid"] is False

    def test_error_on_invalid(self, capsys):
        code, _ = run(["--error-on-invalid"], resolved=INVALID)
        assert code == ExitCodes.INVALID_VERSION.value

    def test_error_on_invalid_with_valid_version(self, capsys):
        code, _ = run(["--error-on-invalid"])
        assert code == 0
