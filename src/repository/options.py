"""Analysis options read from an optional YAML or JSON file.

Example ``.simplegitversion.yml``::

    ignore_modified_files:
      - "docs/*"
    prerelease_name_mapping:
      preview: prerelease
      testing: rc
    branches:
      - name: develop
        version_name: dev
      - name: "release/*"
        ci_builds: false
"""

from __future__ import annotations

import fnmatch
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from constants import Constants
from versioning.errors import OptionsError
from versioning.tag import STANDARD_PRERELEASE_NAMES

_KNOWN_KEYS = {
    "ignore_dirty_working_folder",
    "ignore_modified_files",
    "prerelease_name_mapping",
    "ci_builds",
    "branches",
}
_BRANCH_KEYS = {"name", "ci_builds", "version_name"}


@dataclass
class BranchOptions:
    """Per-branch CI build settings; ``name`` may be a glob pattern."""
    name: str
    ci_builds: bool = True
    version_name: Optional[str] = None


@dataclass
class RepositoryOptions:
    """Configuration of one analysis run. Defaults apply when no file exists."""
    ignore_dirty_working_folder: bool = False
    ignore_modified_files: List[str] = field(default_factory=list)
    prerelease_name_mapping: Dict[str, str] = field(default_factory=dict)
    ci_builds: bool = True
    branches: List[BranchOptions] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepositoryOptions":
        """Validate a raw mapping and build the options.

        Raises:
            OptionsError: On unknown keys or values of the wrong type.
        """
        if not isinstance(data, dict):
            raise OptionsError("Options must be a mapping.")
        unknown = sorted(set(data) - _KNOWN_KEYS)
        if unknown:
            raise OptionsError(f"Unknown option(s): {', '.join(unknown)}.")

        mapping = data.get("prerelease_name_mapping") or {}
        if not isinstance(mapping, dict):
            raise OptionsError("'prerelease_name_mapping' must be a mapping.")
        for source, target in mapping.items():
            if str(target).lower() not in STANDARD_PRERELEASE_NAMES:
                raise OptionsError(
                    f"Pre-release name '{source}' is mapped to '{target}' which is not one of: "
                    f"{', '.join(STANDARD_PRERELEASE_NAMES)}."
                )

        branches = []
        for raw in data.get("branches") or []:
            if not isinstance(raw, dict) or not raw.get("name"):
                raise OptionsError("Each entry of 'branches' must be a mapping with a 'name'.")
            unknown = sorted(set(raw) - _BRANCH_KEYS)
            if unknown:
                raise OptionsError(f"Unknown branch option(s) for '{raw['name']}': {', '.join(unknown)}.")
            branches.append(
                BranchOptions(
                    name=str(raw["name"]),
                    ci_builds=_as_bool(raw, "ci_builds", True),
                    version_name=str(raw["version_name"]) if raw.get("version_name") else None,
                )
            )

        ignored = data.get("ignore_modified_files") or []
        if not isinstance(ignored, list):
            raise OptionsError("'ignore_modified_files' must be a list of glob patterns.")

        return cls(
            ignore_dirty_working_folder=_as_bool(data, "ignore_dirty_working_folder", False),
            ignore_modified_files=[str(p) for p in ignored],
            prerelease_name_mapping={str(k): str(v).lower() for k, v in mapping.items()},
            ci_builds=_as_bool(data, "ci_builds", True),
            branches=branches,
        )

    def find_branch(self, branch_name: str) -> Optional[BranchOptions]:
        """First branch entry whose name or pattern matches."""
        for branch in self.branches:
            if branch.name == branch_name or fnmatch.fnmatchcase(branch_name, branch.name):
                return branch
        return None

    def ci_build_name(self, branch_name: Optional[str]) -> Optional[str]:
        """Name used in the CI marker of ``branch_name``; None disables CI builds."""
        branch = self.find_branch(branch_name) if branch_name else None
        if branch is not None:
            if not branch.ci_builds:
                return None
            return branch.version_name or branch_name
        if not self.ci_builds:
            return None
        return branch_name or "detached"


def _as_bool(data: Dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise OptionsError(f"'{key}' must be true or false.")
    return value


def find_options_file(root: str) -> Optional[str]:
    """Default options file at the repository root, if any."""
    for name in Constants.OPTIONS_FILES:
        candidate = os.path.join(root, name)
        if os.path.isfile(candidate):
            return candidate
    return None


def load_options(path: Optional[str], logger: Optional[logging.Logger] = None) -> RepositoryOptions:
    """Load options from ``path``; defaults when ``path`` is None.

    Raises:
        OptionsError: If the file cannot be read or holds invalid options.
    """
    if not path:
        return RepositoryOptions()
    try:
        with open(path, "r", encoding="utf-8") as fh:
            if path.lower().endswith(".json"):
                data = json.load(fh)
            else:
                data = yaml.safe_load(fh)
    except OSError as exc:
        raise OptionsError(f"Unable to read options file '{path}': {exc}") from exc
    except (yaml.YAMLError, ValueError) as exc:
        raise OptionsError(f"Invalid options file '{path}': {exc}") from exc

    if logger is not None:
        logger.debug("Options loaded from '%s'.", path)
    return RepositoryOptions.from_dict(data or {})
