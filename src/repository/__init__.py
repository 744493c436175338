"""Repository access, analysis options and commit classification."""

from .backend import RepositoryAccess, TagRef
from .git import GitRepository
from .options import BranchOptions, RepositoryOptions, find_options_file, load_options
from .analyzer import analyze_repository

__all__ = [
    "RepositoryAccess",
    "TagRef",
    "GitRepository",
    "BranchOptions",
    "RepositoryOptions",
    "find_options_file",
    "load_options",
    "analyze_repository",
]
