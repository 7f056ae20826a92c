"""Git access for the working copy that hooksmith updates."""

from hooksmith.git.operations import (
    CommandTimeoutError,
    GitError,
    NotARepositoryError,
    git_available,
    is_git_repo,
    run_git_command,
)
from hooksmith.git.repository import RepositoryDriver, RepositoryState

__all__ = [
    "CommandTimeoutError",
    "GitError",
    "NotARepositoryError",
    "RepositoryDriver",
    "RepositoryState",
    "git_available",
    "is_git_repo",
    "run_git_command",
]
