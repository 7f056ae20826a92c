"""Decide what an incoming batch of commits requires of the running process."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from hooksmith.events.repository import CommitRecord

# Entry points that cannot be hot-reloaded
HOT_FILES: tuple[str, ...] = ("app.py",)

# Dependency manifest; any change to it means reinstalling
MANIFEST_NAME = "pyproject.toml"


@dataclass(frozen=True)
class UpdateDecision:
    """What an update has to do after the new code is checked out."""

    must_restart: bool
    must_reinstall_deps: bool


def _touches_manifest(paths: Iterable[str], manifest_name: str) -> bool:
    return any(manifest_name in path for path in paths)


def classify_changes(
    commits: Sequence[CommitRecord],
    branch_changing: bool,
    hot_files: Sequence[str] = HOT_FILES,
    manifest_name: str = MANIFEST_NAME,
) -> UpdateDecision:
    """Classify a batch of commits.

    A branch change forces both a restart and a dependency reinstall, so the
    commits are not inspected at all in that case.

    Args:
        commits: Commits from the push, in any order.
        branch_changing: Whether the update switches the working copy to
            another branch.
        hot_files: Paths whose modification forces a full restart.
        manifest_name: Filename whose modification or creation forces a
            dependency reinstall. Matched as a substring of each path so
            that sub-project manifests count too.
    """
    if branch_changing:
        return UpdateDecision(must_restart=True, must_reinstall_deps=True)

    must_restart = False
    must_reinstall = False
    for commit in commits:
        if not must_restart:
            must_restart = any(path in hot_files for path in commit.modified)
        if not must_reinstall:
            must_reinstall = _touches_manifest(commit.modified, manifest_name) or _touches_manifest(
                commit.added, manifest_name
            )
        if must_restart and must_reinstall:
            break

    return UpdateDecision(must_restart=must_restart, must_reinstall_deps=must_reinstall)
