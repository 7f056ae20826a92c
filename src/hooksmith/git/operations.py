"""Low-level git command execution."""

import asyncio
import contextlib
import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_GIT_TIMEOUT = 120.0


class GitError(Exception):
    """Raised when a git operation fails."""

    pass


class NotARepositoryError(GitError):
    """Raised when git is unavailable or the directory is not a work tree."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path} is not a usable git repository: {reason}")


class CommandTimeoutError(GitError):
    """Raised when a git command exceeds its timeout."""

    def __init__(self, cmd: list[str], timeout: float):
        self.cmd = cmd
        self.timeout = timeout
        super().__init__(f"Git command timed out after {timeout}s: {' '.join(cmd)}")


def git_available() -> bool:
    """Check whether a git executable is on the PATH."""
    return shutil.which("git") is not None


async def run_git_command(
    args: list[str], cwd: Path, timeout: float = DEFAULT_GIT_TIMEOUT
) -> tuple[str, str, int]:
    """Run a git command and return stdout, stderr, and return code.

    Raises:
        CommandTimeoutError: If the command does not finish within ``timeout``.
        GitError: If the command could not be started.
    """
    cmd = ["git"] + args
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except Exception as err:
        raise GitError(f"Failed to run git command: {err}") from err

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError as err:
        raise CommandTimeoutError(cmd, timeout) from err
    finally:
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()

    return (
        stdout.decode("utf-8", errors="replace"),
        stderr.decode("utf-8", errors="replace"),
        proc.returncode or 0,
    )


async def is_git_repo(path: Path) -> bool:
    """Check if the given path is inside a git repository."""
    try:
        stdout, stderr, rc = await run_git_command(
            ["rev-parse", "--is-inside-work-tree"], path
        )
        return rc == 0 and stdout.strip() == "true"
    except GitError:
        return False
