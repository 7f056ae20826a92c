"""Driver for the single working copy this process updates itself from.

All state is read from git on demand; nothing is cached between calls
except the one-time check that the directory is a repository at all.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from hooksmith.git.operations import (
    DEFAULT_GIT_TIMEOUT,
    GitError,
    NotARepositoryError,
    git_available,
    is_git_repo,
    run_git_command,
)

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"


@dataclass
class RepositoryState:
    """Snapshot of where the working copy points."""

    branch: str
    commit: str
    tag: str

    @property
    def detached(self) -> bool:
        return not self.branch


class RepositoryDriver:
    """Fetch, checkout and reset operations against one working copy.

    Args:
        root: Directory inside the working copy.
        remote: Remote to fetch from and reset against.
        timeout: Ceiling in seconds for each git invocation.
    """

    def __init__(
        self,
        root: Path,
        remote: str = DEFAULT_REMOTE,
        timeout: float = DEFAULT_GIT_TIMEOUT,
    ):
        self.root = Path(root)
        self.remote = remote
        self.timeout = timeout
        self._verified = False

    async def ensure_repository(self) -> None:
        """Verify that git is installed and ``root`` is a work tree.

        Raises:
            NotARepositoryError: If either condition does not hold.
        """
        if not git_available():
            raise NotARepositoryError(self.root, "git executable not found")
        if self._verified:
            return
        if not await is_git_repo(self.root):
            raise NotARepositoryError(self.root, "not inside a git work tree")
        self._verified = True

    async def _git(self, *args: str) -> tuple[str, int]:
        await self.ensure_repository()
        stdout, stderr, rc = await run_git_command(list(args), self.root, timeout=self.timeout)
        if rc != 0 and stderr.strip():
            logger.debug("git %s exited %d: %s", args[0], rc, stderr.strip()[:500])
        return stdout.strip(), rc

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    async def current_branch(self) -> str:
        """Name of the checked-out branch, or "" when HEAD is detached."""
        out, rc = await self._git("symbolic-ref", "--short", "-q", "HEAD")
        return out if rc == 0 else ""

    async def current_commit(self) -> str:
        out, rc = await self._git("rev-parse", "HEAD")
        return out if rc == 0 else ""

    async def current_tag(self) -> str:
        """Tag pointing exactly at HEAD, or ""."""
        out, rc = await self._git("describe", "--tags", "--exact-match", "HEAD")
        return out if rc == 0 else ""

    async def state(self) -> RepositoryState:
        return RepositoryState(
            branch=await self.current_branch(),
            commit=await self.current_commit(),
            tag=await self.current_tag(),
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def fetch(self) -> bool:
        """Fetch from the default remote."""
        try:
            _, rc = await self._git("fetch", self.remote)
        except NotARepositoryError:
            raise
        except GitError as e:
            logger.error("FetchFailed: %s", e)
            return False

        if rc != 0:
            logger.error("FetchFailed: git fetch %s exited with %d", self.remote, rc)
            return False

        logger.info("Fetched latest code from %s", self.remote)
        return True

    async def checkout(self, branch: str, fetch: bool = True) -> bool:
        """Fetch, switch to ``branch`` and hard-reset it to the remote.

        The switch is skipped when already on ``branch``. The reset is
        skipped only when HEAD resolves to neither a branch nor a tag.

        Args:
            branch: Branch to check out.
            fetch: Set to False when the caller has already fetched.

        Returns:
            True only if every attempted step succeeded.
        """
        if not branch or (fetch and not await self.fetch()):
            return False

        try:
            if await self.current_branch() != branch:
                _, rc = await self._git("checkout", "-q", branch)
                if rc != 0:
                    logger.error("CheckoutFailed: could not check out branch %r", branch)
                    return False
                logger.info("Checked out branch %r", branch)

            if await self.current_branch() or await self.current_tag():
                _, rc = await self._git("reset", "-q", "--hard", f"{self.remote}/{branch}")
                if rc != 0:
                    logger.error("ResetFailed: could not reset to %s/%s", self.remote, branch)
                    return False
                logger.info("Reset to %s/%s", self.remote, branch)
        except NotARepositoryError:
            raise
        except GitError as e:
            logger.error("CheckoutFailed: %s", e)
            return False

        return True
