"""Update orchestrator.

Runs one update from a push event:
1. Decide whether the push warrants an update at all
2. Classify the commits (restart vs reload, reinstall or not)
3. Fetch and check out the branch, hard-reset to the remote
4. Reinstall dependencies for the root and every sub-project, concurrently
5. Shut down (restart) or reload the host

A fetch or checkout failure ends the run before anything is installed or
restarted. Install failures are logged and the run carries on.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from hooksmith.events.bus import EventBus, event_bus
from hooksmith.events.repository import PushPayload
from hooksmith.events.types import EventType
from hooksmith.git.operations import NotARepositoryError
from hooksmith.git.repository import RepositoryDriver
from hooksmith.host import HostControl
from hooksmith.updater.classifier import (
    HOT_FILES,
    MANIFEST_NAME,
    UpdateDecision,
    classify_changes,
)
from hooksmith.updater.discovery import SUBPROJECT_GLOB, discover_subprojects
from hooksmith.updater.installer import DependencyInstaller, InstallResult

logger = logging.getLogger(__name__)

SHUTDOWN_REASON = "Updating to the latest code"


class UpdateState(str, Enum):
    """Where an update run is, or where it ended."""

    IDLE = "idle"
    DECIDING = "deciding"
    FETCHING = "fetching"
    CHECKING_OUT = "checking_out"
    INSTALLING_DEPS = "installing_deps"
    FINALIZING = "finalizing"
    RESTARTED = "restarted"
    RELOADED = "reloaded"
    ABORTED = "aborted"


@dataclass
class UpdateRun:
    """Record of a single update run."""

    branch: str
    state: UpdateState = UpdateState.IDLE
    changing_branch: bool = False
    decision: UpdateDecision | None = None
    install_results: list[InstallResult] = field(default_factory=list)
    steps_completed: list[str] = field(default_factory=list)
    reason: str | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    @property
    def aborted(self) -> bool:
        return self.state == UpdateState.ABORTED

    def to_dict(self) -> dict:
        return {
            "branch": self.branch,
            "state": self.state.value,
            "changing_branch": self.changing_branch,
            "must_restart": self.decision.must_restart if self.decision else None,
            "must_reinstall_deps": self.decision.must_reinstall_deps if self.decision else None,
            "installs": {str(r.directory): r.success for r in self.install_results},
            "steps_completed": self.steps_completed,
            "reason": self.reason,
        }


class UpdateOrchestrator:
    """Runs the fetch → checkout → install → restart/reload pipeline.

    One instance serves the whole process, but only one run may be in
    flight at a time; a second ``handle()`` while one is running is
    rejected rather than queued.
    """

    def __init__(
        self,
        driver: RepositoryDriver,
        installer: DependencyInstaller,
        host: HostControl,
        root: Path | None = None,
        auto_update: bool = False,
        hot_files: Sequence[str] = HOT_FILES,
        manifest_name: str = MANIFEST_NAME,
        subproject_pattern: str = SUBPROJECT_GLOB,
        bus: EventBus | None = None,
    ):
        self.driver = driver
        self.installer = installer
        self.host = host
        self.root = Path(root) if root else driver.root
        self.auto_update = auto_update
        self.hot_files = tuple(hot_files)
        self.manifest_name = manifest_name
        self.subproject_pattern = subproject_pattern
        self.bus = bus or event_bus
        self._lock = asyncio.Lock()
        self._state = UpdateState.IDLE

    @property
    def state(self) -> UpdateState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    async def handle(self, branch: str, push: PushPayload) -> UpdateRun:
        """Run an update for a push to ``branch``."""
        if self._lock.locked():
            logger.warning(f"Update already in progress; ignoring push to {branch}")
            run = UpdateRun(branch=branch, state=UpdateState.ABORTED)
            run.reason = "Update already in progress"
            run.completed_at = datetime.now(UTC)
            return run

        async with self._lock:
            run = UpdateRun(branch=branch)
            try:
                await self._run(run, push)
            except NotARepositoryError as e:
                logger.debug(f"Not a git repo; stopping update. ({e.reason})")
                self._abort(run, str(e))
            except Exception as e:
                logger.exception("Update failed with unexpected error")
                self._abort(run, f"Unexpected error: {e}")
            finally:
                run.completed_at = datetime.now(UTC)
                self._state = UpdateState.IDLE

            if run.aborted:
                await self.bus.emit(EventType.UPDATE_ABORTED, run.to_dict())
            return run

    def _enter(self, run: UpdateRun, state: UpdateState) -> None:
        self._state = state
        run.state = state

    def _abort(self, run: UpdateRun, reason: str) -> None:
        run.reason = reason
        self._enter(run, UpdateState.ABORTED)

    async def _run(self, run: UpdateRun, push: PushPayload) -> None:
        logger.info(f"Handling webhook for branch {run.branch}")

        self._enter(run, UpdateState.DECIDING)
        await self.driver.ensure_repository()
        run.changing_branch = run.branch != await self.driver.current_branch()
        update = self.auto_update and (len(push.commits) > 0 or run.changing_branch)
        logger.debug(f"Is changing branch? {run.changing_branch}")
        logger.debug(f"Is updating? {update}")

        if not update:
            logger.debug("Nothing to update; stopping update")
            self._abort(run, "Nothing to update")
            return

        run.decision = classify_changes(
            push.commits,
            run.changing_branch,
            hot_files=self.hot_files,
            manifest_name=self.manifest_name,
        )
        await self.bus.emit(EventType.UPDATE_STARTED, run.to_dict())
        logger.debug(f'Updating to branch "{run.branch}"')

        self._enter(run, UpdateState.FETCHING)
        if not await self.driver.fetch():
            self._abort(run, "git fetch failed")
            return
        run.steps_completed.append("fetch")

        self._enter(run, UpdateState.CHECKING_OUT)
        if not await self.driver.checkout(run.branch, fetch=False):
            self._abort(run, "git checkout failed")
            return
        run.steps_completed.append("checkout")

        self._enter(run, UpdateState.INSTALLING_DEPS)
        if run.decision.must_reinstall_deps:
            run.install_results = await self._install_dependencies()
            run.steps_completed.append("install")
            failed = [str(r.directory) for r in run.install_results if not r.success]
            if failed:
                logger.warning(f"Dependency install failed in: {', '.join(failed)}")

        self._enter(run, UpdateState.FINALIZING)
        await self._finalize(run)

    async def _install_dependencies(self) -> list[InstallResult]:
        """Install in the root and every sub-project, waiting for all of them."""
        root = self.root.resolve()
        subprojects = discover_subprojects(root, self.subproject_pattern)
        directories = [root] + [d for d in subprojects if d != root]
        logger.debug(f"Installing dependencies in {len(directories)} directories")
        return await self.installer.install_all(directories)

    async def _finalize(self, run: UpdateRun) -> None:
        assert run.decision is not None
        if run.decision.must_restart:
            self._enter(run, UpdateState.RESTARTED)
            run.steps_completed.append("shutdown")
            await self.bus.emit(EventType.UPDATE_COMPLETED, run.to_dict())
            await self.host.shutdown(SHUTDOWN_REASON)
        else:
            self._enter(run, UpdateState.RELOADED)
            run.steps_completed.append("reload")
            await self.bus.emit(EventType.UPDATE_COMPLETED, run.to_dict())
            await self.host.reload()
