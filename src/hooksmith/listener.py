"""Webhook listener: routes repository events to alerts and updates."""

import asyncio
import logging

from hooksmith.alerts import log_alert, send_alerts
from hooksmith.branches import should_track
from hooksmith.config import ListenerConfig
from hooksmith.events.bus import EventBus, event_bus
from hooksmith.events.repository import RepositoryEvent, RepositoryEventKind
from hooksmith.git.repository import RepositoryDriver
from hooksmith.host import HostControl, ProcessHost
from hooksmith.updater.installer import DependencyInstaller
from hooksmith.updater.orchestrator import UpdateOrchestrator, UpdateRun

logger = logging.getLogger(__name__)


class WebhookListener:
    """Receives parsed repository events.

    Every enabled event kind produces an alert. Pushes to a tracked branch
    of the configured repository additionally start an update, which runs
    as a background task so the webhook can be answered immediately.
    """

    def __init__(
        self,
        config: ListenerConfig,
        orchestrator: UpdateOrchestrator,
        bus: EventBus | None = None,
    ):
        self.config = config
        self.orchestrator = orchestrator
        self.bus = bus or event_bus
        self._pending: set[asyncio.Task[UpdateRun]] = set()

    def should_send_alert(self, kind: RepositoryEventKind) -> bool:
        return self.config.events.enabled(kind)

    async def dispatch(self, event: RepositoryEvent) -> asyncio.Task[UpdateRun] | None:
        """Handle one event.

        Returns:
            The update task if the event started an update, else None.

        Raises:
            pydantic.ValidationError: If a push payload is malformed.
        """
        if event.kind is RepositoryEventKind.PUSH:
            return await self._on_push(event)

        if self.should_send_alert(event.kind):
            await send_alerts(event, self.bus)
        return None

    async def _on_push(self, event: RepositoryEvent) -> asyncio.Task[UpdateRun] | None:
        push = event.as_push()
        if push.deleted:
            return None

        branch = push.branch
        logger.debug(f"Received webhook: ref => {push.ref}")

        if self.should_send_alert(event.kind):
            logger.debug("Sending alert")
            await send_alerts(event, self.bus)

        if event.repo != self.config.repository:
            logger.debug(f"Push is for {event.repo!r}, not {self.config.repository!r}")
            return None
        if not should_track(branch, self.config.branch):
            logger.debug(f"Branch {branch!r} is not tracked")
            return None

        task = asyncio.create_task(self.orchestrator.handle(branch, push))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def update_in_progress(self) -> bool:
        return self.orchestrator.is_busy

    async def drain(self) -> list[UpdateRun]:
        """Wait for every update task started so far."""
        return list(await asyncio.gather(*self._pending))


def build_listener(
    config: ListenerConfig,
    host: HostControl | None = None,
    bus: EventBus | None = None,
) -> WebhookListener:
    """Wire a listener with the default driver, installer and host.

    Alerts published on the bus are written to the log.
    """
    bus = bus or event_bus
    bus.add_callback(log_alert)
    root = config.root_path
    orchestrator = UpdateOrchestrator(
        driver=RepositoryDriver(root, timeout=config.git_timeout),
        installer=DependencyInstaller(
            command=config.install_command,
            timeout=config.install_timeout,
        ),
        host=host or ProcessHost(packages=["hooksmith"]),
        root=root,
        auto_update=config.auto_update,
        bus=bus,
    )
    return WebhookListener(config, orchestrator, bus=bus)
