"""Tests for the webhook listener."""

import logging
from unittest.mock import AsyncMock, Mock

import pytest

from hooksmith.alerts import log_alert
from hooksmith.config import EventToggles, ListenerConfig
from hooksmith.events import Event, EventBus, EventType, RepositoryEvent, RepositoryEventKind
from hooksmith.listener import WebhookListener, build_listener
from hooksmith.updater import UpdateOrchestrator, UpdateRun, UpdateState


def push_event(
    ref: str = "refs/heads/master", repo: str = "hooksmith", **fields
) -> RepositoryEvent:
    payload = {
        "ref": ref,
        "compare": "https://example.com/compare",
        "pusher": {"name": "tester"},
        "commits": [{"id": "abcdef1234567", "message": "Change", "modified": ["app.py"]}],
        "repository": {"name": repo},
        **fields,
    }
    return RepositoryEvent(kind=RepositoryEventKind.PUSH, repo=repo, ref=ref, payload=payload)


@pytest.fixture
def orchestrator() -> Mock:
    orchestrator = Mock(spec=UpdateOrchestrator)
    orchestrator.handle = AsyncMock(
        side_effect=lambda branch, push: UpdateRun(branch=branch, state=UpdateState.RELOADED)
    )
    orchestrator.is_busy = False
    return orchestrator


def make_listener(orchestrator: Mock, bus: EventBus, **config) -> WebhookListener:
    return WebhookListener(ListenerConfig(**config), orchestrator, bus=bus)


async def test_tracked_push_starts_update(orchestrator: Mock, bus: EventBus):
    listener = make_listener(orchestrator, bus)

    task = await listener.dispatch(push_event())

    assert task is not None
    run = await task
    assert run.branch == "master"
    branch, push = orchestrator.handle.await_args.args
    assert branch == "master"
    assert push.commits[0].modified == ["app.py"]


async def test_branch_list_spec(orchestrator: Mock, bus: EventBus):
    listener = make_listener(orchestrator, bus, branch=["master", "release/*"])

    task = await listener.dispatch(push_event(ref="refs/heads/release/2.0"))

    assert task is not None
    await listener.drain()
    assert orchestrator.handle.await_args.args[0] == "release/2.0"


async def test_untracked_branch_only_alerts(
    orchestrator: Mock, bus: EventBus, published: list[Event]
):
    listener = make_listener(orchestrator, bus)

    task = await listener.dispatch(push_event(ref="refs/heads/feature/x"))

    assert task is None
    orchestrator.handle.assert_not_awaited()
    assert [event.type for event in published] == [EventType.ALERT]


async def test_other_repository_does_not_update(orchestrator: Mock, bus: EventBus):
    listener = make_listener(orchestrator, bus)

    assert await listener.dispatch(push_event(repo="someone-else")) is None
    orchestrator.handle.assert_not_awaited()


async def test_deleted_branch_is_ignored(
    orchestrator: Mock, bus: EventBus, published: list[Event]
):
    listener = make_listener(orchestrator, bus)

    assert await listener.dispatch(push_event(deleted=True)) is None
    orchestrator.handle.assert_not_awaited()
    assert published == []


async def test_push_alert_can_be_disabled(
    orchestrator: Mock, bus: EventBus, published: list[Event]
):
    listener = make_listener(orchestrator, bus, events=EventToggles(push=False))

    task = await listener.dispatch(push_event())

    assert task is not None
    await task
    assert published == []


async def test_non_push_events_never_update(
    orchestrator: Mock, bus: EventBus, published: list[Event]
):
    listener = make_listener(orchestrator, bus)
    event = RepositoryEvent(
        kind=RepositoryEventKind.WATCH,
        repo="hooksmith",
        payload={"sender": {"login": "fan"}},
    )

    assert await listener.dispatch(event) is None

    orchestrator.handle.assert_not_awaited()
    assert "fan starred the repo!" in published[0].data["text"]


async def test_disabled_event_kind_is_silent(
    orchestrator: Mock, bus: EventBus, published: list[Event]
):
    listener = make_listener(orchestrator, bus, events=EventToggles(watch=False))
    event = RepositoryEvent(kind=RepositoryEventKind.WATCH, repo="hooksmith", payload={})

    await listener.dispatch(event)

    assert published == []


def test_build_listener_wires_config(tmp_path):
    config = ListenerConfig(
        project_root=str(tmp_path), auto_update=True, git_timeout=5, install_timeout=7
    )

    listener = build_listener(config, host=Mock(), bus=EventBus())

    assert listener.orchestrator.auto_update is True
    assert listener.orchestrator.root == tmp_path
    assert listener.orchestrator.driver.timeout == 5
    assert listener.orchestrator.installer.timeout == 7
    assert listener.update_in_progress is False


async def test_built_listener_logs_alerts(tmp_path, bus: EventBus, caplog):
    listener = build_listener(ListenerConfig(project_root=str(tmp_path)), host=Mock(), bus=bus)
    event = RepositoryEvent(
        kind=RepositoryEventKind.FORK,
        repo="hooksmith",
        payload={"forkee": {"html_url": "https://fork"}, "sender": {"login": "sam"}},
    )

    with caplog.at_level(logging.INFO, logger="hooksmith.alerts"):
        await listener.dispatch(event)

    alerts = [r.getMessage() for r in caplog.records if r.name == "hooksmith.alerts"]
    assert len(alerts) == 1
    assert alerts[0].startswith("[GitHub]")
    assert "sam" in alerts[0]


def test_build_listener_registers_log_relay_once(tmp_path, bus: EventBus):
    config = ListenerConfig(project_root=str(tmp_path))

    build_listener(config, host=Mock(), bus=bus)
    build_listener(config, host=Mock(), bus=bus)

    assert bus._callbacks == [log_alert]
