"""Pytest configuration and fixtures."""

import subprocess
from dataclasses import dataclass
from pathlib import Path

import pytest

from hooksmith.events import CommitRecord, Event, EventBus, PushPayload


def git(*args: str, cwd: Path) -> str:
    """Run git in ``cwd`` and return its stdout."""
    result = subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


def configure_identity(repo: Path) -> None:
    git("config", "user.email", "test@example.com", cwd=repo)
    git("config", "user.name", "Test User", cwd=repo)


def commit_file(repo: Path, name: str, content: str, message: str) -> str:
    """Write a file, commit it and return the new commit hash."""
    path = repo / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    git("add", name, cwd=repo)
    git("commit", "-q", "-m", message, cwd=repo)
    return git("rev-parse", "HEAD", cwd=repo)


@dataclass
class RemoteSetup:
    """A bare origin, a clone used to publish commits, and the working copy."""

    origin: Path
    upstream: Path
    work: Path


@pytest.fixture
def remote_setup(tmp_path: Path) -> RemoteSetup:
    """Create an origin with one commit on master and a clone of it."""
    origin = tmp_path / "origin.git"
    upstream = tmp_path / "upstream"
    work = tmp_path / "work"

    git("init", "-q", "--bare", "-b", "master", str(origin), cwd=tmp_path)
    git("clone", "-q", str(origin), str(upstream), cwd=tmp_path)
    configure_identity(upstream)
    git("symbolic-ref", "HEAD", "refs/heads/master", cwd=upstream)
    commit_file(upstream, "app.py", "print('hello')\n", "Initial commit")
    git("push", "-q", "origin", "master", cwd=upstream)

    git("clone", "-q", str(origin), str(work), cwd=tmp_path)
    configure_identity(work)
    return RemoteSetup(origin=origin, upstream=upstream, work=work)


def make_commit(
    modified: list[str] | None = None,
    added: list[str] | None = None,
    commit_id: str = "0123456789abcdef0123456789abcdef01234567",
    message: str = "Update things",
) -> CommitRecord:
    return CommitRecord(
        id=commit_id,
        message=message,
        author={"name": "Test User", "username": "tester"},
        modified=modified or [],
        added=added or [],
    )


def make_push(
    ref: str = "refs/heads/master",
    commits: list[CommitRecord] | None = None,
    **fields,
) -> PushPayload:
    return PushPayload(ref=ref, commits=commits or [], **fields)


@pytest.fixture
def bus() -> EventBus:
    """A fresh event bus for each test."""
    return EventBus()


@pytest.fixture
def published(bus: EventBus) -> list[Event]:
    """Every event published on ``bus`` during the test."""
    events: list[Event] = []
    bus.add_callback(events.append)
    return events
