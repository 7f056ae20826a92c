"""Human-readable alerts for repository events.

Each event kind has exactly one formatter in ``_FORMATTERS``; a kind
without one fails at import time.
"""

import logging
from collections.abc import Callable
from typing import Any

from hooksmith.events.bus import EventBus
from hooksmith.events.repository import RepositoryEvent, RepositoryEventKind, mapping_at
from hooksmith.events.types import Event, EventType

logger = logging.getLogger(__name__)

PREFIX = "[GitHub]"
MAX_TEXT_LENGTH = 80
MAX_COMMITS_SHOWN = 3


def truncate(text: str, limit: int = MAX_TEXT_LENGTH) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut with "..."."""
    if len(text) >= limit:
        return text[:limit] + "..."
    return text


def _login(obj: dict[str, Any]) -> str:
    return str(obj.get("login", "someone"))


def _header(event: RepositoryEvent) -> str:
    return f"{PREFIX} [{event.repo}]"


def _format_push(event: RepositoryEvent) -> list[str]:
    push = event.as_push()
    count = len(push.commits)
    noun = "commit" if count == 1 else "commits"
    forced = "force " if push.forced and not push.created else ""
    new = "new " if push.created else ""
    ref_type = "tag" if push.is_tag else "branch"

    lines = [
        f"{_header(event)} {count} {noun} {forced}pushed to {new}{ref_type} "
        f"{push.branch} by {push.pusher.name}. ({push.compare})"
    ]
    for commit in list(reversed(push.commits))[:MAX_COMMITS_SHOWN]:
        author = commit.author.username or commit.author.name
        lines.append(f"[{commit.short_id}] {author}: {commit.summary}")
    return ["\n".join(lines)]


def _format_pull_request(event: RepositoryEvent) -> list[str]:
    data = event.payload
    pr = mapping_at(data, "pull_request")
    action = data.get("action", "")
    if action == "closed" and pr.get("merged"):
        action = "merged"
    title = truncate(str(pr.get("title", "")))
    return [f"{_header(event)} Pull Request {data.get('number')} {action}. Title: {title}"]


def _format_issues(event: RepositoryEvent) -> list[str]:
    data = event.payload
    issue = mapping_at(data, "issue")
    action = data.get("action", "")
    if action in ("assigned", "unassigned"):
        direction = "from" if action == "unassigned" else "to"
        action = f"{action} {direction} {_login(mapping_at(data, 'assignee'))}"
    elif action in ("labeled", "unlabeled"):
        action = f"{action} {mapping_at(data, 'label').get('name', '')}"
    title = truncate(str(issue.get("title", "")))
    return [f"{_header(event)} Issue {issue.get('number')} {action}. Title: {title}"]


def _format_issue_comment(event: RepositoryEvent) -> list[str]:
    data = event.payload
    comment = mapping_at(data, "comment")
    issue = mapping_at(data, "issue")
    body = truncate(str(comment.get("body", "")))
    return [
        f"{_header(event)} New comment on issue {issue.get('number')} by "
        f"{_login(mapping_at(comment, 'user'))}. {body} ({comment.get('html_url', '')})"
    ]


def _format_gollum(event: RepositoryEvent) -> list[str]:
    return [
        f"{_header(event)} Wiki Page {page.get('page_name', '')} "
        f"{page.get('action', '')}. ({page.get('html_url', '')})"
        for page in event.payload.get("pages") or []
        if isinstance(page, dict)
    ]


def _format_fork(event: RepositoryEvent) -> list[str]:
    data = event.payload
    forkee = mapping_at(data, "forkee")
    return [
        f"{_header(event)} New Fork! {_login(mapping_at(data, 'sender'))} forked the repo! "
        f"({forkee.get('html_url', '')})"
    ]


def _format_watch(event: RepositoryEvent) -> list[str]:
    sender = _login(mapping_at(event.payload, "sender"))
    return [f"{_header(event)} New Star! {sender} starred the repo!"]


def _format_repository(event: RepositoryEvent) -> list[str]:
    data = event.payload
    repository = mapping_at(data, "repository")
    owner = _login(mapping_at(data, "organization") or mapping_at(repository, "owner"))
    return [
        f"{PREFIX} [{owner} Organization] Repository {repository.get('name', '')} "
        f"{data.get('action', '')} by {_login(mapping_at(data, 'sender'))}. "
        f"({repository.get('html_url', '')})"
    ]


def _format_commit_comment(event: RepositoryEvent) -> list[str]:
    comment = mapping_at(event.payload, "comment")
    return [
        f"{_header(event)} {_login(mapping_at(comment, 'user'))} left a comment. "
        f"{comment.get('html_url', '')}"
    ]


_FORMATTERS: dict[RepositoryEventKind, Callable[[RepositoryEvent], list[str]]] = {
    RepositoryEventKind.PUSH: _format_push,
    RepositoryEventKind.COMMIT_COMMENT: _format_commit_comment,
    RepositoryEventKind.PULL_REQUEST: _format_pull_request,
    RepositoryEventKind.ISSUES: _format_issues,
    RepositoryEventKind.ISSUE_COMMENT: _format_issue_comment,
    RepositoryEventKind.GOLLUM: _format_gollum,
    RepositoryEventKind.FORK: _format_fork,
    RepositoryEventKind.WATCH: _format_watch,
    RepositoryEventKind.REPOSITORY: _format_repository,
}

_missing = set(RepositoryEventKind) - set(_FORMATTERS)
if _missing:
    raise RuntimeError(f"No alert formatter for: {sorted(k.value for k in _missing)}")


def format_alert(event: RepositoryEvent) -> list[str]:
    """Format an event as a list of alert messages."""
    return _FORMATTERS[event.kind](event)


async def send_alerts(event: RepositoryEvent, bus: EventBus) -> list[str]:
    """Format ``event`` and publish each message on the bus."""
    messages = format_alert(event)
    for message in messages:
        await bus.emit(EventType.ALERT, {"kind": event.kind.value, "repo": event.repo, "text": message})
    logger.debug(f"Sent {len(messages)} alert(s) for {event.kind.value}")
    return messages


def log_alert(event: Event) -> None:
    """Bus callback that writes each alert to the log."""
    if event.type is EventType.ALERT:
        logger.info(event.data.get("text", ""))
