"""Repository webhook event models.

Every event kind the listener understands is a member of
``RepositoryEventKind``. Only push events carry a typed payload, since they
are the only ones that can drive an update.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RepositoryEventKind(str, Enum):
    """Webhook event kinds, named as in the ``X-GitHub-Event`` header."""

    PUSH = "push"
    COMMIT_COMMENT = "commit_comment"
    PULL_REQUEST = "pull_request"
    ISSUES = "issues"
    ISSUE_COMMENT = "issue_comment"
    GOLLUM = "gollum"
    FORK = "fork"
    WATCH = "watch"
    REPOSITORY = "repository"


class CommitAuthor(BaseModel):
    """Author of a pushed commit."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    email: str | None = None
    username: str | None = None


class CommitRecord(BaseModel):
    """A single commit from a push payload."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    message: str = ""
    author: CommitAuthor = Field(default_factory=CommitAuthor)
    modified: list[str] = Field(default_factory=list)
    # Files created by the commit
    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)

    @property
    def short_id(self) -> str:
        return self.id[:7]

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]


class Pusher(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    email: str | None = None


class PushPayload(BaseModel):
    """The fields of a push payload used for alerts and updates."""

    model_config = ConfigDict(extra="ignore")

    ref: str
    deleted: bool = False
    created: bool = False
    forced: bool = False
    compare: str = ""
    pusher: Pusher = Field(default_factory=Pusher)
    commits: list[CommitRecord] = Field(default_factory=list)

    @property
    def is_tag(self) -> bool:
        return self.ref.startswith("refs/tags/")

    @property
    def branch(self) -> str:
        return branch_from_ref(self.ref)


class RepositoryEvent(BaseModel):
    """A webhook delivery, tagged with its kind."""

    kind: RepositoryEventKind
    repo: str
    ref: str = ""
    payload: dict[str, Any] = Field(default_factory=dict)

    def as_push(self) -> PushPayload:
        """Parse the payload as a push.

        Raises:
            ValueError: If this is not a push event.
        """
        if self.kind is not RepositoryEventKind.PUSH:
            raise ValueError(f"Not a push event: {self.kind.value}")
        return PushPayload.model_validate(self.payload)


def branch_from_ref(ref: str) -> str:
    """Strip the ``refs/<type>/`` prefix from a ref.

    ``refs/heads/feature/x`` becomes ``feature/x``. A ref without the prefix
    is returned unchanged.
    """
    return ref[ref.find("/", 5) + 1 :]


def mapping_at(data: dict[str, Any], key: str) -> dict[str, Any]:
    """Return ``data[key]`` if it is a JSON object, else an empty dict."""
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def parse_event(event_name: str, payload: dict[str, Any]) -> RepositoryEvent | None:
    """Build a ``RepositoryEvent`` from a webhook header and JSON body.

    Returns None for event kinds the listener does not handle.
    """
    try:
        kind = RepositoryEventKind(event_name)
    except ValueError:
        return None

    repository = mapping_at(payload, "repository")
    return RepositoryEvent(
        kind=kind,
        repo=str(repository.get("name", "")),
        ref=str(payload.get("ref") or ""),
        payload=payload,
    )
