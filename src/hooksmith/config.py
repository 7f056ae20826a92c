"""Listener configuration.

Configuration is a JSON file validated into ``ListenerConfig``. Older files
are brought up to date by ``migrate_config`` once, at load time; code that
reads the config never patches it.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, Field, ValidationError

from hooksmith.branches import BranchSpec
from hooksmith.events.repository import RepositoryEventKind

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR: Final = "HOOKSMITH_CONFIG"
STATE_DIR: Final = Path.home() / ".hooksmith"
CONFIG_FILE: Final = STATE_DIR / "config.json"


class ConfigError(Exception):
    """Raised when the config file cannot be read or is invalid."""

    pass


class EventToggles(BaseModel):
    """Which event kinds produce alerts."""

    push: bool = True
    commit_comment: bool = True
    pull_request: bool = True
    issues: bool = True
    issue_comment: bool = True
    gollum: bool = True
    fork: bool = True
    watch: bool = True
    repository: bool = True

    def enabled(self, kind: RepositoryEventKind) -> bool:
        return bool(getattr(self, kind.value))


class ListenerConfig(BaseModel):
    """Configuration for the webhook listener and update pipeline."""

    port: int = 4269
    path: str = "/github/callback"
    secret: str = ""
    # Repository name pushes must come from to trigger an update
    repository: str = "hooksmith"
    branch: BranchSpec = "master"
    auto_update: bool = False
    events: EventToggles = Field(default_factory=EventToggles)
    enabled: bool = True

    # Update pipeline
    project_root: str | None = None
    git_timeout: float = 120.0
    install_timeout: float = 600.0
    install_command: list[str] | None = None

    @property
    def root_path(self) -> Path:
        return Path(self.project_root) if self.project_root else Path.cwd()


def default_config_path() -> Path:
    """Config path from ``$HOOKSMITH_CONFIG``, else ``~/.hooksmith/config.json``."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    return Path(env_path) if env_path else CONFIG_FILE


def migrate_config(raw: dict[str, Any]) -> tuple[dict[str, Any], bool]:
    """Bring a raw config dict up to the current layout.

    Returns:
        Tuple of (migrated config, whether anything changed).
    """
    migrated = dict(raw)
    changed = False

    if "autoUpdate" in migrated:
        value = migrated.pop("autoUpdate")
        migrated.setdefault("auto_update", value)
        changed = True

    events = migrated.get("events")
    if not isinstance(events, dict):
        migrated["events"] = EventToggles().model_dump()
        changed = True
    elif "commit_comment" not in events:
        migrated["events"] = {**events, "commit_comment": True}
        changed = True

    return migrated, changed


def save_config(config: ListenerConfig, path: Path | None = None) -> Path:
    """Write the config as JSON, replacing the file atomically."""
    path = path or default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(".tmp")
    tmp_path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
    tmp_path.replace(path)
    return path


def load_config(path: Path | None = None) -> ListenerConfig:
    """Load, migrate and validate the config file.

    A missing or empty file is replaced with the defaults.

    Raises:
        ConfigError: If the file is not valid JSON or fails validation.
    """
    path = path or default_config_path()

    raw: dict[str, Any] = {}
    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config in {path} must be a JSON object")

    if not raw:
        logger.info(f"No config at {path}. Saving defaults.")
        config = ListenerConfig()
        save_config(config, path)
        return config

    migrated, changed = migrate_config(raw)
    try:
        config = ListenerConfig.model_validate(migrated)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e

    if changed:
        logger.info(f"Migrated config at {path}")
        save_config(config, path)
    return config
