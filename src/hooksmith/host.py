"""Host control: the terminal actions of an update.

A restart is a full process shutdown; an external supervisor (systemd,
docker, a shell loop) is expected to relaunch the process with the new
code. A reload re-imports modules in place and lets registered components
reinitialize themselves.
"""

import asyncio
import importlib
import logging
import os
import signal
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class HostControl(ABC):
    """What the update pipeline may ask of the running process."""

    @abstractmethod
    async def shutdown(self, reason: str) -> None:
        """Terminate the process so the supervisor relaunches it."""

    @abstractmethod
    async def reload(self) -> None:
        """Reinitialize in-process components without terminating."""


class ProcessHost(HostControl):
    """Default host for a standalone hooksmith process.

    Args:
        packages: Import prefixes whose loaded modules are reloaded on
            ``reload()``.
        shutdown_signal: Signal sent to the current process on shutdown.
    """

    def __init__(
        self,
        packages: list[str] | None = None,
        shutdown_signal: int = signal.SIGTERM,
    ):
        self.packages = packages or []
        self.shutdown_signal = shutdown_signal
        self._reload_callbacks: list[Callable[[], Any]] = []

    def add_reload_callback(self, callback: Callable[[], Any]) -> None:
        """Register a callback run after modules have been reloaded."""
        self._reload_callbacks.append(callback)

    async def shutdown(self, reason: str) -> None:
        logger.warning(f"Shutting down: {reason}")
        os.kill(os.getpid(), self.shutdown_signal)

    def _modules_to_reload(self) -> list[str]:
        names = [
            name
            for name in sys.modules
            if any(name == pkg or name.startswith(f"{pkg}.") for pkg in self.packages)
        ]
        # Submodules before their packages so packages see fresh attributes
        return sorted(names, key=lambda n: n.count("."), reverse=True)

    def reload_module(self, module_name: str) -> bool:
        """Reload a single already-imported module.

        Returns:
            True if reload succeeded or the module was not loaded.
        """
        module = sys.modules.get(module_name)
        if module is None:
            logger.debug(f"Module {module_name} not loaded, skipping reload")
            return True

        try:
            importlib.reload(module)
            logger.debug(f"Reloaded module: {module_name}")
            return True
        except Exception as e:
            logger.error(f"Failed to reload module {module_name}: {e}")
            return False

    async def reload(self) -> None:
        modules = self._modules_to_reload()
        failed = [name for name in modules if not self.reload_module(name)]
        if failed:
            logger.error(f"Failed to reload modules: {failed}")
        logger.info(f"Reloaded {len(modules) - len(failed)} modules")

        for callback in self._reload_callbacks:
            try:
                result = callback()
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"Reload callback error: {e}")
