"""Dependency installation for the root project and its sub-projects."""

import asyncio
import contextlib
import logging
import sys
import time
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_INSTALL_COMMAND = [sys.executable, "-m", "pip", "install", "--quiet", "-e", "."]
DEFAULT_INSTALL_TIMEOUT = 600.0


@dataclass
class InstallResult:
    """Outcome of one install run."""

    directory: Path
    success: bool
    exit_code: int | None = None
    output: str = ""
    error: str | None = None
    duration_seconds: float = 0.0


class DependencyInstaller:
    """Runs the install command in a given directory.

    Each run receives its directory as the subprocess ``cwd``, so any number
    of runs can be in flight at once.
    """

    def __init__(
        self,
        command: list[str] | None = None,
        timeout: float = DEFAULT_INSTALL_TIMEOUT,
    ):
        self.command = command or list(DEFAULT_INSTALL_COMMAND)
        self.timeout = timeout

    async def install_in(self, directory: Path) -> InstallResult:
        """Install dependencies in ``directory``.

        Never raises; failures are logged and reported in the result.
        """
        directory = Path(directory)
        start = time.monotonic()
        logger.info(f"Installing dependencies in {directory}")

        process = None
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                cwd=directory,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except TimeoutError:
            logger.warning(f"InstallFailed: timed out after {self.timeout}s in {directory}")
            return InstallResult(
                directory=directory,
                success=False,
                error=f"Timeout after {self.timeout} seconds",
                duration_seconds=round(time.monotonic() - start, 2),
            )
        except Exception as e:
            logger.warning(f"InstallFailed: could not run install in {directory}: {e}")
            return InstallResult(
                directory=directory,
                success=False,
                error=str(e),
                duration_seconds=round(time.monotonic() - start, 2),
            )
        finally:
            if process is not None and process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

        output = stdout.decode(errors="replace") if stdout else ""
        result = InstallResult(
            directory=directory,
            success=process.returncode == 0,
            exit_code=process.returncode,
            output=output,
            duration_seconds=round(time.monotonic() - start, 2),
        )
        if result.success:
            logger.info(f"Dependencies installed in {directory}")
        else:
            result.error = f"Install command exited with {process.returncode}"
            logger.warning(
                "InstallFailed: %s (rc=%s): %s", directory, process.returncode, output[-500:]
            )
        return result

    async def install_all(self, directories: Iterable[Path]) -> list[InstallResult]:
        """Install in every directory concurrently and wait for all of them."""
        return list(await asyncio.gather(*(self.install_in(d) for d in directories)))
