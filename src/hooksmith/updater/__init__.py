"""Self-update pipeline.

Decides what a push requires, then fetches, checks out, reinstalls
dependencies and restarts or reloads the running process.
"""

from hooksmith.updater.classifier import (
    HOT_FILES,
    MANIFEST_NAME,
    UpdateDecision,
    classify_changes,
)
from hooksmith.updater.discovery import SUBPROJECT_GLOB, discover_subprojects
from hooksmith.updater.installer import DependencyInstaller, InstallResult
from hooksmith.updater.orchestrator import UpdateOrchestrator, UpdateRun, UpdateState

__all__ = [
    "HOT_FILES",
    "MANIFEST_NAME",
    "SUBPROJECT_GLOB",
    "DependencyInstaller",
    "InstallResult",
    "UpdateDecision",
    "UpdateOrchestrator",
    "UpdateRun",
    "UpdateState",
    "classify_changes",
    "discover_subprojects",
]
