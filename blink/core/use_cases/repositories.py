"""
Repository use cases — ``sync`` and ``update``.

``sync`` brings the configured recipe repositories up to date.
``update`` does the same, then refreshes the cached recipe of every
installed package and reports the ones whose recipe moved past the
installed version or release. It never installs anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from blink.adapters.base import Adapter
from blink.adapters.vcs.git import GitAdapter
from blink.core.config.loader import Settings
from blink.core.config.repositories import load_repositories
from blink.core.models.manifest import InstalledEntry
from blink.core.persistence.lock import LockManager
from blink.core.persistence.manifest_store import ManifestStore
from blink.core.services.recipes import RecipeCache
from blink.core.services.repo_sync import RepositorySynchronizer, SyncOutcome

logger = logging.getLogger(__name__)


@dataclass
class UpdateCandidate:
    """An installed package whose recipe differs from what is installed."""

    name: str
    installed_version: str
    installed_release: int
    available_version: str
    available_release: int

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "installed": f"{self.installed_version}-{self.installed_release}",
            "available": f"{self.available_version}-{self.available_release}",
        }


def _sync(settings: Settings, force: bool, git: Adapter | None) -> list[SyncOutcome]:
    repos = load_repositories(settings)
    synchronizer = RepositorySynchronizer(settings, repos, git or GitAdapter())
    return synchronizer.sync(force=force)


def sync_repositories(
    settings: Settings,
    force: bool = False,
    git: Adapter | None = None,
) -> list[SyncOutcome]:
    """Clone, pull, or hard-reset every configured repository.

    Raises:
        LockError, ConfigError, SyncError
    """
    with LockManager(settings.lock_path).hold():
        return _sync(settings, force, git)


def check_updates(
    settings: Settings,
    force: bool = False,
    git: Adapter | None = None,
) -> list[UpdateCandidate]:
    """Sync repositories, refresh installed recipes, and list what changed.

    Raises:
        LockError, ConfigError, SyncError, NetworkError, RecipeError,
        ManifestError
    """
    with LockManager(settings.lock_path).hold():
        _sync(settings, force, git)

        recipes = RecipeCache(settings)
        candidates = []
        for entry in ManifestStore(settings.manifest_path).load().installed:
            recipe = recipes.load(entry.name, force=True)
            if _differs(entry, recipe.version, recipe.release):
                candidates.append(
                    UpdateCandidate(
                        name=entry.name,
                        installed_version=entry.version,
                        installed_release=entry.release,
                        available_version=recipe.version,
                        available_release=recipe.release,
                    )
                )

    logger.info("%d package(s) have updates", len(candidates))
    return candidates


def _differs(entry: InstalledEntry, version: str, release: int) -> bool:
    return entry.version != version or entry.release != release
