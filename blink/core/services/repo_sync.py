"""
Repository synchronizer — keeps local clones of the recipe repositories current.

For each configured repository, in config order:
    - not cloned yet          → git clone -b <ref> <url> <repo_cache>/<name>
    - cloned, force           → git fetch --all, git reset --hard origin/<ref>
    - cloned                  → git pull

The first failing git command aborts the whole sync; repositories after
it are not touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from blink.adapters.base import Adapter, ExecutionContext
from blink.core.config.loader import Settings
from blink.core.config.repositories import RepoConfig
from blink.core.errors import SyncError
from blink.core.models.action import Action

logger = logging.getLogger(__name__)


@dataclass
class SyncOutcome:
    """What was done to one repository."""

    name: str
    path: Path
    action: str      # cloned, reset, pulled

    def to_dict(self) -> dict:
        return {"name": self.name, "path": str(self.path), "action": self.action}


class RepositorySynchronizer:
    """Clones, pulls, or hard-resets every configured repository."""

    def __init__(self, settings: Settings, repos: dict[str, RepoConfig], git: Adapter):
        self._settings = settings
        self._repos = repos
        self._git = git

    def local_path(self, repo: RepoConfig) -> Path:
        return self._settings.repo_cache / repo.name

    def sync(self, force: bool = False) -> list[SyncOutcome]:
        """Bring every repository up to date.

        Raises:
            SyncError: On the first git failure.
        """
        self._settings.repo_cache.mkdir(parents=True, exist_ok=True)
        outcomes = []

        for repo in self._repos.values():
            path = self.local_path(repo)
            if not path.exists():
                logger.info("Cloning %s (%s@%s)", repo.name, repo.url, repo.ref)
                self._step(repo, "clone", url=repo.url, ref=repo.ref, path=str(path))
                outcomes.append(SyncOutcome(repo.name, path, "cloned"))
            elif force:
                logger.info("Resetting %s to origin/%s", repo.name, repo.ref)
                self._step(repo, "fetch", path=str(path))
                self._step(repo, "reset", ref=repo.ref, path=str(path))
                outcomes.append(SyncOutcome(repo.name, path, "reset"))
            else:
                logger.info("Pulling %s", repo.name)
                self._step(repo, "pull", path=str(path))
                outcomes.append(SyncOutcome(repo.name, path, "pulled"))

        return outcomes

    def _step(self, repo: RepoConfig, operation: str, **params: str) -> None:
        context = ExecutionContext(
            action=Action(
                id=f"sync:{repo.name}:{operation}",
                adapter=self._git.name,
                params={"operation": operation, **params},
            ),
            working_dir=str(self._settings.repo_cache),
        )
        receipt = self._git.run(context)
        if receipt.failed:
            raise SyncError(
                f"git {operation} failed for repository '{repo.name}' ({repo.url}): "
                f"{receipt.error}"
            )
