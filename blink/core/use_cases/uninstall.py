"""
Uninstall use case — run a recipe's uninstall commands and drop its manifest entry.

The uninstall commands run in the package's build directory if its
extraction is still around, otherwise in the build root. Blink does not
track installed files itself; whatever the recipe's uninstall commands
do is the whole uninstall.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from blink.adapters.base import Adapter
from blink.adapters.shell.command import ShellCommandAdapter
from blink.core.config.loader import Settings
from blink.core.errors import NotInstalledError
from blink.core.models.recipe import Recipe
from blink.core.persistence.lock import LockManager
from blink.core.persistence.manifest_store import ManifestStore
from blink.core.services.build import BuildExecutor
from blink.core.services.extract import extraction_dir_name, resolve_build_dir
from blink.core.services.recipes import RecipeCache
from blink.core.services.sources import archive_name

logger = logging.getLogger(__name__)


@dataclass
class UninstallResult:
    """Outcome of an uninstall."""

    name: str
    work_dir: Path
    commands_run: int
    removed_from_manifest: bool

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "work_dir": str(self.work_dir),
            "commands_run": self.commands_run,
            "removed_from_manifest": self.removed_from_manifest,
        }


def uninstall_work_dir(settings: Settings, recipe: Recipe) -> Path:
    """Where uninstall commands run for ``recipe``."""
    extraction_dir = settings.build_root / extraction_dir_name(Path(archive_name(recipe.source.url)))
    if extraction_dir.is_dir():
        return resolve_build_dir(extraction_dir)
    settings.build_root.mkdir(parents=True, exist_ok=True)
    return settings.build_root


def uninstall_package(
    settings: Settings,
    name: str,
    force: bool = False,
    shell: Adapter | None = None,
) -> UninstallResult:
    """Uninstall ``name``.

    Args:
        settings: Resolved settings.
        name: Package name.
        force: Proceed even if the package is not recorded as installed.
        shell: Adapter for lifecycle commands (default: ``sh``).

    Raises:
        LockError: Another instance is running.
        NotInstalledError: Not recorded and ``force`` is off.
        NetworkError, RecipeError, BuildError, ManifestError: From the
            corresponding stage.
    """
    logger.info("===== UNINSTALL START ===== pkg=%s force=%s", name, force)

    with LockManager(settings.lock_path).hold():
        manifest = ManifestStore(settings.manifest_path)
        if manifest.has(name) is None and not force:
            raise NotInstalledError(f"Package {name} is not installed")

        recipe = RecipeCache(settings).load(name)
        work_dir = uninstall_work_dir(settings, recipe)

        executor = BuildExecutor(shell or ShellCommandAdapter(), timeout=settings.build_timeout)
        executor.uninstall(recipe, work_dir)

        removed = manifest.remove(name)

    logger.info("===== UNINSTALL COMPLETE ===== %s", name)
    return UninstallResult(
        name=name,
        work_dir=work_dir,
        commands_run=len(recipe.build.uninstall),
        removed_from_manifest=removed,
    )
