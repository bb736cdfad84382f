"""
Install use case — the package install pipeline.

    lock held
      → manifest ensured
      → already-installed check
      → recipe loaded
      → source acquired
      → integrity verified
      → extracted
      → build dir resolved
      → env applied, prepare run, install run
      → manifest updated
    lock released

Any failing step ends the pipeline with its error; the lock is released
either way. Side effects of build commands that already ran are not
rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from blink.adapters.base import Adapter
from blink.adapters.shell.command import ShellCommandAdapter
from blink.core.config.loader import Settings
from blink.core.errors import AlreadyInstalledError, IntegrityError
from blink.core.models.manifest import InstalledEntry
from blink.core.models.recipe import Recipe
from blink.core.persistence.lock import LockManager
from blink.core.persistence.manifest_store import ManifestStore
from blink.core.services.build import BuildExecutor
from blink.core.services.extract import ArchiveExtractor, resolve_build_dir
from blink.core.services.recipes import RecipeCache
from blink.core.services.sources import SourceAcquirer, sha256_of, verify

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Outcome of a successful install."""

    recipe: Recipe
    entry: InstalledEntry
    archive: Path
    build_dir: Path
    reinstalled: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.entry.name,
            "version": self.entry.version,
            "release": self.entry.release,
            "installed_at": self.entry.installed_at,
            "archive": str(self.archive),
            "build_dir": str(self.build_dir),
            "reinstalled": self.reinstalled,
        }


def install_package(
    settings: Settings,
    name: str,
    force: bool = False,
    shell: Adapter | None = None,
) -> InstallResult:
    """Download, verify, extract, build, and record a package.

    Args:
        settings: Resolved settings.
        name: Package name.
        force: Reinstall even if recorded, and re-fetch the recipe,
            re-download the source, and re-extract.
        shell: Adapter for lifecycle commands (default: ``sh``).

    Raises:
        LockError: Another instance is running.
        AlreadyInstalledError: Package is recorded and ``force`` is off.
        NetworkError, RecipeError, IntegrityError, ExtractionError,
        BuildError, ManifestError: From the corresponding stage.
    """
    logger.info("===== INSTALL START ===== pkg=%s force=%s", name, force)

    with LockManager(settings.lock_path).hold():
        manifest = ManifestStore(settings.manifest_path)
        manifest.ensure()

        existing = manifest.has(name)
        if existing is not None and not force:
            raise AlreadyInstalledError(
                f"Package {existing.name} already installed "
                f"(version={existing.version} release={existing.release}). "
                "Use --force to reinstall."
            )

        recipe = RecipeCache(settings).load(name, force=force)

        acquirer = SourceAcquirer(settings)
        archive = acquirer.acquire(recipe.source.url, force=force)

        if not verify(recipe.source.expected_sha256, archive):
            raise IntegrityError(archive, recipe.source.expected_sha256, sha256_of(archive))
        logger.info("Source %s verified", archive.name)

        extraction_dir = ArchiveExtractor().extract(
            archive,
            recipe.source.archive_type,
            settings.build_root,
            force=force,
        )
        build_dir = resolve_build_dir(extraction_dir)
        logger.info("Build dir = %s", build_dir)

        executor = BuildExecutor(shell or ShellCommandAdapter(), timeout=settings.build_timeout)
        executor.run(recipe, build_dir)

        entry = InstalledEntry.from_recipe(recipe)
        if existing is not None:
            manifest.replace(entry)
        else:
            manifest.add(entry)

    logger.info("===== INSTALL COMPLETE ===== %s %s-%d", recipe.name, recipe.version, recipe.release)
    return InstallResult(
        recipe=recipe,
        entry=entry,
        archive=archive,
        build_dir=build_dir,
        reinstalled=existing is not None,
    )
