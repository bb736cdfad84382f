"""
Clean use case — empty the recipe, source, and build caches.

The manifest, lock, and repository clones are left alone.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from blink.core.config.loader import Settings
from blink.core.persistence.lock import LockManager

logger = logging.getLogger(__name__)


def clean_cache(settings: Settings) -> list[Path]:
    """Remove and recreate the cache directories.

    Returns:
        The directories that were reset.
    """
    targets = [settings.recipes_dir, settings.sources_dir, settings.build_root]
    with LockManager(settings.lock_path).hold():
        for path in targets:
            if path.exists():
                logger.info("Removing %s", path)
                shutil.rmtree(path)
            path.mkdir(parents=True, exist_ok=True)
    return targets
