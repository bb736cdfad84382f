"""
Recipe use cases — download a recipe (``get``) and show one (``info``).
"""

from __future__ import annotations

import logging
from pathlib import Path

from blink.core.config.loader import Settings
from blink.core.models.recipe import Recipe
from blink.core.persistence.lock import LockManager
from blink.core.services.recipes import RecipeCache

logger = logging.getLogger(__name__)


def get_recipe(settings: Settings, name: str, force: bool = False) -> Path:
    """Download the recipe for ``name`` into the cache, under the lock.

    A cached copy is kept unless ``force`` is set.

    Returns:
        Path of the cached recipe document.
    """
    with LockManager(settings.lock_path).hold():
        cache = RecipeCache(settings)
        path = cache.recipe_path(name)
        if path.is_file() and not force:
            logger.warning("Recipe %s already cached at %s. Use --force to re-download.", name, path)
            return path
        return cache.fetch(name)


def show_recipe(settings: Settings, name: str, force: bool = False) -> Recipe:
    """Load (fetching if needed) and return the recipe for ``name``.

    Read-only as far as installed state goes, so the lock is not taken.
    """
    return RecipeCache(settings).load(name, force=force)
