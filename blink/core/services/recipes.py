"""
Recipe cache — fetch recipe documents from the index and decode them.

Recipes are cached as ``<root>/recipes/<name>.<ext>``. A cached copy is
used as-is until it is forced out with ``--force`` or the cache is
cleaned.
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path

from pydantic import ValidationError

from blink.core.config.loader import Settings
from blink.core.errors import RecipeError
from blink.core.models.recipe import Recipe
from blink.core.services.download import download

logger = logging.getLogger(__name__)


class RecipeCache:
    """On-disk recipe cache backed by the remote recipe index."""

    def __init__(self, settings: Settings):
        self._settings = settings

    @property
    def extension(self) -> str:
        return self._settings.recipe_format

    def recipe_url(self, name: str) -> str:
        return f"{self._settings.base_url}{name}.{self.extension}"

    def recipe_path(self, name: str) -> Path:
        return self._settings.recipes_dir / f"{name}.{self.extension}"

    def fetch(self, name: str) -> Path:
        """Download the recipe document for ``name`` into the cache.

        The document is not parsed here.

        Raises:
            NetworkError: On transport failure or non-success status.
        """
        logger.info("Getting recipe for %s", name)
        path = download(self.recipe_url(name), self.recipe_path(name), timeout=self._settings.http_timeout)
        logger.info("Recipe downloaded to %s", path)
        return path

    def load(self, name: str, force: bool = False) -> Recipe:
        """Return the decoded recipe for ``name``, fetching it if needed.

        Args:
            name: Package name.
            force: Discard any cached copy and fetch again.

        Raises:
            NetworkError: If the recipe has to be fetched and that fails.
            RecipeError: If the document cannot be decoded or validated,
                or names a different package.
        """
        logger.info("Fetching package %r", name)
        path = self.recipe_path(name)

        if force:
            try:
                path.unlink()
                logger.info("Force flag set, removed cached recipe at %s", path)
            except FileNotFoundError:
                pass

        if not path.is_file():
            logger.info("Recipe for %s not cached, downloading", name)
            self.fetch(name)

        recipe = self.decode(path)
        if recipe.name != name:
            raise RecipeError(f"Recipe {path} declares package {recipe.name!r}, expected {name!r}")
        return recipe

    def decode(self, path: Path) -> Recipe:
        """Decode and validate a recipe document.

        Raises:
            RecipeError: On unreadable, malformed, or invalid content.
        """
        try:
            if path.suffix == ".toml":
                with path.open("rb") as f:
                    data = tomllib.load(f)
            else:
                with path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
        except OSError as e:
            raise RecipeError(f"Cannot open recipe {path}: {e}") from e
        except (json.JSONDecodeError, tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            raise RecipeError(f"Cannot decode recipe {path}: {e}") from e

        if not isinstance(data, dict):
            raise RecipeError(f"Recipe {path} is not a mapping")

        try:
            recipe = Recipe.model_validate(data)
        except ValidationError as e:
            raise RecipeError(f"Invalid recipe {path}: {e}") from e

        logger.debug("Decoded recipe %s %s-%d", recipe.name, recipe.version, recipe.release)
        return recipe
