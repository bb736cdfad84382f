"""Domain models — recipes, the manifest, and the adapter contract."""

from blink.core.models.action import Action, Receipt
from blink.core.models.manifest import InstalledEntry, Manifest
from blink.core.models.recipe import (
    ArchiveType,
    BuildInstructions,
    OptionalDependencyGroup,
    Recipe,
    RecipeSource,
)

__all__ = [
    "Action",
    "ArchiveType",
    "BuildInstructions",
    "InstalledEntry",
    "Manifest",
    "OptionalDependencyGroup",
    "Receipt",
    "Recipe",
    "RecipeSource",
]
