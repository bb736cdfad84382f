"""
Manifest models — the record of installed packages.

Serialized to ``etc/manifest.json`` as ``{"installed": [...]}``.
Invariant: at most one entry per package name. Order is preserved so
output is deterministic, but carries no meaning.
"""

from __future__ import annotations

import time

from pydantic import BaseModel, Field


def _now_unix() -> int:
    return int(time.time())


class InstalledEntry(BaseModel):
    """One installed package."""

    name: str
    version: str
    release: int = 0
    installed_at: int = Field(default_factory=_now_unix)

    @classmethod
    def from_recipe(cls, recipe) -> InstalledEntry:
        """Build an entry for a freshly installed recipe."""
        return cls(name=recipe.name, version=recipe.version, release=recipe.release)


class Manifest(BaseModel):
    """Ordered collection of installed entries."""

    installed: list[InstalledEntry] = Field(default_factory=list)

    def get(self, name: str) -> InstalledEntry | None:
        """Linear scan for an entry by package name."""
        for entry in self.installed:
            if entry.name == name:
                return entry
        return None

    def names(self) -> list[str]:
        return [entry.name for entry in self.installed]
