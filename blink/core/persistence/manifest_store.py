"""
Manifest store — atomic read/modify/write for the installed-package record.

The manifest is stored as JSON in ``etc/manifest.json``. Writes are
atomic (write to temp file in the same directory, fsync, then rename)
so a reader never sees a partial document and a crash mid-write leaves
the previous manifest intact.

There is no long-lived in-memory manifest: every mutation is a full
load-modify-save round trip.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from blink.core.errors import ManifestError
from blink.core.models.manifest import InstalledEntry, Manifest

logger = logging.getLogger(__name__)


class ManifestStore:
    """Sole owner of the manifest document."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def ensure(self) -> None:
        """Create an empty manifest if none exists. Idempotent."""
        logger.info("Ensuring manifest exists at %s", self._path)
        if self._path.is_file():
            return
        self.save(Manifest())

    def load(self) -> Manifest:
        """Load the manifest.

        Returns:
            The manifest. A missing file yields an empty manifest.

        Raises:
            ManifestError: If the file cannot be read or decoded.
        """
        if not self._path.is_file():
            return Manifest()

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise ManifestError(f"Cannot read manifest {self._path}: {e}") from e

        try:
            manifest = Manifest.model_validate(json.loads(raw))
        except json.JSONDecodeError as e:
            raise ManifestError(f"Corrupt manifest {self._path}: {e}") from e
        except ValidationError as e:
            raise ManifestError(f"Invalid manifest {self._path}: {e}") from e

        logger.debug("Loaded manifest from %s (%d packages)", self._path, len(manifest.installed))
        return manifest

    def save(self, manifest: Manifest) -> None:
        """Write the manifest atomically.

        Raises:
            ManifestError: If the directory, temp file, or rename fails.
        """
        logger.debug("Saving manifest (%d packages)", len(manifest.installed))
        content = json.dumps(manifest.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=".manifest_",
                suffix=".tmp",
            )
        except OSError as e:
            raise ManifestError(f"Cannot prepare manifest write in {self._path.parent}: {e}") from e

        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self._path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise ManifestError(f"Failed to save manifest to {self._path}: {e}") from e

    def has(self, name: str) -> InstalledEntry | None:
        """Return the entry for ``name`` if installed."""
        return self.load().get(name)

    def add(self, entry: InstalledEntry) -> bool:
        """Append an entry unless the name is already recorded.

        Returns:
            True if the entry was added, False if it was already present.
        """
        logger.info("Adding %s to manifest", entry.name)
        manifest = self.load()
        if manifest.get(entry.name) is not None:
            logger.warning("%s already recorded in manifest", entry.name)
            return False

        manifest.installed.append(entry)
        self.save(manifest)
        return True

    def remove(self, name: str) -> bool:
        """Drop the entry for ``name``.

        Returns:
            True if an entry was removed, False if none matched.
        """
        logger.info("Removing %s from manifest", name)
        manifest = self.load()
        remaining = [e for e in manifest.installed if e.name != name]
        if len(remaining) == len(manifest.installed):
            logger.warning("%s not found in manifest", name)
            return False

        manifest.installed = remaining
        self.save(manifest)
        return True

    def replace(self, entry: InstalledEntry) -> None:
        """Record ``entry``, dropping any entry with the same name, in one save."""
        logger.info("Recording %s %s-%d in manifest", entry.name, entry.version, entry.release)
        manifest = self.load()
        manifest.installed = [e for e in manifest.installed if e.name != entry.name]
        manifest.installed.append(entry)
        self.save(manifest)
