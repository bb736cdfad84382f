"""
Source acquisition and integrity checking.

Source archives are downloaded to ``<root>/sources/<basename(url)>`` and
reused until forced. Before an archive is extracted its SHA-256 must
match the digest declared by the recipe.
"""

from __future__ import annotations

import hashlib
import logging
import posixpath
import urllib.parse
from pathlib import Path

from blink.core.config.loader import Settings
from blink.core.errors import RecipeError
from blink.core.services.download import download

logger = logging.getLogger(__name__)


def archive_name(url: str) -> str:
    """Base name of the URL path, ignoring query string and fragment."""
    path = urllib.parse.urlsplit(url).path
    name = posixpath.basename(path.rstrip("/"))
    if not name:
        raise RecipeError(f"Cannot derive an archive file name from source URL: {url}")
    return name


def sha256_of(path: Path) -> str:
    """Stream a file through SHA-256 and return the hex digest."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def verify(expected_hex: str, path: Path) -> bool:
    """Whether ``path`` hashes to ``expected_hex`` (case-insensitive)."""
    return sha256_of(path).lower() == expected_hex.strip().lower()


class SourceAcquirer:
    """Downloads source archives into the sources directory."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def archive_path(self, url: str) -> Path:
        return self._settings.sources_dir / archive_name(url)

    def acquire(self, url: str, force: bool = False) -> Path:
        """Make sure the archive for ``url`` is on disk.

        Returns:
            Path to the local archive.

        Raises:
            NetworkError: If a download is needed and fails.
        """
        dest = self.archive_path(url)
        if dest.is_file() and not force:
            logger.warning("Source %s already exists, skipping download. Use --force to re-download.", dest)
            return dest

        if force:
            logger.info("Force flag set, re-downloading source from %s", url)
        return download(url, dest, timeout=self._settings.http_timeout)
