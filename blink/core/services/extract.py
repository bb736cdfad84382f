"""
Archive extraction — format-dispatching, in-process decompression.

The decoder is chosen from the recipe's declared archive type, never
from the archive bytes. Every decoder walks the archive entry by entry
and recreates:

    - directories (with parents)
    - regular files (truncate-create, byte copy, permission bits kept)
    - symbolic links
    - hard links to a target already extracted into the same tree

Any other entry type is skipped. Entries that would land outside the
destination are rejected.

An archive ``foo-1.0.tar.gz`` extracts to ``<dest_root>/foo-1.0``.
Extraction runs in a hidden staging directory next to the target and
is renamed into place only after the last entry is written, so a
target directory that exists is always a complete extraction.
"""

from __future__ import annotations

import logging
import lzma
import os
import shutil
import stat
import tarfile
import tempfile
import zipfile
import zlib
from pathlib import Path
from typing import IO

import zstandard

from blink.core.errors import ExtractionError
from blink.core.models.recipe import ArchiveType

logger = logging.getLogger(__name__)

# Longest suffix first.
KNOWN_SUFFIXES = tuple(
    sorted(
        (".tar.gz", ".tar.xz", ".tar.bz2", ".tar.zst", ".tgz", ".txz", ".tbz2", ".tzst", ".tar", ".zip"),
        key=len,
        reverse=True,
    )
)

_TAR_MODES = {
    ArchiveType.TAR: "r|",
    ArchiveType.TAR_GZ: "r|gz",
    ArchiveType.TAR_XZ: "r|xz",
    ArchiveType.TAR_BZ2: "r|bz2",
}

_STREAM_ERRORS = (
    tarfile.TarError,
    zipfile.BadZipFile,
    zstandard.ZstdError,
    lzma.LZMAError,
    zlib.error,
    EOFError,
    NotImplementedError,
    OSError,
)


def extraction_dir_name(archive: Path) -> str:
    """Archive base name with its known archive suffix stripped."""
    name = archive.name
    lower = name.lower()
    for suffix in KNOWN_SUFFIXES:
        if lower.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return name


def resolve_build_dir(extraction_dir: Path) -> Path:
    """Pick the directory the build commands should run in.

    Tarballs usually wrap everything in one top-level folder; when the
    extraction holds exactly one entry and it is a directory, that is
    the build root. Otherwise the extraction directory itself is.
    """
    logger.info("Scanning extract root %s", extraction_dir)
    entries = list(extraction_dir.iterdir())
    if len(entries) == 1 and entries[0].is_dir() and not entries[0].is_symlink():
        logger.info("Using single top-level dir %s", entries[0])
        return entries[0]
    logger.info("Using extract root as build dir")
    return extraction_dir


class ArchiveExtractor:
    """Extracts source archives into per-archive directories."""

    def extract(
        self,
        archive: Path,
        archive_type: ArchiveType | str,
        dest_root: Path,
        force: bool = False,
    ) -> Path:
        """Extract ``archive`` under ``dest_root``.

        Args:
            archive: Local archive file.
            archive_type: Declared archive type.
            dest_root: Directory that holds per-archive extraction dirs.
            force: Replace an existing extraction.

        Returns:
            The extraction directory.

        Raises:
            ExtractionError: Unknown type, missing archive, unsafe entry,
                or corrupt stream.
        """
        try:
            kind = ArchiveType.parse(archive_type)
        except ValueError as e:
            raise ExtractionError(str(e)) from e

        if not archive.is_file():
            raise ExtractionError(f"Source archive not found: {archive}")

        target = dest_root / extraction_dir_name(archive)
        if target.exists() or target.is_symlink():
            if not force:
                logger.info("%s already extracted at %s, skipping", archive.name, target)
                return target
            logger.info("Force flag set, removing previous extraction %s", target)
            _remove_path(target)

        dest_root.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(dir=dest_root, prefix=f".{target.name}.", suffix=".partial"))
        logger.info("Decompressing %s (%s) into %s", archive, kind.value, target)
        try:
            self._decode(kind, archive, staging)
            staging.rename(target)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        return target

    # ── Decoders ────────────────────────────────────────────────

    def _decode(self, kind: ArchiveType, archive: Path, dest: Path) -> None:
        try:
            if kind is ArchiveType.ZIP:
                self._extract_zip(archive, dest)
            elif kind is ArchiveType.TAR_ZST:
                with open(archive, "rb") as raw:
                    with zstandard.ZstdDecompressor().stream_reader(raw) as reader:
                        self._extract_tar(reader, "r|", dest)
            else:
                with open(archive, "rb") as raw:
                    self._extract_tar(raw, _TAR_MODES[kind], dest)
        except _STREAM_ERRORS as e:
            raise ExtractionError(f"Failed to extract {archive} as {kind.value}: {e}") from e

    def _extract_tar(self, fileobj: IO[bytes], mode: str, dest: Path) -> None:
        with tarfile.open(fileobj=fileobj, mode=mode) as tar:
            for member in tar:
                target = _safe_target(dest, member.name)
                if target is None:
                    continue

                if member.isdir():
                    _make_dirs(dest, target)
                elif member.isreg():
                    src = tar.extractfile(member)
                    if src is None:
                        continue
                    with src:
                        _write_file(dest, target, src, member.mode)
                elif member.issym():
                    _write_symlink(dest, target, member.linkname)
                elif member.islnk():
                    source = _safe_target(dest, member.linkname)
                    if source is None or not source.exists():
                        raise ExtractionError(
                            f"Hard link {member.name} points at {member.linkname}, "
                            "which is not in the extracted tree"
                        )
                    _write_hardlink(dest, target, source)
                else:
                    logger.debug("Skipping unsupported tar entry %s (type %r)", member.name, member.type)

    def _extract_zip(self, archive: Path, dest: Path) -> None:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                target = _safe_target(dest, info.filename)
                if target is None:
                    continue

                mode = info.external_attr >> 16
                if info.is_dir():
                    _make_dirs(dest, target)
                elif stat.S_ISLNK(mode):
                    _write_symlink(dest, target, zf.read(info).decode("utf-8"))
                else:
                    with zf.open(info) as src:
                        _write_file(dest, target, src, mode)


# ── Entry writers ───────────────────────────────────────────────


def _safe_target(dest: Path, name: str) -> Path | None:
    """Map an archive entry name to a path inside ``dest``.

    Returns None for the archive's own root entry ("." or "./").
    """
    cleaned = name.replace("\\", "/")
    if cleaned.startswith("/") or (len(cleaned) > 1 and cleaned[1] == ":"):
        raise ExtractionError(f"Refusing absolute archive entry: {name}")

    normalized = os.path.normpath(cleaned)
    if normalized in (".", ""):
        return None
    if normalized == ".." or normalized.startswith("../"):
        raise ExtractionError(f"Refusing archive entry outside the destination: {name}")
    return dest / normalized


def _ensure_inside(dest: Path, path: Path) -> None:
    real_dest = os.path.realpath(dest)
    real_path = os.path.realpath(path)
    if os.path.commonpath([real_dest, real_path]) != real_dest:
        raise ExtractionError(f"Refusing to write {path} through a link leaving {dest}")


def _make_dirs(dest: Path, directory: Path) -> None:
    """Create ``directory`` one component at a time below ``dest``.

    Each component that already exists is resolved before anything is
    created beneath it, so a symlinked prefix that leaves ``dest`` is
    refused before the first ``mkdir``.
    """
    current = dest
    for part in directory.relative_to(dest).parts:
        current = current / part
        if os.path.lexists(current):
            _ensure_inside(dest, current)
            if not current.is_dir():
                raise ExtractionError(f"Archive entry {current} is in the way of a directory")
        else:
            current.mkdir()


def _prepare_parent(dest: Path, target: Path) -> None:
    _make_dirs(dest, target.parent)
    if target.is_symlink() or target.is_file():
        target.unlink()


def _write_file(dest: Path, target: Path, src: IO[bytes], mode: int) -> None:
    _prepare_parent(dest, target)
    with open(target, "wb") as out:
        shutil.copyfileobj(src, out)
    perms = stat.S_IMODE(mode) & 0o777
    if perms:
        os.chmod(target, perms | stat.S_IRUSR | stat.S_IWUSR)


def _write_symlink(dest: Path, target: Path, linkname: str) -> None:
    _prepare_parent(dest, target)
    os.symlink(linkname, target)


def _write_hardlink(dest: Path, target: Path, source: Path) -> None:
    _ensure_inside(dest, source)
    _prepare_parent(dest, target)
    os.link(source, target)


def _remove_path(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    else:
        shutil.rmtree(path)
