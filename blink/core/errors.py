"""
Error hierarchy — every failure the core can surface.

Components raise these; the pipeline never recovers from them locally.
The CLI boundary catches ``BlinkError``, prints the message, and exits
non-zero. Messages are written to be pasted straight into a bug report:
they always name the path, command, or URL involved.
"""

from __future__ import annotations

from pathlib import Path


class BlinkError(Exception):
    """Base class for all Blink errors."""


class LockError(BlinkError):
    """Another instance holds the lock, or the lock could not be created/removed."""


class ConfigError(BlinkError):
    """Settings or repository configuration is missing or malformed."""


class NetworkError(BlinkError):
    """Transport failure or non-success HTTP status."""

    def __init__(self, message: str, *, url: str = "", status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status


class IntegrityError(BlinkError):
    """Downloaded archive does not hash to the recipe's declared digest."""

    def __init__(self, path: Path, expected: str, actual: str):
        super().__init__(
            f"Source hash mismatch for {path}\n"
            f"  expected: {expected}\n"
            f"  actual:   {actual}\n"
            "Re-download with --force if the archive may be corrupted."
        )
        self.path = path
        self.expected = expected
        self.actual = actual


class ExtractionError(BlinkError):
    """Unknown archive type, unsafe entry, or corrupt archive stream."""


class BuildError(BlinkError):
    """A lifecycle command exited non-zero."""

    def __init__(
        self,
        command: str,
        args: list[str],
        returncode: int | None,
        stderr: str,
        phase: str = "",
    ):
        label = f"{phase} command" if phase else "command"
        super().__init__(
            f"{label} failed: {command}\n"
            f"  argv: {args}\n"
            f"  exit: {returncode}\n"
            f"  stderr: {stderr.strip() or '(empty)'}"
        )
        self.command = command
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr
        self.phase = phase


class ManifestError(BlinkError):
    """I/O or decode failure on the manifest document."""


class RecipeError(BlinkError):
    """Recipe document could not be decoded or validated."""


class SyncError(BlinkError):
    """A version-control command failed while syncing a repository."""


class AlreadyInstalledError(BlinkError):
    """Package is already recorded in the manifest and --force was not given."""


class NotInstalledError(BlinkError):
    """Package is not recorded in the manifest."""


class PermissionDeniedError(BlinkError):
    """A mutating command was run without root privileges."""
