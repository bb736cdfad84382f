"""
Lock manager — single-instance guard for mutating commands.

The lock is a file whose existence is the whole state. Its content is
the owning pid, written for humans debugging a stuck lock; Blink never
reads it back.

Semantics:
    - acquire() uses exclusive create, so two racing invocations cannot
      both succeed.
    - A held lock makes the second invocation fail immediately. There is
      no waiting or polling.
    - There is no staleness detection. A crashed process leaves the lock
      behind and it must be removed by hand.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from blink.core.errors import LockError

logger = logging.getLogger(__name__)


class LockManager:
    """Exclusive-create lock file at a fixed path."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def is_locked(self) -> bool:
        """Whether the lock file exists. Never inspects its content."""
        return self._path.exists()

    def acquire(self) -> None:
        """Create the lock file and write our pid into it.

        Raises:
            LockError: If the file already exists or cannot be created.
        """
        if not self._path.parent.is_dir():
            logger.info("Lock directory does not exist, creating %s", self._path.parent)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self._path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as e:
            raise LockError(self._held_message()) from e
        except OSError as e:
            raise LockError(f"Failed to create lock file at {self._path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(f"{os.getpid()}\n")
        except OSError as e:
            self._path.unlink(missing_ok=True)
            raise LockError(f"Failed to write lock file at {self._path}: {e}") from e
        logger.info("Lock inserted at %s", self._path)

    def release(self) -> None:
        """Remove the lock file.

        Raises:
            LockError: If the file cannot be removed.
        """
        try:
            self._path.unlink()
        except OSError as e:
            raise LockError(
                f"Failed to remove lock file at {self._path}: {e}\n"
                "Later runs will refuse to start until it is removed by hand."
            ) from e
        logger.info("Lock at %s released", self._path)

    @contextmanager
    def hold(self) -> Iterator[LockManager]:
        """Hold the lock for the duration of a command.

        The lock is released on every exit path. If the body raised and
        the release also fails, the release failure is logged and the
        body's error is the one that propagates.
        """
        if self.is_locked():
            raise LockError(self._held_message())

        self.acquire()
        try:
            yield self
        except BaseException:
            try:
                self.release()
            except LockError as release_error:
                logger.error("%s", release_error)
            raise
        self.release()

    def _held_message(self) -> str:
        return (
            f"A lock is held at {self._path}. Is another Blink instance running?\n"
            f'Check with "ps aux | grep blink"; if there is none, remove the lock '
            f'with "sudo rm -f {self._path}".'
        )
