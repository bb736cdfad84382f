"""
Shell command adapter — run one recipe command through ``sh -c``.

The command string is opaque: it is handed to the shell as a single
argument and never parsed or split here.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from pathlib import Path

from blink.adapters.base import Adapter, ExecutionContext
from blink.core.models.action import Receipt

logger = logging.getLogger(__name__)


class ShellCommandAdapter(Adapter):
    """Execute shell commands, capturing stderr.

    Action params:
        command (str): The command string.
    """

    def __init__(self, shell: str = "sh"):
        self._shell = shell

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which(self._shell) is not None

    def argv(self, command: str) -> list[str]:
        return [self._shell, "-c", command]

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        command = context.action.params.get("command")
        if command is None:
            return False, "Missing required param: 'command'"
        if not Path(context.working_dir).is_dir():
            return False, f"Working directory does not exist: {context.working_dir}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        command = context.action.params["command"]
        argv = self.argv(command)
        env = {**os.environ, **context.env}

        logger.debug("Executing: %s (cwd=%s)", command, context.working_dir)
        start = time.monotonic()
        try:
            result = subprocess.run(
                argv,
                cwd=context.working_dir,
                env=env,
                capture_output=True,
                text=True,
                timeout=context.timeout,
            )
        except subprocess.TimeoutExpired as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command timed out after {context.timeout}s",
                argv=argv,
                stderr=_text(e.stderr),
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Command execution error: {e}",
                argv=argv,
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if result.stdout:
            logger.debug("stdout of %r:\n%s", command, result.stdout.rstrip())

        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=result.stdout.strip(),
                duration_ms=elapsed_ms,
                argv=argv,
                return_code=0,
                stderr=result.stderr,
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=context.action.id,
            error=f"Command exited with code {result.returncode}",
            duration_ms=elapsed_ms,
            argv=argv,
            return_code=result.returncode,
            output=result.stdout.strip(),
            stderr=result.stderr,
        )


def _text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
