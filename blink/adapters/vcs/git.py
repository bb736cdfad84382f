"""
Git adapter — the version-control operations repository sync needs.

Uses the git CLI. Each operation is one synchronous git invocation.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from blink.adapters.base import Adapter, ExecutionContext
from blink.core.models.action import Receipt

logger = logging.getLogger(__name__)


class GitAdapter(Adapter):
    """Git operations for recipe repositories.

    Action params:
        operation (str): One of 'clone', 'pull', 'fetch', 'reset'.
        url (str): Remote URL (for 'clone').
        ref (str): Branch (for 'clone' and 'reset').
        path (str): Local repository path.
    """

    VALID_OPERATIONS = ("clone", "pull", "fetch", "reset")

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation", "")
        if operation not in self.VALID_OPERATIONS:
            return False, (
                f"Unknown operation '{operation}'. Valid: {', '.join(self.VALID_OPERATIONS)}"
            )
        if not params.get("path"):
            return False, "Missing required param: 'path'"
        if operation == "clone" and not (params.get("url") and params.get("ref")):
            return False, "Missing required params: 'url' and 'ref' for clone"
        if operation == "reset" and not params.get("ref"):
            return False, "Missing required param: 'ref' for reset"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        return self._git(context, self.command_for(context.action.params))

    @staticmethod
    def command_for(params: dict) -> list[str]:
        """Translate operation params into git arguments."""
        operation = params["operation"]
        path = str(params["path"])
        if operation == "clone":
            return ["clone", "-b", params["ref"], params["url"], path]
        if operation == "pull":
            return ["-C", path, "pull"]
        if operation == "fetch":
            return ["-C", path, "fetch", "--all"]
        return ["-C", path, "reset", "--hard", f"origin/{params['ref']}"]

    # ── Helpers ─────────────────────────────────────────────────

    def _git(self, context: ExecutionContext, args: list[str]) -> Receipt:
        argv = ["git", *args]
        logger.info("Running %s", " ".join(argv))
        start = time.monotonic()
        try:
            result = subprocess.run(
                argv,
                cwd=context.working_dir,
                capture_output=True,
                text=True,
                timeout=context.timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"git timed out after {context.timeout}s",
                argv=argv,
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Git error: {e}",
                argv=argv,
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
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
            error=result.stderr.strip() or f"git {args[0]} failed",
            duration_ms=elapsed_ms,
            argv=argv,
            return_code=result.returncode,
            stderr=result.stderr,
        )
