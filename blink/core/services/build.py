"""
Build executor — runs a recipe's lifecycle commands.

Order for an install: ``build.env`` is applied, then every ``prepare``
command, then every ``install`` command. Commands run one at a time in
the build directory; the first non-zero exit stops the sequence and is
raised as a BuildError. Nothing is retried and nothing already done is
rolled back.

The recipe's environment is overlaid on the environment of each child
process. Blink's own working directory and environment are left alone.
"""

from __future__ import annotations

import logging
from pathlib import Path

from blink.adapters.base import Adapter, ExecutionContext
from blink.core.errors import BuildError
from blink.core.models.action import Action
from blink.core.models.recipe import Recipe

logger = logging.getLogger(__name__)


class BuildExecutor:
    """Runs lifecycle command lists through a shell adapter."""

    def __init__(self, shell: Adapter, timeout: float | None = None):
        self._shell = shell
        self._timeout = timeout

    def run(self, recipe: Recipe, build_dir: Path) -> None:
        """Apply env, then run ``prepare`` and ``install`` in ``build_dir``.

        Raises:
            BuildError: On the first command that fails.
        """
        env = self.environment(recipe)
        self._run_phase(recipe, "prepare", recipe.build.prepare, build_dir, env)
        self._run_phase(recipe, "install", recipe.build.install, build_dir, env)

    def uninstall(self, recipe: Recipe, work_dir: Path) -> None:
        """Run the recipe's ``uninstall`` commands in ``work_dir``.

        Raises:
            BuildError: On the first command that fails.
        """
        env = self.environment(recipe)
        self._run_phase(recipe, "uninstall", recipe.build.uninstall, work_dir, env)

    @staticmethod
    def environment(recipe: Recipe) -> dict[str, str]:
        env = dict(recipe.build.env)
        for key, value in env.items():
            logger.debug("env %s=%s", key, value)
        return env

    def _run_phase(
        self,
        recipe: Recipe,
        phase: str,
        commands: list[str],
        work_dir: Path,
        env: dict[str, str],
    ) -> None:
        for index, command in enumerate(commands):
            logger.info("%s → %s", phase, command)
            context = ExecutionContext(
                action=Action(
                    id=f"{phase}:{recipe.name}:{index}",
                    adapter=self._shell.name,
                    params={"command": command},
                ),
                working_dir=str(work_dir),
                env=env,
                timeout=self._timeout,
            )
            receipt = self._shell.run(context)
            if receipt.failed:
                raise BuildError(
                    command=command,
                    args=receipt.argv,
                    returncode=receipt.return_code,
                    stderr=receipt.stderr or (receipt.error or ""),
                    phase=phase,
                )
