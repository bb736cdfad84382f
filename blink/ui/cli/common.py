"""
Shared CLI plumbing — settings resolution, root check, error reporting.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from blink.core.config.loader import Settings, load_settings
from blink.core.errors import BlinkError, PermissionDeniedError

logger = logging.getLogger(__name__)

force_option = click.option("--force", "-f", is_flag=True, help="Force re-download / reinstall.")
path_option = click.option(
    "--path",
    "-p",
    "path",
    type=click.Path(file_okay=False),
    default=None,
    help="Cache root directory (default: /var/blink).",
)
json_option = click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")


def resolve_settings(ctx: click.Context, path: str | None) -> Settings:
    """Build the Settings for this command from global and per-command options."""
    return load_settings(ctx.obj.get("config_path"), root=Path(path) if path else None)


def require_root(settings: Settings) -> None:
    """Refuse to continue unless running as root (when configured to care)."""
    if settings.require_root and os.geteuid() != 0:
        raise PermissionDeniedError(
            "This command must be run as root. "
            "Try again with 'sudo' in front of the command or as the root user ('su -')."
        )


@contextmanager
def reported_errors(ctx: click.Context) -> Iterator[None]:
    """Turn Blink errors into a red message and exit status 1."""
    try:
        yield
    except (BlinkError, OSError) as e:
        if ctx.obj.get("debug"):
            logger.exception("Command failed")
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
