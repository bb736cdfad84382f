"""
Blink — CLI entrypoint.

Usage:
    blink --help
    blink install <pkg>
    python -m blink.main sync --force
"""

from __future__ import annotations

from pathlib import Path

import click

from blink import __version__
from blink.core.observability.logging_config import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="blink")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to blink.yml (default: $BLINK_CONFIG or /etc/blink/blink.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Blink — lightweight, source-based package manager."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    configure_logging(verbose=verbose, quiet=quiet, debug=debug)


# ── Register commands from blink/ui/cli/ ──────────────────────────

from blink.ui.cli.packages import get, info, install, uninstall  # noqa: E402
from blink.ui.cli.repos import sync, update  # noqa: E402
from blink.ui.cli.system import clean, completion, support, version  # noqa: E402

cli.add_command(get)
cli.add_command(get, name="download")
cli.add_command(info)
cli.add_command(info, name="search")
cli.add_command(install)
cli.add_command(install, name="i")
cli.add_command(uninstall)
cli.add_command(uninstall, name="remove")
cli.add_command(sync)
cli.add_command(update)
cli.add_command(clean)
cli.add_command(support)
cli.add_command(version)
cli.add_command(completion)


if __name__ == "__main__":
    cli()
