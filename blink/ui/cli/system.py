"""
CLI commands that manage Blink itself — clean, support, version, completion.
"""

from __future__ import annotations

import datetime

import click
from click.shell_completion import get_completion_class

from blink import __version__
from blink.ui.cli.common import path_option, reported_errors, require_root, resolve_settings

SUPPORT_PAGE = """\
Having trouble? Join our Discord Server or open a GitHub issue.
Include any DEBUG INFO logs (run with --debug) when reporting issues.
Discord: https://discord.com/invite/rx82u93hGD
GitHub Issues: https://github.com/Aperture-OS/Blink-Package-Manager/issues"""


def version_page() -> str:
    year = datetime.date.today().year
    return (
        f"Blink Package Manager - Version {__version__}\n"
        "Licensed under GPL v3.0 by Aperture OS\n"
        "https://aperture-os.github.io\n"
        f"© Copyright 2025-{year} Aperture OS."
    )


@click.command("clean")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@path_option
@click.pass_context
def clean(ctx: click.Context, yes: bool, path: str | None) -> None:
    """Delete cached recipes, sources, and build trees."""
    from blink.core.use_cases.clean import clean_cache

    with reported_errors(ctx):
        settings = resolve_settings(ctx, path)
        require_root(settings)

        if not yes and not click.confirm(
            "Delete the cached recipes, sources, and build trees?", default=True
        ):
            click.secho("Aborted.", fg="yellow")
            ctx.exit(1)

        cleaned = clean_cache(settings)

    for path_cleaned in cleaned:
        click.echo(f"   🧹 {path_cleaned}")
    click.secho("✅ Cache cleaned", fg="green")


@click.command("support")
def support() -> None:
    """Show support information."""
    click.echo(SUPPORT_PAGE)


@click.command("version")
def version() -> None:
    """Show Blink version."""
    click.echo(version_page())


@click.command("completion")
@click.argument("shell", type=click.Choice(["bash", "zsh", "fish"]))
@click.pass_context
def completion(ctx: click.Context, shell: str) -> None:
    """Generate a shell completion script.

    Example:

        blink completion bash > /etc/bash_completion.d/blink
    """
    completion_class = get_completion_class(shell)
    root = ctx.find_root()
    comp = completion_class(root.command, {}, "blink", "_BLINK_COMPLETE")
    click.echo(comp.source())
