"""
CLI commands for recipe repositories — sync and update.
"""

from __future__ import annotations

import json

import click

from blink.ui.cli.common import force_option, json_option, path_option, reported_errors, resolve_settings


@click.command("sync")
@force_option
@path_option
@json_option
@click.pass_context
def sync(ctx: click.Context, force: bool, path: str | None, as_json: bool) -> None:
    """Clone or update the configured recipe repositories.

    With --force, local changes are discarded and each repository is
    hard-reset to its configured branch.
    """
    from blink.core.use_cases.repositories import sync_repositories

    with reported_errors(ctx):
        settings = resolve_settings(ctx, path)
        outcomes = sync_repositories(settings, force=force)

    if as_json:
        click.echo(json.dumps([o.to_dict() for o in outcomes], indent=2))
        return

    icons = {"cloned": "📥", "reset": "♻️ ", "pulled": "🔄"}
    for outcome in outcomes:
        click.echo(f"   {icons.get(outcome.action, '•')} {outcome.name}: {outcome.action}")
    click.secho(f"✅ {len(outcomes)} repositories synced", fg="green")


@click.command("update")
@force_option
@path_option
@json_option
@click.pass_context
def update(ctx: click.Context, force: bool, path: str | None, as_json: bool) -> None:
    """Sync repositories and list installed packages with newer recipes."""
    from blink.core.use_cases.repositories import check_updates

    with reported_errors(ctx):
        settings = resolve_settings(ctx, path)
        candidates = check_updates(settings, force=force)

    if as_json:
        click.echo(json.dumps([c.to_dict() for c in candidates], indent=2))
        return

    if not candidates:
        click.secho("✅ All packages up to date", fg="green")
        return

    click.secho(f"📦 Updates available ({len(candidates)}):", fg="yellow", bold=True)
    for c in candidates:
        click.echo(
            f"   {c.name:<30} {c.installed_version}-{c.installed_release:<8} "
            f"→ {c.available_version}-{c.available_release}"
        )
    click.echo("   Run 'blink install --force <pkg>' to rebuild.")
