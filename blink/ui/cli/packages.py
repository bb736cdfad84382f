"""
CLI commands for recipes and packages — get, info, install, uninstall.

Thin wrappers over ``blink.core.use_cases``.
"""

from __future__ import annotations

import json

import click

from blink.ui.cli.common import (
    force_option,
    json_option,
    path_option,
    reported_errors,
    require_root,
    resolve_settings,
)


@click.command("get")
@click.argument("package")
@force_option
@path_option
@click.pass_context
def get(ctx: click.Context, package: str, force: bool, path: str | None) -> None:
    """Download a package recipe into the cache."""
    from blink.core.use_cases.recipes import get_recipe

    with reported_errors(ctx):
        settings = resolve_settings(ctx, path)
        recipe_path = get_recipe(settings, package, force=force)

    click.secho(f"📥 Recipe saved to {recipe_path}", fg="green")


@click.command("info")
@click.argument("package")
@force_option
@path_option
@json_option
@click.pass_context
def info(ctx: click.Context, package: str, force: bool, path: str | None, as_json: bool) -> None:
    """Fetch and display package information."""
    from blink.core.use_cases.recipes import show_recipe

    with reported_errors(ctx):
        settings = resolve_settings(ctx, path)
        recipe = show_recipe(settings, package, force=force)

    if as_json:
        click.echo(json.dumps(recipe.model_dump(mode="json", by_alias=True), indent=2))
        return

    click.echo()
    click.echo(recipe.summary(settings.repo_url))
    if recipe.dependencies:
        click.echo("Dependencies:")
        for dep, constraint in recipe.dependencies.items():
            click.echo(f"   • {dep} {constraint}".rstrip())
    click.echo()


@click.command("install")
@click.argument("package")
@force_option
@path_option
@json_option
@click.pass_context
def install(ctx: click.Context, package: str, force: bool, path: str | None, as_json: bool) -> None:
    """Download, build, and install a package."""
    from blink.core.use_cases.install import install_package

    with reported_errors(ctx):
        settings = resolve_settings(ctx, path)
        require_root(settings)
        result = install_package(settings, package, force=force)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo()
    click.echo(result.recipe.summary(settings.repo_url))
    click.echo()
    verb = "Reinstalled" if result.reinstalled else "Installed"
    click.secho(
        f"✅ {verb} {result.entry.name} {result.entry.version}-{result.entry.release}",
        fg="green",
        bold=True,
    )
    if not ctx.obj.get("quiet"):
        click.echo(f"   Build dir: {result.build_dir}")


@click.command("uninstall")
@click.argument("package")
@force_option
@path_option
@click.pass_context
def uninstall(ctx: click.Context, package: str, force: bool, path: str | None) -> None:
    """Run a package's uninstall commands and remove it from the manifest."""
    from blink.core.use_cases.uninstall import uninstall_package

    with reported_errors(ctx):
        settings = resolve_settings(ctx, path)
        require_root(settings)
        result = uninstall_package(settings, package, force=force)

    if result.removed_from_manifest:
        click.secho(f"🗑️  Uninstalled {result.name}", fg="green", bold=True)
    else:
        click.secho(f"⚠️  {result.name} was not recorded as installed", fg="yellow")
