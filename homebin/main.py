"""
homebin — CLI entrypoint.

Usage:
    homebin --help
    homebin list
    homebin install ripgrep fd
    homebin outdated
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from homebin import __version__
from homebin.core.observability.logging_config import setup_logging


def _store(ctx: click.Context):
    """Load the manifest store lazily, once per invocation."""
    from homebin.core.config.loader import ManifestStore, find_manifest_dirs
    from homebin.core.errors import ManifestError

    if "store" not in ctx.obj:
        dirs = find_manifest_dirs(ctx.obj["manifest_dirs"])
        try:
            ctx.obj["store"] = ManifestStore.from_dirs(dirs)
        except ManifestError as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(1)
    return ctx.obj["store"]


def _lookup(ctx: click.Context, names: tuple[str, ...]) -> list:
    from homebin.core.errors import ManifestError

    store = _store(ctx)
    manifests = []
    for name in names:
        try:
            manifests.append(store.get(name))
        except ManifestError as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(1)
    return manifests


@click.group()
@click.version_option(version=__version__, prog_name="homebin")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--manifests",
    "-m",
    "manifest_dirs",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory with manifests (repeatable; default: $HOMEBIN_MANIFESTS).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    manifest_dirs: tuple[Path, ...],
) -> None:
    """Install binaries to $HOME. Not a package manager."""
    from homebin.core.models.dirs import InstallDirs, ProjectDirs

    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["manifest_dirs"] = list(manifest_dirs)
    ctx.obj["install_dirs"] = InstallDirs.default()
    ctx.obj["project_dirs"] = ProjectDirs.default()

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("HOMEBIN_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("HOMEBIN_LOG_FILE"),
        log_file_level=os.environ.get("HOMEBIN_LOG_FILE_LEVEL"),
    )


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_manifests(ctx: click.Context, as_json: bool) -> None:
    """List all manifests and their installed versions."""
    from homebin.core.errors import HomebinError
    from homebin.core.services.version_probe import installed_manifest_version

    install_dirs = ctx.obj["install_dirs"]
    rows = []
    for manifest in _store(ctx).manifests():
        try:
            installed = installed_manifest_version(install_dirs, manifest)
            error = None
        except HomebinError as e:
            installed, error = None, str(e)
        rows.append({
            "name": manifest.info.name,
            "version": str(manifest.info.version),
            "installed": str(installed) if installed else None,
            "outdated": bool(installed and installed < manifest.info.version),
            "error": error,
        })

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    for row in rows:
        click.secho(f"{row['name']} ", bold=True, nl=False)
        click.echo(row["version"], nl=False)
        if row["error"]:
            click.secho(f"  ✗ {row['error']}", fg="red")
        elif row["outdated"]:
            click.secho(f"  ⬆ installed {row['installed']}", fg="yellow")
        elif row["installed"]:
            click.secho("  ✓ installed", fg="green")
        else:
            click.echo()


@cli.command()
@click.argument("name")
@click.pass_context
def files(ctx: click.Context, name: str) -> None:
    """Show the files NAME installs."""
    from homebin.core.engine.executor import installed_files

    (manifest,) = _lookup(ctx, (name,))
    for path in installed_files(ctx.obj["install_dirs"], manifest):
        click.echo(str(path))


def _run_each(ctx: click.Context, manifests: list, verb: str, action) -> None:
    """Run ``action`` for each manifest, report errors, exit 1 if any failed."""
    from homebin.core.errors import HomebinError

    failed = 0
    for manifest in manifests:
        label = f"{manifest.info.name} {manifest.info.version}"
        try:
            paths = action(manifest)
        except HomebinError as e:
            failed += 1
            click.secho(f"✗ {verb} {label} failed: {e}", fg="red", err=True)
            continue
        click.secho(f"✓ {verb} {label}", fg="green")
        if not ctx.obj["quiet"]:
            for path in paths:
                click.echo(f"   {path}")
    if failed:
        sys.exit(1)


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def install(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Install manifests NAMES."""
    from homebin.core.engine.executor import install_manifest

    project_dirs, install_dirs = ctx.obj["project_dirs"], ctx.obj["install_dirs"]
    _run_each(
        ctx,
        _lookup(ctx, names),
        "install",
        lambda m: install_manifest(project_dirs, install_dirs, m),
    )


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def remove(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Remove manifests NAMES."""
    from homebin.core.engine.executor import remove_manifest

    project_dirs, install_dirs = ctx.obj["project_dirs"], ctx.obj["install_dirs"]
    _run_each(
        ctx,
        _lookup(ctx, names),
        "remove",
        lambda m: remove_manifest(project_dirs, install_dirs, m),
    )


def _outdated(ctx: click.Context) -> list:
    """``(manifest, installed version)`` for every outdated manifest."""
    from homebin.core.errors import HomebinError
    from homebin.core.services.version_probe import outdated_manifest_version

    result = []
    for manifest in _store(ctx).manifests():
        try:
            installed = outdated_manifest_version(ctx.obj["install_dirs"], manifest)
        except HomebinError as e:
            click.secho(f"✗ {manifest.info.name}: {e}", fg="red", err=True)
            continue
        if installed is not None:
            result.append((manifest, installed))
    return result


@cli.command()
@click.pass_context
def outdated(ctx: click.Context) -> None:
    """List installed manifests with a newer version available."""
    for manifest, installed in _outdated(ctx):
        click.echo(f"{manifest.info.name} {installed} → {manifest.info.version}")


@cli.command()
@click.pass_context
def update(ctx: click.Context) -> None:
    """Install the new version of every outdated manifest."""
    from homebin.core.engine.executor import install_manifest

    project_dirs, install_dirs = ctx.obj["project_dirs"], ctx.obj["install_dirs"]
    manifests = [manifest for manifest, _ in _outdated(ctx)]
    if not manifests:
        click.echo("Everything is up to date.")
        return
    _run_each(
        ctx,
        manifests,
        "update",
        lambda m: install_manifest(project_dirs, install_dirs, m),
    )


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Check that $PATH and the manpath contain the install dirs."""
    from homebin.core.services.environment import check_environment

    warnings = check_environment(ctx.obj["install_dirs"])
    for warning in warnings:
        click.secho(f"⚠️  {warning}", fg="yellow", err=True)
    if not warnings:
        click.secho("✅ Environment looks good", fg="green")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
