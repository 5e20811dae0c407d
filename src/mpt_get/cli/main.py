"""
mpt-get CLI: package client for a git-hosted package index.

Usage:
    mpt-get update
    mpt-get list
    mpt-get show net.mamoe:mirai-console --all
    mpt-get install net.mamoe:mirai-console 2.4.0 --suffix -all.jar
"""

import asyncio
import logging
from pathlib import Path

import click

from mpt_get import __version__
from mpt_get.core.config import load_config
from mpt_get.core.errors import MptError, StorageError
from mpt_get.core.output import ConsoleSink
from mpt_get.models.package import PackageVersion
from mpt_get.models.package_id import PackageID
from mpt_get.observers import OBSERVER_NAMES, get_observer

logger = logging.getLogger(__name__)

NOT_SYNCED_HINT = "The index may not be downloaded yet, try: mpt-get update"


class State:
    """Per-invocation objects shared by all subcommands."""

    def __init__(self, config_path, sink):
        self.config_path = config_path
        self.sink = sink
        self._config = None

    @property
    def config(self):
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config


pass_state = click.make_pass_decorator(State)


def _fail(state: State, err: MptError, hint: str | None = None):
    console = state.sink.err()
    console.print(str(err), markup=False)
    if hint:
        console.print(hint, markup=False)
    raise click.exceptions.Exit(1)


def _parse_id(state: State, text: str) -> PackageID:
    try:
        return PackageID.parse(text)
    except MptError as e:
        _fail(state, e)


@click.group()
@click.version_option(version=__version__, prog_name="mpt-get")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (default: ~/.mpt-get/config.json).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.pass_context
def cli(ctx, config_path, verbose):
    """Install packages from a git-hosted package index."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )
    ctx.obj = State(config_path, ConsoleSink())


@cli.command()
@pass_state
def update(state):
    """Update the index from the mirror repository."""
    try:
        state.config.updater(state.sink).update()
    except MptError as e:
        _fail(state, e)

    state.sink.info().print("Done. Use mpt-get list to get all indexed packages.", markup=False)


@cli.command("list")
@pass_state
def list_packages(state):
    """List all packages in the index."""
    try:
        packages = state.config.updater(state.sink).index()
    except StorageError as e:
        _fail(state, e, NOT_SYNCED_HINT)
    except MptError as e:
        _fail(state, e)

    state.sink.info().print(packages.pretty_print(), markup=False)


@cli.command()
@click.argument("package")
@click.option("--all", "-a", "show_all", is_flag=True, help="List every version of every channel.")
@pass_state
def show(state, package, show_all):
    """Show a package's metadata and its best version."""
    package_id = _parse_id(state, package)
    out = state.sink.info()

    try:
        config = state.config
        packages = config.updater(state.sink).index()
        entry = packages.get(package_id)
        if entry is None:
            state.sink.err().print(f"{package_id} is not listed in the index", markup=False)
            raise click.exceptions.Exit(1)

        out.print(f"{package_id}:", markup=False)
        out.print("    " + entry.pretty_print().replace("\n", "\n    "), markup=False)

        versions = PackageVersion.from_package_id(package_id, config.index_path)
    except StorageError as e:
        _fail(state, e, NOT_SYNCED_HINT)
    except MptError as e:
        _fail(state, e)

    if show_all:
        out.print("versions:", markup=False)
        out.print("    " + versions.pretty_print().replace("\n", "\n    "), markup=False)
        return

    best = versions.best_version()
    if best is None:
        out.print("version: <none available>", markup=False)
    else:
        out.print(f"version: {best.version} ({best.channel})", markup=False)


cli.add_command(show, name="info")


@cli.command()
@click.argument("package")
@click.argument("version", required=False)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Destination file (default: inside the package storage path).",
)
@click.option("--suffix", "-s", default=None, help="Artifact suffix, e.g. '.jar' or '-all.jar'.")
@click.option(
    "--progress",
    "-p",
    type=click.Choice(OBSERVER_NAMES),
    default="rich",
    help="Progress renderer.",
)
@pass_state
def install(state, package, version, output, suffix, progress):
    """Download a package artifact (best version unless VERSION is given)."""
    package_id = _parse_id(state, package)
    out = state.sink.info()

    try:
        config = state.config
        versions = PackageVersion.from_package_id(package_id, config.index_path)
    except StorageError as e:
        _fail(state, e, NOT_SYNCED_HINT)
    except MptError as e:
        _fail(state, e)

    if version is None:
        best = versions.best_version()
        if best is None:
            state.sink.err().print(f"No resolvable version for {package_id}", markup=False)
            raise click.exceptions.Exit(1)
        version = best.version
        out.print(f"Selected {package_id} {version} from channel {best.channel}", markup=False)
    elif not versions.has_version(version):
        logger.warning(
            f"{version} is not listed in any channel of {package_id}, trying anyway"
        )

    downloader = config.downloader(get_observer(progress, out))
    try:
        path = asyncio.run(
            downloader.download(
                package_id,
                version,
                output=output,
                suffix=suffix or config.artifact_suffix,
            )
        )
    except MptError as e:
        _fail(state, e)

    out.print(f"Installed {package_id} {version} to {path}", markup=False)


if __name__ == "__main__":
    cli()
