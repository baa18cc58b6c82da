"""Main CLI implementation using Typer."""

from typing import Any, Callable, List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from dbx.cli.commands import create_container, show_compatibility, show_version
from dbx.core.config import CliOverrides
from dbx.errors import DbxError


# Create Typer app
app = typer.Typer(
    name="dbx",
    help="dbx - integrated containers on top of podman or docker",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Console for rich output
console = Console(stderr=True)


def _run_cli_command(handler: Callable[..., int], **kwargs: Any):
    """Helper to run a CLI command with error handling."""
    try:
        exit_code = handler(**kwargs)
    except DbxError as e:
        if e.exit_code == 0:
            console.print(str(e), markup=False, highlight=False, emoji=False)
        else:
            console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False, emoji=False)
        raise typer.Exit(e.exit_code) from e
    if exit_code:
        raise typer.Exit(exit_code)


def _version_callback(value: bool):
    if value:
        show_version()
        raise typer.Exit()


@app.callback()
def main_callback():
    """dbx - integrated containers on top of podman or docker."""


@app.command("create")
def create_command(
    positional_name: Optional[str] = typer.Argument(
        None, metavar="[NAME]", help="Container name (same as --name)"
    ),
    image: Optional[str] = typer.Option(
        None, "--image", "-i", help="Image to use for the container"
    ),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Name for the container"
    ),
    hostname: Optional[str] = typer.Option(
        None, "--hostname", help="Hostname for the container"
    ),
    pull: bool = typer.Option(
        False, "--pull", "-p", help="Pull the image even if it exists locally"
    ),
    yes: bool = typer.Option(
        False, "--yes", "-Y", help="Non-interactive, pull images without asking"
    ),
    root: bool = typer.Option(
        False, "--root", "-r", help="Launch the container manager with root privileges"
    ),
    clone: Optional[str] = typer.Option(
        None, "--clone", "-c", help="Name of a stopped container to clone"
    ),
    home: Optional[str] = typer.Option(
        None, "--home", "-H", help="Custom home directory for the container"
    ),
    volume: Optional[List[str]] = typer.Option(
        None, "--volume", help="Additional volume SRC:DST[:MODE], repeatable"
    ),
    additional_flags: Optional[List[str]] = typer.Option(
        None, "--additional-flags", "-a", help="Additional flags for the container manager"
    ),
    additional_packages: Optional[List[str]] = typer.Option(
        None, "--additional-packages", "-ap", help="Additional packages to install"
    ),
    init_hooks: Optional[str] = typer.Option(
        None, "--init-hooks", help="Commands to run at the end of container init"
    ),
    pre_init_hooks: Optional[str] = typer.Option(
        None, "--pre-init-hooks", help="Commands to run at the start of container init"
    ),
    init: bool = typer.Option(
        False, "--init", "-I", help="Use an init system (like systemd) in the container"
    ),
    nvidia: bool = typer.Option(
        False, "--nvidia", help="Integrate host NVIDIA drivers"
    ),
    no_entry: bool = typer.Option(
        False, "--no-entry", help="Do not generate a desktop entry"
    ),
    compatibility: bool = typer.Option(
        False, "--compatibility", "-C", help="Show the list of compatible images"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-d", help="Only print the container manager command"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show more verbosity"
    ),
    version: Optional[bool] = typer.Option(
        None, "--version", "-V", callback=_version_callback, is_eager=True,
        help="Show version"
    ),
):
    """Create a new container."""
    if compatibility:
        _run_cli_command(show_compatibility)
        return

    overrides = CliOverrides(
        image=image,
        name=name or positional_name,
        hostname=hostname,
        pull=pull,
        yes=yes,
        root=root,
        clone=clone,
        home=home,
        volumes=tuple(volume or ()),
        additional_flags=tuple(additional_flags or ()),
        additional_packages=tuple(additional_packages or ()),
        init_hooks=init_hooks,
        pre_init_hooks=pre_init_hooks,
        init=init,
        nvidia=nvidia,
        no_entry=no_entry,
        dry_run=dry_run,
        verbose=verbose,
    )
    _run_cli_command(create_container, overrides=overrides)


def main():
    """Main entry point for CLI."""
    app()
