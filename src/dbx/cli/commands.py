"""Command implementations for CLI."""

import asyncio

from rich.console import Console

from dbx import __version__
from dbx.core.compatibility import CompatibilityList
from dbx.core.config import CliOverrides
from dbx.core.engine import CreationEngine
from dbx.utils.logging import setup_logging


console = Console()
stderr_console = Console(stderr=True)


def create_container(overrides: CliOverrides) -> int:
    """Create a container, returning the exit code."""
    setup_logging("DEBUG" if overrides.verbose else "WARNING")
    engine = CreationEngine(console=console, stderr_console=stderr_console)
    return asyncio.run(engine.run(overrides))


def show_compatibility() -> int:
    """Print images known to work."""
    with console.status("Fetching compatibility list...", spinner="dots"):
        images = CompatibilityList(__version__).images()
    for image in images:
        console.print(image, soft_wrap=True, markup=False, highlight=False, emoji=False)
    return 0


def show_version() -> int:
    """Print the dbx version."""
    console.print(f"dbx: {__version__}", markup=False, highlight=False)
    return 0
