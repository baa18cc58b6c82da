"""Creation orchestration."""

import logging
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape

from dbx.core.clone import CloneEngine
from dbx.core.config import CliOverrides, ConfigResolver
from dbx.core.probe import HostProber, ensure_home, resolve_entrypoint_utilities
from dbx.core.synthesizer import synthesize
from dbx.errors import (
    BackendExecutionError,
    ImagePullDeclinedError,
    InvalidPromptInputError,
    MissingDependencyError,
    NameCollisionError,
)
from dbx.models.command import ManagerCommand
from dbx.models.container import CreateOptions
from dbx.providers.base import BaseManager, ProviderStatus
from dbx.providers.registry import ManagerRegistry
from dbx.utils.paths import Found, find_program
from dbx.utils.process import run_command


logger = logging.getLogger(__name__)

ENTRY_GENERATOR = "dbx-generate-entry"

YES_ANSWERS = ("y", "yes")
NO_ANSWERS = ("n", "no")


class CreationState(Enum):
    """Stages of one create invocation."""
    RESOLVING_CONFIG = "resolving-config"
    CLONING = "cloning"
    CHECKING_EXISTENCE = "checking-existence"
    ENSURING_IMAGE = "ensuring-image"
    SYNTHESIZING = "synthesizing"
    DRY_RUN = "dry-run"
    EXECUTING = "executing"
    GENERATING_ENTRY = "generating-entry"
    DONE = "done"


def parse_pull_answer(response: str) -> bool:
    """Interpret the answer to the pull prompt.

    An empty answer takes the default (yes). Anything outside the accepted
    answers is an error, never a re-prompt.
    """
    answer = response.strip().lower() or "y"
    if answer in YES_ANSWERS:
        return True
    if answer in NO_ANSWERS:
        return False
    raise InvalidPromptInputError(
        "Invalid input.\n"
        "The available choices are: y, yes, n, no (case insensitive).\n"
        "Exiting."
    )


def enter_hint(name: str, rootful: bool) -> str:
    """Command telling the user how to enter a container."""
    root_flag = "--root " if rootful else ""
    return f"To enter, run:\n\ndbx enter {root_flag}{name}\n"


class CreationEngine:
    """Drives one create invocation from configuration to a running box."""

    def __init__(
        self,
        resolver: Optional[ConfigResolver] = None,
        registry: Optional[ManagerRegistry] = None,
        prober: Optional[HostProber] = None,
        console: Optional[Console] = None,
        stderr_console: Optional[Console] = None,
        prompt: Optional[Callable[[str], str]] = None,
        today: Callable[[], date] = date.today,
        utilities_dir: Optional[Path] = None,
    ):
        """Initialize creation engine."""
        self.resolver = resolver or ConfigResolver()
        self.registry = registry or ManagerRegistry()
        self.prober = prober or HostProber()
        self.console = console or Console()
        self.stderr_console = stderr_console or Console(stderr=True)
        self.prompt = prompt or self.stderr_console.input
        self.today = today
        self.utilities_dir = utilities_dir
        self.state = CreationState.RESOLVING_CONFIG

    def _enter(self, state: CreationState) -> None:
        logger.debug(f"State: {self.state.value} -> {state.value}")
        self.state = state

    async def run(self, overrides: CliOverrides) -> int:
        """Run the create flow and return the exit code."""
        self.state = CreationState.RESOLVING_CONFIG
        options = self.resolver.resolve(overrides)
        spec = options.spec
        manager = self.registry.resolve(
            options.manager,
            dry_run=options.dry_run,
            rootful=spec.rootful,
            sudo_program=options.sudo_program,
            euid=self.resolver.euid,
        )
        utilities = resolve_entrypoint_utilities(self.utilities_dir)
        probe = self.prober.probe()

        if spec.clone:
            self._enter(CreationState.CLONING)
            cloner = CloneEngine(manager, today=self.today)
            if options.dry_run:
                tag = cloner.tag_for(spec.clone)
            else:
                self.stderr_console.print(f"Duplicating {escape(spec.clone)}...", emoji=False)
                tag = await cloner.clone(spec.clone)
            spec = spec.model_copy(update={"image": tag})
            options = options.model_copy(update={"spec": spec})

        if not options.dry_run:
            self._enter(CreationState.CHECKING_EXISTENCE)
            await self._check_existence(manager, options)

            self._enter(CreationState.ENSURING_IMAGE)
            await self._ensure_image(manager, options)

            if spec.home_override:
                ensure_home(spec.home_override)

        self._enter(CreationState.SYNTHESIZING)
        command = synthesize(options, probe, utilities, manager)

        if options.dry_run:
            self._enter(CreationState.DRY_RUN)
            self.console.print(command.render(), soft_wrap=True, markup=False, highlight=False, emoji=False)
            return 0

        self._enter(CreationState.EXECUTING)
        await self._execute(manager, command, options)

        if not spec.rootful and options.generate_entry:
            self._enter(CreationState.GENERATING_ENTRY)
            returncode = await self._generate_entry(spec.name)
            self._enter(CreationState.DONE)
            return returncode

        self._enter(CreationState.DONE)
        return 0

    async def _check_existence(self, manager: BaseManager, options: CreateOptions) -> None:
        spec = options.spec
        if await manager.container_status(spec.name) == ProviderStatus.PRESENT:
            raise NameCollisionError(
                f"dbx named '{spec.name}' already exists.\n"
                + enter_hint(spec.name, spec.rootful)
            )

    async def _ensure_image(self, manager: BaseManager, options: CreateOptions) -> None:
        image = options.spec.image
        if not options.always_pull:
            if await manager.image_status(image) == ProviderStatus.PRESENT:
                logger.debug(f"Image {image} already present")
                return

        if options.always_pull or options.non_interactive:
            pull = True
        else:
            self.stderr_console.print(f"Image {escape(image)} not found.", emoji=False)
            pull = parse_pull_answer(self.prompt("Do you want to pull the image now? [Y/n]: "))

        if not pull:
            raise ImagePullDeclinedError(
                "next time, run this command first:\n"
                f"\t{' '.join(manager.program)} pull {image}"
            )

        returncode = await manager.pull(image)
        if returncode != 0:
            raise BackendExecutionError(f"Failed to pull image {image}", returncode)

    async def _execute(self, manager: BaseManager, command: ManagerCommand, options: CreateOptions) -> None:
        spec = options.spec
        self.stderr_console.print(f"Creating '{escape(spec.name)}' using image {escape(spec.image)}", emoji=False)
        returncode = await manager.create(command)
        if returncode != 0:
            raise BackendExecutionError(
                f"Failed to create container {spec.name} ({manager.name} exited with {returncode})",
                returncode,
            )
        self.stderr_console.print(f"[green]✓[/green] dbx '{escape(spec.name)}' successfully created.", emoji=False)
        self.stderr_console.print(escape(enter_hint(spec.name, spec.rootful)), emoji=False)

    async def _generate_entry(self, name: str) -> int:
        generator = find_program(ENTRY_GENERATOR, self.utilities_dir)
        if not isinstance(generator, Found):
            raise MissingDependencyError(f"Error: {ENTRY_GENERATOR} not found!")
        result = await run_command([str(generator.path), name], check=False, capture_output=False)
        if result.returncode != 0:
            logger.warning(f"{ENTRY_GENERATOR} exited with {result.returncode}")
        return result.returncode
