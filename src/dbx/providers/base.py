"""Base container manager interface."""

import logging
import os
import shlex
import shutil
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, Tuple, TYPE_CHECKING

from dbx.models.command import Arg, ManagerCommand
from dbx.models.container import ContainerSpec
from dbx.utils.process import CommandResult, run_command

if TYPE_CHECKING:
    from dbx.core.probe import HostProbe

logger = logging.getLogger(__name__)


class ProviderStatus(Enum):
    """Resource status as reported by the container manager."""
    PRESENT = "present"
    ABSENT = "absent"
    ERROR = "error"


class BaseManager(ABC):
    """Wrapper around one container manager CLI."""

    name: str = ""

    def __init__(self, rootful: bool = False, sudo_program: str = "sudo", euid: Optional[int] = None):
        """Initialize manager wrapper."""
        self.rootful = rootful
        self.sudo_program = sudo_program
        self.euid = os.geteuid() if euid is None else euid

    @classmethod
    def is_available(cls) -> bool:
        """Check whether the backend binary is on PATH."""
        return shutil.which(cls.name) is not None

    @property
    def program(self) -> Tuple[str, ...]:
        """Program prefix, elevated when a rootful container is requested by a user."""
        if self.rootful and self.euid != 0:
            return (*shlex.split(self.sudo_program), self.name)
        return (self.name,)

    @abstractmethod
    def backend_flags(self, spec: ContainerSpec, probe: "HostProbe") -> List[Arg]:
        """Flags only this backend understands."""
        pass

    async def _run(self, *args: str, capture_output: bool = True) -> CommandResult:
        return await run_command([*self.program, *args], check=False, capture_output=capture_output)

    async def container_status(self, name: str) -> ProviderStatus:
        """Check if a container exists."""
        try:
            result = await self._run("inspect", "--type", "container", name)
        except OSError as e:
            logger.error(f"Error checking container {name}: {e}")
            return ProviderStatus.ERROR
        return ProviderStatus.PRESENT if result.returncode == 0 else ProviderStatus.ABSENT

    async def _inspect_field(self, name: str, template: str) -> Optional[str]:
        result = await self._run("inspect", "--type", "container", "--format", template, name)
        if result.returncode != 0:
            logger.debug(f"Inspect of {name} failed: {result.stderr.strip()}")
            return None
        return result.stdout.strip()

    async def container_state(self, name: str) -> Optional[str]:
        """Return the container's state (running, exited, ...) or None if missing."""
        return await self._inspect_field(name, "{{.State.Status}}")

    async def container_id(self, name: str) -> Optional[str]:
        """Return the container's immutable ID or None if missing."""
        return await self._inspect_field(name, "{{.ID}}")

    async def image_status(self, image: str) -> ProviderStatus:
        """Check if an image is present locally."""
        try:
            result = await self._run("inspect", "--type", "image", image)
        except OSError as e:
            logger.error(f"Error checking image {image}: {e}")
            return ProviderStatus.ERROR
        return ProviderStatus.PRESENT if result.returncode == 0 else ProviderStatus.ABSENT

    async def pull(self, image: str) -> int:
        """Pull an image, streaming progress to the terminal."""
        logger.info(f"Pulling image {image}")
        result = await self._run("pull", image, capture_output=False)
        return result.returncode

    async def commit(self, container_id: str, tag: str) -> CommandResult:
        """Commit a container's filesystem to a tagged image."""
        logger.info(f"Committing container {container_id} as {tag}")
        return await self._run("container", "commit", container_id, tag)

    async def create(self, command: ManagerCommand) -> int:
        """Execute a synthesized create command."""
        result = await run_command(command.argv(), check=False, capture_output=False)
        return result.returncode
