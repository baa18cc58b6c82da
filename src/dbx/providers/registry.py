"""Registry for selecting the container manager backend."""

import logging
from typing import Dict, Optional, Tuple, Type

from dbx.errors import ConfigError, MissingDependencyError
from dbx.providers.base import BaseManager
from dbx.providers.docker import DockerManager
from dbx.providers.podman import PodmanManager


logger = logging.getLogger(__name__)


class ManagerRegistry:
    """Registry of supported container managers."""

    # Autodetect preference order
    preference: Tuple[str, ...] = ("podman", "docker")

    def __init__(self):
        """Initialize manager registry."""
        self._manager_classes: Dict[str, Type[BaseManager]] = {
            "podman": PodmanManager,
            "docker": DockerManager,
        }

    def list_managers(self) -> list[str]:
        """List supported manager names."""
        return list(self._manager_classes.keys())

    def detect(self) -> Optional[str]:
        """Return the first available backend in preference order."""
        for name in self.preference:
            manager_class = self._manager_classes.get(name)
            if manager_class and manager_class.is_available():
                logger.debug(f"Detected container manager: {name}")
                return name
        return None

    def resolve(
        self,
        choice: str = "autodetect",
        dry_run: bool = False,
        rootful: bool = False,
        sudo_program: str = "sudo",
        euid: Optional[int] = None,
    ) -> BaseManager:
        """Resolve the configured choice to a manager instance.

        In dry-run mode a missing backend is tolerated: the command is
        synthesized for the preferred backend instead.
        """
        if choice == "autodetect":
            name = self.detect()
        elif choice in self._manager_classes:
            name = choice
            if not self._manager_classes[name].is_available():
                name = None
        else:
            choices = ", ".join(f"'{m}'" for m in ("autodetect", *self._manager_classes))
            raise ConfigError(f"Invalid input {choice}. The available choices are: {choices}")

        if name is None:
            if not dry_run:
                raise MissingDependencyError(
                    "Missing dependency: we need a container manager.\n"
                    "Please install one of podman or docker."
                )
            name = choice if choice in self._manager_classes else self.preference[0]
            logger.debug(f"No container manager available, synthesizing for {name}")

        return self._manager_classes[name](rootful=rootful, sudo_program=sudo_program, euid=euid)
