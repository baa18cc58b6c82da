"""Docker backend."""

from typing import List, TYPE_CHECKING

from dbx.models.command import Arg
from dbx.models.container import ContainerSpec
from dbx.providers.base import BaseManager

if TYPE_CHECKING:
    from dbx.core.probe import HostProbe


class DockerManager(BaseManager):
    """Docker container manager.

    Docker understands none of the podman-only flags (kept groups, host
    ulimits, systemd mode, keep-id user namespaces).
    """

    name = "docker"

    def backend_flags(self, spec: ContainerSpec, probe: "HostProbe") -> List[Arg]:
        return []
