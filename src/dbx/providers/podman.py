"""Podman backend."""

from typing import List, TYPE_CHECKING

from dbx.models.command import Arg
from dbx.models.container import ContainerSpec
from dbx.providers.base import BaseManager

if TYPE_CHECKING:
    from dbx.core.probe import HostProbe


class PodmanManager(BaseManager):
    """Podman container manager."""

    name = "podman"

    def backend_flags(self, spec: ContainerSpec, probe: "HostProbe") -> List[Arg]:
        """Podman-only flags."""
        flags: List[Arg] = []
        # crun keeps the user's supplementary groups in rootless containers
        if probe.crun_available:
            flags.append(Arg("--runtime=crun"))
        flags.extend([
            Arg("--annotation", "run.oci.keep_original_groups=1"),
            Arg("--mount", "type=devpts,destination=/dev/pts"),
            Arg("--ulimit", "host"),
        ])
        if spec.init:
            flags.append(Arg("--systemd=always"))
        if not spec.rootful:
            flags.append(Arg("--userns", "keep-id"))
        return flags
