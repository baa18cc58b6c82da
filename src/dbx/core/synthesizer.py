"""Container creation command synthesis.

Pure functions turning resolved options and probe results into the argument
list for the container manager's create verb. Nothing here touches the host.
"""

import posixpath
from typing import List

from dbx.core.probe import EntrypointUtilities, HostProbe
from dbx.models.command import Arg, ManagerCommand, Mount, MountPlan
from dbx.models.container import ContainerSpec, CreateOptions
from dbx.providers.base import BaseManager


TERMINFO_DIRS = "/usr/share/terminfo:/run/host/usr/share/terminfo"
MANAGER_LABEL = "manager=dbx"


def resolve_home(spec: ContainerSpec, probe: HostProbe) -> str:
    """Home directory used inside the container."""
    return spec.effective_home(probe.home)


def resolve_hostname(spec: ContainerSpec, probe: HostProbe) -> str:
    """Container hostname."""
    if spec.hostname:
        return spec.hostname
    if spec.init:
        return f"{spec.name}.{probe.hostname}"
    return probe.hostname


def build_mount_plan(spec: ContainerSpec, probe: HostProbe, utilities: EntrypointUtilities) -> MountPlan:
    """Host paths to expose inside the container, in order."""
    plan = MountPlan()
    home = resolve_home(spec, probe)

    plan.add("/", "/run/host", "rslave")
    plan.add("/dev", mode="rslave")
    plan.add("/sys", mode="rslave")
    plan.add("/tmp", mode="rslave")
    plan.add(str(utilities.init), "/usr/bin/entrypoint", "ro")
    plan.add(str(utilities.export), "/usr/bin/dbx-export", "ro")
    plan.add(str(utilities.host_exec), "/usr/bin/dbx-host-exec", "ro")
    plan.add(probe.home, mode="rslave")
    if home != probe.home:
        plan.add(home, mode="rslave")

    if probe.selinux:
        plan.add("/sys/fs/selinux")
    if probe.journal:
        plan.add("/var/log/journal")
    # With an init system the container manages its own /dev/shm and user session
    if probe.shm_target and not spec.init:
        plan.add(probe.shm_target)
    for store in probe.store_paths:
        plan.add(store, mode="rslave")
    if probe.xdg_runtime_dir and not spec.init:
        plan.add(probe.xdg_runtime_dir, mode="rslave")
    if probe.var_home and probe.var_home != home:
        plan.add(probe.var_home, mode="rslave")
    for identity_file in probe.identity_files:
        plan.add(identity_file, mode="ro")

    for volume in spec.volumes:
        plan.mounts.append(Mount.parse(volume))
    return plan


def _environment(spec: ContainerSpec, probe: HostProbe, manager: BaseManager) -> List[Arg]:
    home = resolve_home(spec, probe)
    env = [
        f"SHELL={posixpath.basename(probe.shell)}",
        f"HOME={home}",
        f"container={manager.name}",
        f"TERMINFO_DIRS={TERMINFO_DIRS}",
        f"CONTAINER_ID={spec.name}",
    ]
    if spec.home_override:
        env.append(f"DBX_HOST_HOME={probe.home}")
    return [Arg("--env", value) for value in env]


def _entrypoint_args(spec: ContainerSpec, probe: HostProbe) -> List[Arg]:
    return [
        Arg("--verbose"),
        Arg("--name", probe.user_name),
        Arg("--user", str(probe.uid)),
        Arg("--group", str(probe.gid)),
        Arg("--home", resolve_home(spec, probe)),
        Arg("--init", "1" if spec.init else "0"),
        Arg("--nvidia", "1" if spec.nvidia else "0"),
        Arg("--pre-init-hooks", spec.pre_init_hooks),
        Arg("--additional-packages", " ".join(spec.additional_packages)),
    ]


def synthesize(
    options: CreateOptions,
    probe: HostProbe,
    utilities: EntrypointUtilities,
    manager: BaseManager,
) -> ManagerCommand:
    """Build the create command for one container."""
    spec = options.spec
    flags: List[Arg] = [
        Arg("--hostname", resolve_hostname(spec, probe)),
        Arg("--name", spec.name),
        Arg("--privileged"),
        Arg("--security-opt", "label=disable"),
        Arg("--security-opt", "apparmor=unconfined"),
        Arg("--pids-limit=-1"),
        # The entrypoint drops privileges to the target user itself
        Arg("--user", "root:root"),
        Arg("--ipc", "host"),
        Arg("--network", "host"),
    ]
    if not spec.init:
        flags.append(Arg("--pid", "host"))
    flags.append(Arg("--label", MANAGER_LABEL))
    flags.extend(_environment(spec, probe, manager))
    flags.extend(
        Arg("--volume", mount.to_volume())
        for mount in build_mount_plan(spec, probe, utilities)
    )
    flags.extend(manager.backend_flags(spec, probe))
    flags.extend(Arg(token) for token in spec.additional_flags)

    return ManagerCommand(
        program=manager.program,
        image=spec.image,
        flags=tuple(flags),
        entrypoint_args=tuple(_entrypoint_args(spec, probe)),
        init_hooks=spec.init_hooks,
    )
