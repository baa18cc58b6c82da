"""Host environment probing.

Every check is read-only and re-run on each invocation, since host state may
change between runs. The filesystem root is injectable so tests can point the
prober at a fake tree.
"""

import logging
import os
import platform
import pwd
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from dbx.errors import HomeCreationError, MissingDependencyError
from dbx.utils.paths import Found, find_program


logger = logging.getLogger(__name__)

STORE_PATHS = ("/nix", "/gnu", "/var/guix", "/run/current-system/sw")
IDENTITY_FILES = ("/etc/hosts", "/etc/localtime", "/etc/resolv.conf")

ENTRYPOINT_UTILITY = "dbx-init"
EXPORT_UTILITY = "dbx-export"
HOST_EXEC_UTILITY = "dbx-host-exec"


@dataclass(frozen=True)
class HostProbe:
    """Results of probing the host."""
    user_name: str
    uid: int
    gid: int
    home: str
    shell: str
    hostname: str
    selinux: bool = False
    journal: bool = False
    shm_target: Optional[str] = None
    store_paths: Tuple[str, ...] = ()
    xdg_runtime_dir: Optional[str] = None
    var_home: Optional[str] = None
    identity_files: Tuple[str, ...] = ()
    crun_available: bool = False


@dataclass(frozen=True)
class EntrypointUtilities:
    """Host paths of the helpers mounted into every container."""
    init: Path
    export: Path
    host_exec: Path


class HostProber:
    """Inspects the host to decide which integrations apply."""

    def __init__(self, root: Path = Path("/"), environ: Optional[Dict[str, str]] = None):
        """Initialize prober."""
        self.root = Path(root)
        self.environ = os.environ if environ is None else environ

    def _host(self, path: str) -> Path:
        return self.root / path.lstrip("/")

    def _exists(self, path: str) -> bool:
        return self._host(path).exists()

    def _is_dir(self, path: str) -> bool:
        return self._host(path).is_dir()

    def _realpath(self, path: str) -> str:
        resolved = self._host(path).resolve()
        try:
            return "/" + str(resolved.relative_to(self.root.resolve()))
        except ValueError:
            return str(resolved)

    def _user(self) -> Tuple[str, int, int, str, str]:
        uid = os.getuid()
        gid = os.getgid()
        try:
            entry = pwd.getpwuid(uid)
            name, pw_home, pw_shell = entry.pw_name, entry.pw_dir, entry.pw_shell
        except KeyError:
            name = self.environ.get("USER", str(uid))
            pw_home, pw_shell = "", ""
        home = self.environ.get("HOME") or pw_home
        shell = self.environ.get("SHELL") or pw_shell or "/bin/bash"
        return name, uid, gid, home, shell

    def probe(self) -> HostProbe:
        """Probe the host."""
        user_name, uid, gid, home, shell = self._user()

        shm_target = None
        if self._host("/dev/shm").is_symlink():
            shm_target = self._realpath("/dev/shm")

        store_paths = tuple(path for path in STORE_PATHS if self._is_dir(path))

        runtime_dir = f"/run/user/{uid}"
        var_home = f"/var/home/{user_name}"

        probe = HostProbe(
            user_name=user_name,
            uid=uid,
            gid=gid,
            home=home,
            shell=shell,
            hostname=platform.node(),
            selinux=self._is_dir("/sys/fs/selinux"),
            journal=self._is_dir("/var/log/journal"),
            shm_target=shm_target,
            store_paths=store_paths,
            xdg_runtime_dir=runtime_dir if self._is_dir(runtime_dir) else None,
            var_home=var_home if self._is_dir(var_home) else None,
            identity_files=tuple(f for f in IDENTITY_FILES if self._exists(f)),
            crun_available=shutil.which("crun") is not None,
        )
        logger.debug(f"Host probe: {probe}")
        return probe


def ensure_home(path: str) -> None:
    """Create a custom or prefixed home directory if missing."""
    home = Path(path)
    if home.is_dir():
        return
    try:
        home.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise HomeCreationError(
            f"Do you have permission to write to {path}?\n{e}"
        ) from e
    logger.debug(f"Created home directory {path}")


def resolve_entrypoint_utilities(colocated_dir: Optional[Path] = None) -> EntrypointUtilities:
    """Locate the entrypoint, export and host-exec helpers."""
    paths = {}
    for name in (ENTRYPOINT_UTILITY, EXPORT_UTILITY, HOST_EXEC_UTILITY):
        result = find_program(name, colocated_dir)
        if not isinstance(result, Found):
            raise MissingDependencyError(f"Error: {result.name} not found!")
        paths[name] = result.path
    return EntrypointUtilities(
        init=paths[ENTRYPOINT_UTILITY],
        export=paths[EXPORT_UTILITY],
        host_exec=paths[HOST_EXEC_UTILITY],
    )
