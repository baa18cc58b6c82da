"""Shared fixtures."""

from pathlib import Path

import pytest

from dbx.core.probe import EntrypointUtilities, HostProbe


@pytest.fixture
def host_probe():
    """Probe results for a plain rootless host."""
    return HostProbe(
        user_name="alice",
        uid=1000,
        gid=1000,
        home="/home/alice",
        shell="/usr/bin/zsh",
        hostname="workstation",
    )


@pytest.fixture
def utilities():
    """Resolved entrypoint helper paths."""
    return EntrypointUtilities(
        init=Path("/usr/bin/dbx-init"),
        export=Path("/usr/bin/dbx-export"),
        host_exec=Path("/usr/bin/dbx-host-exec"),
    )
