"""
dbx - integrated containers on top of podman or docker.

Creates boxes that share the host's devices, home and session services while
keeping package management inside the container.
"""

__version__ = "1.0.0"

# Re-export key components for easier access
from dbx.models.config import DbxConfig
from dbx.models.container import ContainerSpec, CreateOptions
from dbx.models.command import ManagerCommand

__all__ = [
    "DbxConfig",
    "ContainerSpec",
    "CreateOptions",
    "ManagerCommand",
]
