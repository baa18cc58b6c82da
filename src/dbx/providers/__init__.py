"""Container manager backends for dbx."""

from dbx.providers.base import BaseManager, ProviderStatus
from dbx.providers.docker import DockerManager
from dbx.providers.podman import PodmanManager
from dbx.providers.registry import ManagerRegistry

__all__ = [
    "BaseManager",
    "ProviderStatus",
    "DockerManager",
    "PodmanManager",
    "ManagerRegistry",
]
