"""Pydantic models for configuration and validation."""

from dbx.models.config import DbxConfig, DEFAULT_IMAGE, DEFAULT_NAME, ENV_OVERRIDES
from dbx.models.container import ContainerSpec, CreateOptions, derive_name
from dbx.models.command import Arg, ManagerCommand, Mount, MountPlan

__all__ = [
    "DbxConfig",
    "DEFAULT_IMAGE",
    "DEFAULT_NAME",
    "ENV_OVERRIDES",
    "ContainerSpec",
    "CreateOptions",
    "derive_name",
    "Arg",
    "ManagerCommand",
    "Mount",
    "MountPlan",
]
