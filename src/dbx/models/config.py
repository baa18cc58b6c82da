"""Configuration models."""

from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_IMAGE = "registry.fedoraproject.org/fedora-toolbox:latest"
DEFAULT_NAME = "my-dbx"

SUPPORTED_MANAGERS = ("autodetect", "podman", "docker")

# Environment variable -> configuration key
ENV_OVERRIDES: Dict[str, str] = {
    "DBX_CONTAINER_ALWAYS_PULL": "container_always_pull",
    "DBX_CONTAINER_CUSTOM_HOME": "container_user_custom_home",
    "DBX_CONTAINER_HOME_PREFIX": "container_home_prefix",
    "DBX_CONTAINER_IMAGE": "container_image",
    "DBX_CONTAINER_MANAGER": "container_manager",
    "DBX_CONTAINER_NAME": "container_name",
    "DBX_CONTAINER_GENERATE_ENTRY": "container_generate_entry",
    "DBX_NON_INTERACTIVE": "non_interactive",
    "DBX_SUDO_PROGRAM": "dbx_sudo_program",
}


class DbxConfig(BaseModel):
    """Values read from configuration files and the environment."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    container_always_pull: bool = Field(default=False)
    container_user_custom_home: Optional[str] = None
    container_home_prefix: Optional[str] = None
    container_image: Optional[str] = None
    container_manager: str = Field(default="autodetect")
    container_name: Optional[str] = None
    container_generate_entry: bool = Field(default=True)
    non_interactive: bool = Field(default=False)
    dbx_sudo_program: str = Field(default="sudo", min_length=1)
    container_additional_volumes: str = ""
    container_additional_packages: str = ""
    container_init_hook: str = ""
    container_pre_init_hook: str = ""
    container_manager_additional_flags: str = ""

    @field_validator("container_manager")
    @classmethod
    def validate_manager(cls, v):
        """Validate container manager choice."""
        if v not in SUPPORTED_MANAGERS:
            choices = ", ".join(f"'{m}'" for m in SUPPORTED_MANAGERS)
            raise ValueError(
                f"Invalid input {v}. The available choices are: {choices}"
            )
        return v

    @field_validator(
        "container_user_custom_home",
        "container_home_prefix",
        "container_image",
        "container_name",
    )
    @classmethod
    def empty_as_unset(cls, v):
        """Treat empty strings as unset."""
        return v or None
