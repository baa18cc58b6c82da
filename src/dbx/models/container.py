"""Container specification models."""

import posixpath
import re
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


def derive_name(image: str) -> str:
    """Derive a container name from the basename of an image reference."""
    basename = image.rstrip("/").rsplit("/", 1)[-1]
    return re.sub(r"[:.]", "-", basename)


class ContainerSpec(BaseModel):
    """Resolved intent for one container."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Container name")
    image: str = Field(..., min_length=1, description="Image reference")
    hostname: Optional[str] = Field(None, description="Hostname override")
    rootful: bool = Field(default=False)
    custom_home: Optional[str] = None
    home_prefix: Optional[str] = None
    init: bool = Field(default=False, description="Run an init system")
    nvidia: bool = Field(default=False, description="Integrate host GPU drivers")
    additional_flags: Tuple[str, ...] = ()
    additional_packages: Tuple[str, ...] = ()
    volumes: Tuple[str, ...] = ()
    init_hooks: str = ""
    pre_init_hooks: str = ""
    clone: Optional[str] = Field(None, description="Container to clone")

    @property
    def home_override(self) -> Optional[str]:
        """Home directory replacing the host home, if any.

        A custom home always wins over a prefixed one.
        """
        if self.custom_home:
            return self.custom_home
        if self.home_prefix:
            return posixpath.join(self.home_prefix, self.name)
        return None

    def effective_home(self, host_home: str) -> str:
        """Home directory used inside the container."""
        return self.home_override or host_home


class CreateOptions(BaseModel):
    """Resolved options for one create invocation."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    spec: ContainerSpec
    manager: str = Field(default="autodetect")
    always_pull: bool = Field(default=False)
    non_interactive: bool = Field(default=False)
    generate_entry: bool = Field(default=True)
    dry_run: bool = Field(default=False)
    verbose: bool = Field(default=False)
    sudo_program: str = Field(default="sudo")
