"""Configuration resolution.

Options are layered: built-in defaults, configuration files (in a fixed
priority order), ``DBX_*`` environment variables, then command line flags.
Each layer is a plain mapping merged over the previous one and the result is
validated once.
"""

import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from dbx.errors import ConfigError
from dbx.models.command import Mount
from dbx.models.config import DbxConfig, DEFAULT_IMAGE, DEFAULT_NAME, ENV_OVERRIDES
from dbx.models.container import ContainerSpec, CreateOptions, derive_name
from dbx.utils.layers import merge_layers


logger = logging.getLogger(__name__)

SYSTEM_CONFIG_FILES = (
    "/usr/share/dbx/dbx.conf",
    "/usr/share/defaults/dbx/dbx.conf",
    "/usr/etc/dbx/dbx.conf",
    "/usr/local/share/dbx/dbx.conf",
    "/etc/dbx/dbx.conf",
)

ELEVATION_MARKERS = ("SUDO_USER", "DOAS_USER", "PKEXEC_UID")


@dataclass(frozen=True)
class CliOverrides:
    """Values given on the command line."""
    image: Optional[str] = None
    name: Optional[str] = None
    hostname: Optional[str] = None
    pull: bool = False
    yes: bool = False
    root: bool = False
    clone: Optional[str] = None
    home: Optional[str] = None
    volumes: Tuple[str, ...] = ()
    additional_flags: Tuple[str, ...] = ()
    additional_packages: Tuple[str, ...] = ()
    init_hooks: Optional[str] = None
    pre_init_hooks: Optional[str] = None
    init: bool = False
    nvidia: bool = False
    no_entry: bool = False
    dry_run: bool = False
    verbose: bool = False


def check_elevation(environ: Mapping[str, str], euid: int) -> None:
    """Refuse to run through sudo, doas or pkexec."""
    if euid != 0:
        return
    markers = [m for m in ELEVATION_MARKERS if environ.get(m)]
    if markers:
        raise ConfigError(
            "Running dbx via sudo, doas or pkexec is not supported.\n"
            "Instead, please try running:\n"
            "  dbx create --root"
        )


def parse_config_text(text: str) -> Dict[str, str]:
    """Parse key=value lines of a shell-style configuration fragment."""
    values: Dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, raw = line.partition("=")
        key = key.strip()
        if not sep or not key.isidentifier():
            logger.debug(f"Ignoring config line {lineno}: {line}")
            continue
        try:
            tokens = shlex.split(raw, comments=True)
        except ValueError as e:
            raise ConfigError(f"Invalid config line {lineno}: {line} ({e})") from e
        values[key] = " ".join(tokens)
    return values


def cli_layer(overrides: CliOverrides) -> Dict[str, Any]:
    """Configuration keys set by command line flags."""
    layer: Dict[str, Any] = {}
    if overrides.image:
        layer["container_image"] = overrides.image
    if overrides.name:
        layer["container_name"] = overrides.name
    if overrides.pull:
        layer["container_always_pull"] = True
    if overrides.yes:
        layer["non_interactive"] = True
    if overrides.home:
        layer["container_user_custom_home"] = overrides.home
    if overrides.no_entry:
        layer["container_generate_entry"] = False
    if overrides.init_hooks is not None:
        layer["container_init_hook"] = overrides.init_hooks
    if overrides.pre_init_hooks is not None:
        layer["container_pre_init_hook"] = overrides.pre_init_hooks
    return layer


def _split_all(values: Tuple[str, ...]) -> List[str]:
    tokens: List[str] = []
    for value in values:
        tokens.extend(shlex.split(value))
    return tokens


def _checked_volumes(volumes: List[str]) -> Tuple[str, ...]:
    """Reject volumes that do not name a host path."""
    for volume in volumes:
        try:
            Mount.parse(volume)
        except ValueError as e:
            raise ConfigError(f"{e} (expected SRC[:DST[:MODE]])") from e
    return tuple(volumes)


class ConfigResolver:
    """Builds the options for one invocation."""

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        euid: Optional[int] = None,
        config_files: Optional[List[Path]] = None,
    ):
        """Initialize configuration resolver."""
        self.environ = os.environ if environ is None else environ
        self.euid = os.geteuid() if euid is None else euid
        self._config_files = config_files

    @property
    def home(self) -> Path:
        return Path(self.environ.get("HOME") or Path.home())

    def config_files(self) -> List[Path]:
        """Configuration files in priority order, lowest first."""
        if self._config_files is not None:
            return list(self._config_files)
        xdg_config = self.environ.get("XDG_CONFIG_HOME") or str(self.home / ".config")
        return [
            *(Path(p) for p in SYSTEM_CONFIG_FILES),
            Path(xdg_config) / "dbx" / "dbx.conf",
            self.home / ".dbxrc",
        ]

    def file_layers(self) -> List[Dict[str, str]]:
        """Read every existing configuration file."""
        layers = []
        for path in self.config_files():
            if not path.is_file():
                continue
            try:
                content = path.read_text()
            except OSError as e:
                raise ConfigError(f"Cannot read config file {path}: {e}") from e
            layers.append(parse_config_text(content))
            logger.debug(f"Loaded config file: {path}")
        return layers

    def env_layer(self) -> Dict[str, str]:
        """Configuration keys set by DBX_* environment variables."""
        return {
            key: self.environ[var]
            for var, key in ENV_OVERRIDES.items()
            if self.environ.get(var)
        }

    def load(self, overrides: Optional[CliOverrides] = None) -> DbxConfig:
        """Merge all layers into a validated configuration."""
        layers: List[Mapping[str, Any]] = [*self.file_layers(), self.env_layer()]
        if overrides is not None:
            layers.append(cli_layer(overrides))
        data = merge_layers(layers)
        try:
            return DbxConfig(**data)
        except ValidationError as e:
            messages = "; ".join(err["msg"].removeprefix("Value error, ") for err in e.errors())
            raise ConfigError(f"Invalid configuration: {messages}") from e

    def resolve(self, overrides: CliOverrides) -> CreateOptions:
        """Resolve all layers into create options."""
        check_elevation(self.environ, self.euid)
        config = self.load(overrides)

        image = config.container_image
        name = config.container_name
        if image is None:
            image = DEFAULT_IMAGE
            if name is None:
                name = DEFAULT_NAME
        elif name is None:
            name = derive_name(image)

        try:
            spec = ContainerSpec(
                name=name,
                image=image,
                hostname=overrides.hostname,
                rootful=overrides.root or self.euid == 0,
                custom_home=config.container_user_custom_home,
                home_prefix=config.container_home_prefix,
                init=overrides.init,
                nvidia=overrides.nvidia,
                additional_flags=tuple(
                    shlex.split(config.container_manager_additional_flags)
                    + _split_all(overrides.additional_flags)
                ),
                additional_packages=tuple(
                    shlex.split(config.container_additional_packages)
                    + _split_all(overrides.additional_packages)
                ),
                volumes=_checked_volumes(
                    shlex.split(config.container_additional_volumes) + list(overrides.volumes)
                ),
                init_hooks=config.container_init_hook,
                pre_init_hooks=config.container_pre_init_hook,
                clone=overrides.clone,
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid container specification: {e}") from e

        logger.debug(f"Resolved container spec: {spec}")
        return CreateOptions(
            spec=spec,
            manager=config.container_manager,
            always_pull=config.container_always_pull,
            non_interactive=config.non_interactive,
            generate_entry=config.container_generate_entry,
            dry_run=overrides.dry_run,
            verbose=overrides.verbose,
            sudo_program=config.dbx_sudo_program,
        )
