"""Container manager command models."""

import shlex
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple


ENTRYPOINT_PATH = "/usr/bin/entrypoint"


_CONTROL_ESCAPES = {"\n": "\\n", "\t": "\\t", "\r": "\\r"}


def _has_control(value: str) -> bool:
    return any(ord(char) < 32 or ord(char) == 127 for char in value)


def _ansi_c_quote(value: str) -> str:
    """Quote a value as $'...' so control characters print as escapes."""
    escaped = []
    for char in value:
        if char in ("\\", "'"):
            escaped.append(f"\\{char}")
        elif char in _CONTROL_ESCAPES:
            escaped.append(_CONTROL_ESCAPES[char])
        elif ord(char) < 32 or ord(char) == 127:
            escaped.append(f"\\x{ord(char):02x}")
        else:
            escaped.append(char)
    return "$'" + "".join(escaped) + "'"


def _double_quote(value: str) -> str:
    """Quote a value for display inside double quotes."""
    if _has_control(value):
        return _ansi_c_quote(value)
    for char in ("\\", '"', "$", "`"):
        value = value.replace(char, f"\\{char}")
    return f'"{value}"'


def _single_quote(value: str) -> str:
    if _has_control(value):
        return _ansi_c_quote(value)
    return shlex.quote(value)


@dataclass(frozen=True)
class Mount:
    """A host path exposed inside the container."""
    host_path: str
    container_path: str
    mode: Optional[str] = None

    @classmethod
    def parse(cls, volume: str) -> "Mount":
        """Parse a SRC[:DST[:MODE]] volume string."""
        parts = volume.split(":", 2)
        if not parts[0]:
            raise ValueError(f"Invalid volume: {volume!r}")
        host_path = parts[0]
        container_path = parts[1] if len(parts) > 1 and parts[1] else host_path
        mode = parts[2] if len(parts) > 2 and parts[2] else None
        return cls(host_path, container_path, mode)

    def to_volume(self) -> str:
        """Format as a --volume value."""
        volume = f"{self.host_path}:{self.container_path}"
        if self.mode:
            volume = f"{volume}:{self.mode}"
        return volume


@dataclass
class MountPlan:
    """Ordered sequence of mounts."""
    mounts: List[Mount] = field(default_factory=list)

    def add(self, host_path: str, container_path: Optional[str] = None, mode: Optional[str] = None):
        """Append a mount; the container path defaults to the host path."""
        self.mounts.append(Mount(host_path, container_path or host_path, mode))

    def host_paths(self) -> List[str]:
        """List mounted host paths in order."""
        return [m.host_path for m in self.mounts]

    def __iter__(self) -> Iterator[Mount]:
        return iter(self.mounts)

    def __len__(self) -> int:
        return len(self.mounts)


@dataclass(frozen=True)
class Arg:
    """A single flag, optionally followed by its value."""
    flag: str
    value: Optional[str] = None

    def tokens(self) -> List[str]:
        """Serialize to argv tokens."""
        if self.value is None:
            return [self.flag]
        return [self.flag, self.value]

    def render(self) -> str:
        """Serialize for display."""
        if self.value is None:
            return self.flag
        return f"{self.flag} {_double_quote(self.value)}"


@dataclass(frozen=True)
class ManagerCommand:
    """Arguments for the container manager's create verb.

    The entrypoint override, image, entrypoint arguments and the init hooks
    payload are always emitted last, after every manager flag.
    """
    program: Tuple[str, ...]
    image: str
    flags: Tuple[Arg, ...] = ()
    entrypoint_args: Tuple[Arg, ...] = ()
    init_hooks: str = ""
    verb: str = "create"
    entrypoint: str = ENTRYPOINT_PATH

    @staticmethod
    def _flatten(args: Iterable[Arg]) -> List[str]:
        tokens: List[str] = []
        for arg in args:
            tokens.extend(arg.tokens())
        return tokens

    def argv(self) -> List[str]:
        """Full argument vector for execution."""
        return [
            *self.program,
            self.verb,
            *self._flatten(self.flags),
            "--entrypoint",
            self.entrypoint,
            self.image,
            *self._flatten(self.entrypoint_args),
            "--",
            self.init_hooks,
        ]

    def render(self) -> str:
        """Single printable line."""
        parts = [shlex.join(self.program), self.verb]
        parts.extend(arg.render() for arg in self.flags)
        parts.extend(["--entrypoint", self.entrypoint, self.image])
        parts.extend(arg.render() for arg in self.entrypoint_args)
        parts.extend(["--", _single_quote(self.init_hooks)])
        return " ".join(parts)

    def has_flag(self, flag: str) -> bool:
        """Check whether a manager flag is present."""
        return any(arg.flag == flag for arg in self.flags)

    def values(self, flag: str) -> List[str]:
        """All values given for a manager flag."""
        return [arg.value for arg in self.flags if arg.flag == flag and arg.value is not None]
