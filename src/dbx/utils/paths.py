"""Lookup of helper programs shipped alongside dbx."""

import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class Found:
    """A program that was located."""
    name: str
    path: Path


@dataclass(frozen=True)
class NotFound:
    """A program that could not be located."""
    name: str


LookupResult = Union[Found, NotFound]


def script_dir() -> Path:
    """Directory holding the running dbx script."""
    return Path(sys.argv[0]).resolve().parent


def find_program(name: str, colocated_dir: Optional[Path] = None) -> LookupResult:
    """Locate a program next to the running script, then on PATH."""
    directory = colocated_dir if colocated_dir is not None else script_dir()
    candidate = directory / name
    if candidate.is_file():
        return Found(name, candidate)
        
    found = shutil.which(name)
    if found:
        return Found(name, Path(found))
        
    return NotFound(name)
