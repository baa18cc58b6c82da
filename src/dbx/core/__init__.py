"""Creation core: configuration, probing, synthesis, cloning and orchestration."""

from dbx.core.clone import CloneEngine, clone_tag
from dbx.core.config import CliOverrides, ConfigResolver
from dbx.core.engine import CreationEngine, CreationState
from dbx.core.probe import EntrypointUtilities, HostProbe, HostProber
from dbx.core.synthesizer import build_mount_plan, synthesize

__all__ = [
    "CloneEngine",
    "clone_tag",
    "CliOverrides",
    "ConfigResolver",
    "CreationEngine",
    "CreationState",
    "EntrypointUtilities",
    "HostProbe",
    "HostProber",
    "build_mount_plan",
    "synthesize",
]
