"""Error kinds raised by dbx.

Every error carries the process exit code the CLI should terminate with.
"""

from typing import Optional


class DbxError(Exception):
    """Base error for dbx."""
    exit_code = 1


class ConfigError(DbxError):
    """Invalid configuration or invocation."""
    pass


class MissingDependencyError(DbxError):
    """A required external program could not be found."""
    exit_code = 127


class HomeCreationError(DbxError):
    """A custom or prefixed home directory could not be created."""
    pass


class NameCollisionError(DbxError):
    """A container with the requested name already exists.

    Not a failure: creation is refused and the CLI exits successfully.
    """
    exit_code = 0


class CloneError(DbxError):
    """Base error for the clone subsystem."""
    pass


class CloneSourceMissingError(CloneError):
    """The clone source container does not exist."""
    pass


class SourceRunningError(CloneError):
    """The clone source container is running."""

    def __init__(self, source: str):
        super().__init__(
            f"Container {source} is running.\n"
            f"Please stop it first.\n"
            f"Cannot clone a running container."
        )
        self.source = source


class CommitFailedError(CloneError):
    """Committing the clone source to an image failed."""

    def __init__(self, source: str, stderr: Optional[str] = None):
        message = f"Cannot clone container: {source}"
        if stderr:
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)
        self.source = source


class ImagePullDeclinedError(DbxError):
    """The operator declined to pull a missing image."""
    exit_code = 0


class InvalidPromptInputError(DbxError):
    """The operator answered the pull prompt with something unexpected."""
    pass


class BackendExecutionError(DbxError):
    """A container manager command returned a non-zero exit code."""

    def __init__(self, message: str, returncode: int):
        super().__init__(message)
        self.returncode = returncode
        # Surface the backend's own code, never report success for a failure
        self.exit_code = returncode if returncode != 0 else 1


class CompatibilityError(DbxError):
    """The compatibility list could not be retrieved."""
    pass
