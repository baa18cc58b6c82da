"""Clone engine: snapshot a stopped container into a new image."""

import logging
from datetime import date
from typing import Callable

from dbx.errors import CloneSourceMissingError, CommitFailedError, SourceRunningError
from dbx.providers.base import BaseManager


logger = logging.getLogger(__name__)


def clone_tag(source: str, day: date) -> str:
    """Image tag for a clone of ``source`` made on ``day``.

    Date granularity means same-day clones of one source share a tag.
    """
    return f"{source}:{day.isoformat()}".lower()


class CloneEngine:
    """Commits an existing container to a tagged image."""

    def __init__(self, manager: BaseManager, today: Callable[[], date] = date.today):
        """Initialize clone engine."""
        self.manager = manager
        self.today = today

    def tag_for(self, source: str) -> str:
        """Tag a clone of ``source`` would get today."""
        return clone_tag(source, self.today())

    async def clone(self, source: str) -> str:
        """Clone ``source`` and return the new image tag."""
        state = await self.manager.container_state(source)
        if state is None:
            raise CloneSourceMissingError(f"Cannot clone container {source}: no such container")
        if state == "running":
            raise SourceRunningError(source)

        container_id = await self.manager.container_id(source)
        if not container_id:
            raise CloneSourceMissingError(f"Cannot clone container {source}: no such container")

        tag = self.tag_for(source)
        logger.info(f"Duplicating {source} as {tag}")
        result = await self.manager.commit(container_id, tag)
        if result.returncode != 0:
            raise CommitFailedError(source, result.stderr)
        return tag
