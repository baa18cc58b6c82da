"""Compatible image list, fetched once per version and cached."""

import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional

import httpx

from dbx.errors import CompatibilityError


logger = logging.getLogger(__name__)

COMPATIBILITY_URL = "https://raw.githubusercontent.com/89luca89/distrobox/main/docs/compatibility.md"

# Column holding image references in the distro table
IMAGE_COLUMN = 3


def cache_file(version: str, environ: Optional[Mapping[str, str]] = None) -> Path:
    """Cache location for a version's compatibility list."""
    environ = os.environ if environ is None else environ
    cache_home = environ.get("XDG_CACHE_HOME") or str(Path(environ.get("HOME") or Path.home()) / ".cache")
    return Path(cache_home) / "dbx" / f"dbx-compatibility-{version}"


def parse_compatibility(markdown: str) -> List[str]:
    """Extract image references from the compatibility table."""
    images = set()
    for line in markdown.splitlines():
        line = line.strip()
        if not line.startswith("|"):
            continue
        columns = line.split("|")
        if len(columns) <= IMAGE_COLUMN:
            continue
        for entry in columns[IMAGE_COLUMN].split("<br>"):
            entry = entry.strip().strip("`")
            # Image references always carry a registry path or a tag
            if entry and " " not in entry and ("/" in entry or ":" in entry):
                images.add(entry)
    return sorted(images)


class CompatibilityList:
    """Fetches and caches the list of known compatible images."""

    def __init__(
        self,
        version: str,
        url: str = COMPATIBILITY_URL,
        environ: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize compatibility list."""
        self.version = version
        self.url = url
        self.cache_path = cache_file(version, environ)
        self.transport = transport

    def _fetch(self) -> str:
        try:
            with httpx.Client(transport=self.transport, timeout=10.0, follow_redirects=True) as client:
                response = client.get(self.url)
                response.raise_for_status()
                return response.text
        except httpx.RequestError as e:
            raise CompatibilityError(f"Connection error: {e}") from e
        except httpx.HTTPStatusError as e:
            raise CompatibilityError(
                f"HTTP error {e.response.status_code} fetching {self.url}"
            ) from e

    def images(self) -> List[str]:
        """Compatible images, from the cache when available."""
        if self.cache_path.is_file():
            logger.debug(f"Using cached compatibility list {self.cache_path}")
            return [line for line in self.cache_path.read_text().splitlines() if line]

        images = parse_compatibility(self._fetch())
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            self.cache_path.write_text("\n".join(images) + "\n")
        except OSError as e:
            logger.warning(f"Cannot write compatibility cache {self.cache_path}: {e}")
        return images
