"""
Catalog access for the rotation pool
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol

logger = logging.getLogger("track_radio")


class CatalogUnavailable(Exception):
    """The catalog could not be read"""


@dataclass(frozen=True)
class Track:
    identifier: str
    has_audio: bool


class CatalogReader(Protocol):
    async def fetch_tracks(self, limit: int) -> List[Track]:
        ...


class JsonCatalog:
    """
    Catalog backed by a JSON document on disk

    Accepts either a list of track objects or {"tracks": [...]}.
    Each track needs a "slug"; it has audio when "audio_file" is non-empty.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    async def fetch_tracks(self, limit: int) -> List[Track]:
        raw = await asyncio.to_thread(self._read)

        if isinstance(raw, dict):
            raw = raw.get("tracks", [])
        if not isinstance(raw, list):
            raise CatalogUnavailable(f"{self.path}: expected a list of tracks")

        tracks = []
        for item in raw[:limit]:
            if not isinstance(item, dict) or not item.get("slug"):
                logger.debug(f"Skipping malformed catalog entry: {item!r}")
                continue
            tracks.append(Track(
                identifier=str(item["slug"]),
                has_audio=bool(item.get("audio_file"))
            ))
        return tracks

    def _read(self):
        try:
            with self.path.open(encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as e:
            raise CatalogUnavailable(f"{self.path}: {e}") from e
