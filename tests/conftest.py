import pytest

from radio.catalog import CatalogUnavailable, Track
from radio.engine import STATUS_EVENT, TRACK_EVENT


class FakeCatalog:
    """In-memory catalog; flip `fail` to simulate an outage"""

    def __init__(self, slugs=(), silent=()):
        self.fail = False
        self.limits = []
        self.set_tracks(slugs, silent)

    def set_tracks(self, slugs=(), silent=()):
        self.tracks = [Track(s, True) for s in slugs] + [Track(s, False) for s in silent]

    async def fetch_tracks(self, limit):
        self.limits.append(limit)
        if self.fail:
            raise CatalogUnavailable("catalog offline")
        return list(self.tracks[:limit])


class Recorder:
    """Broadcast callable that keeps every event it is given"""

    def __init__(self):
        self.events = []

    async def __call__(self, event, data):
        self.events.append((event, data))

    @property
    def tracks(self):
        return [data for event, data in self.events if event == TRACK_EVENT]

    @property
    def statuses(self):
        return [data for event, data in self.events if event == STATUS_EVENT]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_catalog():
    return FakeCatalog
