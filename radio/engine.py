"""
Track rotation engine

Keeps the single rotation for the process: which track is on air, whether the
radio is playing, and the pool of tracks it picks from. While playing, a
scheduled task advances the rotation every `interval` seconds and announces
each pick through the injected broadcast callable.
"""
import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Optional, Tuple

from .catalog import CatalogReader
from .state import RotationState

logger = logging.getLogger("track_radio")

TRACK_EVENT = "radio:track"
STATUS_EVENT = "radio:status"

DEFAULT_INTERVAL = 5.0
DEFAULT_POOL_LIMIT = 1000

Broadcast = Callable[[str, Any], Awaitable[None]]


class RotationEngine:

    def __init__(
        self,
        catalog: CatalogReader,
        broadcast: Broadcast,
        interval: float = DEFAULT_INTERVAL,
        pool_limit: int = DEFAULT_POOL_LIMIT,
        rng: Optional[random.Random] = None
    ):
        if interval <= 0:
            raise ValueError("rotation interval must be positive")
        self.interval = interval
        self.pool_limit = pool_limit
        self.state = RotationState()
        self._catalog = catalog
        self._broadcast = broadcast
        self._random = rng or random.Random()
        self._pool: Tuple[str, ...] = ()
        self._task: Optional[asyncio.Task] = None

    @property
    def pool(self) -> Tuple[str, ...]:
        return self._pool

    @property
    def current_track(self) -> Optional[str]:
        return self.state.current_track

    def get_status(self) -> bool:
        return self.state.is_playing

    # ============================================================
    # POOL
    # ============================================================

    async def load_pool(self) -> int:
        """
        Rebuild the pool from the catalog

        On failure the previous pool stays in place. Returns the pool size.
        """
        try:
            tracks = await self._catalog.fetch_tracks(self.pool_limit)
        except Exception as e:
            logger.error(f"Failed to load track pool: {e}")
            return len(self._pool)

        # Swapped by reference; a tick never sees a half-built pool
        self._pool = tuple(dict.fromkeys(t.identifier for t in tracks if t.has_audio))

        if self._pool:
            logger.info("📀 Track pool loaded: %d playable of %d", len(self._pool), len(tracks))
        else:
            logger.warning("Track pool is empty, rotation will idle")
        return len(self._pool)

    async def refresh_pool(self) -> int:
        return await self.load_pool()

    # ============================================================
    # PLAYBACK CONTROL
    # ============================================================

    async def start(self) -> None:
        if self._task is not None:
            return

        self.state.is_playing = True
        task = self._task = asyncio.create_task(self._rotate())
        logger.info("▶️ Radio started (every %.1fs)", self.interval)

        track = self._advance()
        await self._broadcast(STATUS_EVENT, True)
        # A stop/start during the await re-arms a new handle; its pick wins
        if track is not None and self._task is task:
            await self._broadcast(TRACK_EVENT, track)

    async def stop(self) -> None:
        if self._task is None:
            return

        # Cancel before the first await so no tick can run after stop()
        task, self._task = self._task, None
        task.cancel()
        self.state.is_playing = False
        logger.info("⏹️ Radio stopped")

        await self._broadcast(STATUS_EVENT, False)

    async def select_and_broadcast(self) -> Optional[str]:
        """Run one tick: pick the next track and announce it"""
        track = self._advance()
        if track is not None:
            await self._broadcast(TRACK_EVENT, track)
        return track

    async def _rotate(self) -> None:
        # Fixed rate: deadlines do not drift with fan-out time
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while True:
            deadline += self.interval
            delay = deadline - loop.time()
            if delay < 0:
                # Overran a whole period; restart the schedule from now
                deadline = loop.time()
                delay = 0
            await asyncio.sleep(delay)
            try:
                await self.select_and_broadcast()
            except Exception as e:
                logger.error(f"Rotation tick failed: {e}")

    def _advance(self) -> Optional[str]:
        pool = self._pool
        if not pool:
            return None

        if len(pool) == 1:
            # Re-announced every tick so late joiners resync
            track = pool[0]
        else:
            candidates = [t for t in pool if t != self.state.current_track]
            track = self._random.choice(candidates)

        self.state.current_track = track
        logger.debug("🎵 Now playing: %s", track)
        return track
