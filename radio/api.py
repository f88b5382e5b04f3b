"""
WebSocket broadcast channel and HTTP handlers for the radio
"""
import json
import logging
import random
import string
from typing import Any, Optional, Set

from aiohttp import web

from .engine import STATUS_EVENT, TRACK_EVENT, RotationEngine

logger = logging.getLogger("track_radio")

START_COMMAND = "radio:start"
STOP_COMMAND = "radio:stop"
STATUS_COMMAND = "radio:getStatus"

STOP_ON_ANY = "any"
STOP_ON_LAST = "last"

ENGINE_KEY = web.AppKey("engine", RotationEngine)


class BroadcastChannel:
    """
    Fan-out between connected WebSocket clients and the rotation engine

    Commands from any client go to the engine; engine events go to every
    client. The channel never touches rotation state itself.
    """

    def __init__(self, stop_policy: str = STOP_ON_ANY, replay_on_connect: bool = False):
        if stop_policy not in (STOP_ON_ANY, STOP_ON_LAST):
            raise ValueError(f"unknown stop policy: {stop_policy}")
        self.stop_policy = stop_policy
        self.replay_on_connect = replay_on_connect
        self.subscribers: Set[web.WebSocketResponse] = set()
        self.engine: Optional[RotationEngine] = None

    def attach(self, engine: RotationEngine) -> None:
        self.engine = engine

    # ============================================================
    # FAN-OUT
    # ============================================================

    async def broadcast(self, event: str, data: Any) -> None:
        """Send an event to every connected subscriber"""
        if not self.subscribers:
            return

        message = json.dumps({"type": event, "data": data})

        dead_sockets = set()
        for ws in list(self.subscribers):
            try:
                await ws.send_str(message)
            except Exception as e:
                logger.debug(f"Failed to send to WebSocket: {e}")
                dead_sockets.add(ws)

        self.subscribers.difference_update(dead_sockets)

    # ============================================================
    # WEBSOCKET
    # ============================================================

    async def ws_radio(self, request: web.Request) -> web.WebSocketResponse:
        """WebSocket endpoint for radio control and now-playing updates"""
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        client_id = subscriber_id()
        self.subscribers.add(ws)
        logger.info(f"📡 {client_id} connected (total: {len(self.subscribers)})")

        try:
            if self.replay_on_connect:
                await self._replay(ws)

            async for msg in ws:
                if msg.type == web.WSMsgType.TEXT:
                    await self.handle_message(ws, msg.data, client_id)
        except Exception as e:
            logger.debug(f"WebSocket error: {e}")
        finally:
            self.subscribers.discard(ws)
            logger.info(f"📡 {client_id} disconnected (remaining: {len(self.subscribers)})")
            await self._on_disconnect()

        return ws

    async def handle_message(self, ws: web.WebSocketResponse, raw: str, client_id: str = "") -> None:
        """Dispatch one text frame from a client"""
        if raw == "ping":
            await ws.send_str("pong")
            return

        command = parse_command(raw)

        if command == START_COMMAND:
            await self.engine.start()
        elif command == STOP_COMMAND:
            await self.engine.stop()
        elif command != STATUS_COMMAND:
            logger.debug(f"Ignoring unknown command from {client_id}: {raw!r}")
            return

        # Reply to the sender only
        await ws.send_json({"type": STATUS_EVENT, "data": self.engine.get_status()})

    async def _replay(self, ws: web.WebSocketResponse) -> None:
        await ws.send_json({"type": STATUS_EVENT, "data": self.engine.get_status()})
        if self.engine.current_track is not None:
            await ws.send_json({"type": TRACK_EVENT, "data": self.engine.current_track})

    async def _on_disconnect(self) -> None:
        if self.stop_policy == STOP_ON_LAST and self.subscribers:
            return
        await self.engine.stop()


CHANNEL_KEY = web.AppKey("channel", BroadcastChannel)


def subscriber_id(length: int = 9) -> str:
    """Random id that tags one connection in the logs"""
    alphabet = string.ascii_lowercase + string.digits
    return "sub_" + "".join(random.choice(alphabet) for _ in range(length))


def parse_command(raw: str) -> Optional[str]:
    """Accept either a bare event name or {"type": <event>}"""
    raw = raw.strip()
    if not raw.startswith("{"):
        return raw

    try:
        payload = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload.get("type")


# ============================================================
# HTTP
# ============================================================

async def api_radio_status(request: web.Request) -> web.Response:
    """Current rotation status"""
    engine: RotationEngine = request.app[ENGINE_KEY]
    channel: BroadcastChannel = request.app[CHANNEL_KEY]

    return web.json_response({
        "ok": True,
        "playing": engine.get_status(),
        "track": engine.current_track,
        "pool_size": len(engine.pool),
        "listeners": len(channel.subscribers)
    })


async def api_radio_refresh(request: web.Request) -> web.Response:
    """Reload the track pool after the catalog changed"""
    engine: RotationEngine = request.app[ENGINE_KEY]
    pool_size = await engine.refresh_pool()
    logger.info("🔄 Track pool refreshed (%d tracks)", pool_size)

    return web.json_response({"ok": True, "pool_size": pool_size})
