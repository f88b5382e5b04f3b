#!/usr/bin/env python3
"""
Track Radio - Entry Point
Rotation engine + WebSocket broadcast channel
"""
import logging
import socket
from typing import Optional

from aiohttp import web

from radio import config
from radio.api import (
    CHANNEL_KEY, ENGINE_KEY, BroadcastChannel,
    api_radio_refresh, api_radio_status
)
from radio.catalog import CatalogReader, JsonCatalog
from radio.engine import RotationEngine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("track_radio")


async def load_pool_on_startup(app: web.Application):
    await app[ENGINE_KEY].load_pool()


async def stop_radio_on_cleanup(app: web.Application):
    await app[ENGINE_KEY].stop()


def create_app(
    catalog: Optional[CatalogReader] = None,
    interval: float = config.ROTATION_INTERVAL,
    stop_policy: str = config.STOP_POLICY,
    replay_on_connect: bool = config.REPLAY_ON_CONNECT
) -> web.Application:
    """Create and configure the aiohttp application"""
    app = web.Application()

    channel = BroadcastChannel(stop_policy=stop_policy, replay_on_connect=replay_on_connect)
    engine = RotationEngine(
        catalog or JsonCatalog(config.CATALOG_FILE),
        channel.broadcast,
        interval=interval,
        pool_limit=config.POOL_LIMIT
    )
    channel.attach(engine)
    app[CHANNEL_KEY] = channel
    app[ENGINE_KEY] = engine

    # API routes
    app.router.add_get("/radio/status", api_radio_status)
    app.router.add_post("/radio/refresh", api_radio_refresh)

    # WebSocket for control and now-playing updates
    app.router.add_get("/ws/radio", channel.ws_radio)

    app.on_startup.append(load_pool_on_startup)
    app.on_cleanup.append(stop_radio_on_cleanup)

    logger.info("📻 Track radio ready • every %.1fs • stop policy: %s", interval, stop_policy)
    return app


def get_local_ip():
    """Get local WiFi IP address"""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
        s.close()
        return ip
    except Exception:
        return "localhost"


def main():
    app = create_app()
    local_ip = get_local_ip()

    logger.info(f"🚀 Starting server on {config.SERVER_HOST}:{config.PORT}")
    logger.info(f"💡 Access at: ws://{local_ip}:{config.PORT}/ws/radio")

    web.run_app(app, host=config.SERVER_HOST, port=config.PORT)


if __name__ == "__main__":
    main()
