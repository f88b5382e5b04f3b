"""
Runtime configuration read from the environment
"""
import os
from pathlib import Path

SERVER_HOST = os.environ.get("SERVER_HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", 3000))

DATA_DIR = Path(os.environ.get("RADIO_DATA_DIR", "./data"))
CATALOG_FILE = Path(os.environ.get("RADIO_CATALOG_FILE", DATA_DIR / "tracks.json"))

# Rotation period in seconds and max catalog entries per pool load
ROTATION_INTERVAL = float(os.environ.get("RADIO_INTERVAL", 5))
POOL_LIMIT = int(os.environ.get("RADIO_POOL_LIMIT", 1000))

# "any": stop when any subscriber disconnects, "last": only when none remain
STOP_POLICY = os.environ.get("RADIO_STOP_POLICY", "any").lower()
REPLAY_ON_CONNECT = os.environ.get("RADIO_REPLAY_ON_CONNECT", "").lower() in ("1", "true", "yes", "on")
