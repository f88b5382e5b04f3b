"""
In-memory rotation state
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class RotationState:
    """Playing flag and the track currently on air"""
    is_playing: bool = False
    current_track: Optional[str] = None
