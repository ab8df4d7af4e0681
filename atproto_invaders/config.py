"""
Game settings
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any

from atproto_invaders.constants import (
    DAILY_LIMIT,
    ENEMY_FIRE_CHANCE,
    FPS,
    MAX_AMMUNITION,
    PLAYER_LIVES,
    TITLE,
    WINDOW_SIZE,
)


@dataclass
class Settings:
    """
    Runtime settings for the game and its host.

    Every field has a default, so ``Settings()`` is a playable configuration.
    """

    width: int = WINDOW_SIZE[0]
    height: int = WINDOW_SIZE[1]
    title: str = TITLE
    fps: int = FPS
    lives: int = PLAYER_LIVES
    max_ammunition: int = MAX_AMMUNITION
    enemy_fire_chance: float = ENEMY_FIRE_CHANCE
    daily_limit: int = DAILY_LIMIT
    store_path: str | None = None
    handle: str | None = None
    seed: int | None = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Window size must be positive, got {self.width}x{self.height}"
            )
        if not 0.0 <= self.enemy_fire_chance <= 1.0:
            raise ValueError(
                f"enemy_fire_chance must be in [0, 1], got {self.enemy_fire_chance}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        """
        Build settings from a plain dictionary.

        Nested ``window`` entries (``width``, ``height``, ``title``) are
        flattened; unknown keys are rejected.

        :param data: Settings dictionary
        :type data: dict[str, Any]

        :raises ValueError: On unknown keys
        """
        flat = dict(data)
        window = flat.pop("window", None) or {}
        for key in ("width", "height", "title"):
            if key in window:
                flat[key] = window[key]

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(flat) - known)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")
        return cls(**flat)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
