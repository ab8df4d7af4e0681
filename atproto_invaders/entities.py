"""
Game entity dataclasses
"""

from __future__ import annotations

from dataclasses import dataclass

from atproto_invaders.constants import (
    BULLET_SIZE,
    COLOR_BACK_ROW,
    COLOR_ENEMY_BULLET,
    COLOR_FRONT_ROW,
    COLOR_MID_ROW,
    COLOR_PLAYER,
    COLOR_PLAYER_BULLET,
    ENEMY_BULLET_SPEED,
    ENEMY_COLS,
    ENEMY_ORIGIN,
    ENEMY_ROWS,
    ENEMY_SIZE,
    ENEMY_SPACING,
    ENEMY_SPEED,
    PLAYER_BULLET_SPEED,
    PLAYER_SIZE,
    PLAYER_SPEED,
)


@dataclass
class Entity:
    """
    Axis-aligned box shared by the player, enemies and bullets
    """

    x: float
    y: float
    width: float
    height: float
    speed: float = 0.0
    color: str = "#ffffff"

    def __post_init__(self):
        assert self.width > 0 and self.height > 0, (
            f"{type(self).__name__} needs a positive size, "
            f"got {self.width}x{self.height}"
        )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def overlaps(self, other: "Entity") -> bool:
        return rects_overlap(self, other)


@dataclass
class Enemy(Entity):
    """Formation member; direction is +1 (right) or -1 (left)"""

    direction: int = 1


Player = Entity
Bullet = Entity


def rects_overlap(a: Entity, b: Entity) -> bool:
    """
    Check whether two boxes overlap.

    Boxes that only share an edge do not overlap.
    """
    return (
        a.x < b.x + b.width
        and a.x + a.width > b.x
        and a.y < b.y + b.height
        and a.y + a.height > b.y
    )


def row_color(row: int) -> str:
    if row < 2:
        return COLOR_FRONT_ROW
    if row < 4:
        return COLOR_MID_ROW
    return COLOR_BACK_ROW


def make_player(canvas_width: float, canvas_height: float) -> Player:
    width, height = PLAYER_SIZE
    return Player(
        x=canvas_width / 2 - width / 2,
        y=canvas_height - 50,
        width=width,
        height=height,
        speed=PLAYER_SPEED,
        color=COLOR_PLAYER,
    )


def make_formation() -> list[Enemy]:
    """
    Build a fresh formation, row by row from the top-left enemy.

    :return: ENEMY_ROWS * ENEMY_COLS enemies moving right
    :rtype: list[Enemy]
    """
    ox, oy = ENEMY_ORIGIN
    dx, dy = ENEMY_SPACING
    width, height = ENEMY_SIZE

    return [
        Enemy(
            x=ox + col * dx,
            y=oy + row * dy,
            width=width,
            height=height,
            speed=ENEMY_SPEED,
            color=row_color(row),
            direction=1,
        )
        for row in range(ENEMY_ROWS)
        for col in range(ENEMY_COLS)
    ]


def player_bullet(player: Player) -> Bullet:
    """Bullet leaving the player's top edge, centered on the player."""
    width, height = BULLET_SIZE
    return Bullet(
        x=player.x + player.width / 2 - width / 2,
        y=player.y,
        width=width,
        height=height,
        speed=PLAYER_BULLET_SPEED,
        color=COLOR_PLAYER_BULLET,
    )


def enemy_bullet(enemy: Enemy) -> Bullet:
    """Bullet leaving the enemy's bottom edge, centered on the enemy."""
    width, height = BULLET_SIZE
    return Bullet(
        x=enemy.x + enemy.width / 2 - width / 2,
        y=enemy.y + enemy.height,
        width=width,
        height=height,
        speed=ENEMY_BULLET_SPEED,
        color=COLOR_ENEMY_BULLET,
    )
