"""
Drawing of the game state.

The renderer only reads the game; it draws through a small ``Canvas``
capability so the simulation can be tested without a display.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence, Union

import pygame

from atproto_invaders.constants import (
    COLOR_BACKGROUND,
    COLOR_GAMEOVER_OVERLAY,
    COLOR_OVERLAY,
    COLOR_TEXT,
)
from atproto_invaders.entities import Entity
from atproto_invaders.states import GameState

if TYPE_CHECKING:
    from atproto_invaders.game import SpaceInvadersGame

Color = Union[str, Sequence[int]]


class Canvas(Protocol):
    """Minimal drawing surface"""

    def set_color(self, color: Color) -> None: ...

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None: ...

    def draw_text(
        self, text: str, x: float, y: float, size: int = 16, align: str = "left"
    ) -> None: ...

    def release(self) -> None: ...


class PygameCanvas:
    """
    Canvas drawing on a pygame surface.

    Text is anchored on its baseline at ``(x, y)``; ``align`` is ``"left"``
    or ``"center"``. Colors with an alpha channel below 255 are blended.
    """

    def __init__(self, surface: pygame.Surface):
        self.surface: pygame.Surface | None = surface
        self._color = pygame.Color(255, 255, 255)
        self._fonts: dict[int, pygame.font.Font] = {}

    def set_color(self, color: Color) -> None:
        if isinstance(color, str):
            self._color = pygame.Color(color)
        else:
            self._color = pygame.Color(*color)

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        rect = pygame.Rect(int(x), int(y), int(width), int(height))
        if self._color.a < 255:
            layer = pygame.Surface(rect.size, pygame.SRCALPHA)
            layer.fill(self._color)
            self.surface.blit(layer, rect.topleft)
        else:
            self.surface.fill(self._color, rect)

    def draw_text(
        self, text: str, x: float, y: float, size: int = 16, align: str = "left"
    ) -> None:
        image = self._font(size).render(text, True, self._color)
        rect = image.get_rect()
        if align == "center":
            rect.midbottom = (int(x), int(y))
        else:
            rect.bottomleft = (int(x), int(y))
        self.surface.blit(image, rect)

    def _font(self, size: int) -> pygame.font.Font:
        if not pygame.font.get_init():
            pygame.font.init()
        if size not in self._fonts:
            self._fonts[size] = pygame.font.Font(None, size)
        return self._fonts[size]

    def release(self) -> None:
        self._fonts.clear()
        self.surface = None


class Renderer:
    """
    Draws one frame: background, player, enemies, bullets, HUD, then the
    overlay for the current state.
    """

    def __init__(self, canvas: Canvas):
        self.canvas = canvas

    def render(self, game: "SpaceInvadersGame") -> None:
        self._draw_background(game)
        if game.player is not None:
            self._draw_entity(game.player)
        for enemy in game.enemies:
            self._draw_entity(enemy)
        for bullet in game.bullets:
            self._draw_entity(bullet)
        for bullet in game.enemy_bullets:
            self._draw_entity(bullet)
        self._draw_hud(game)
        self._draw_notice(game)

        if game.state is GameState.MENU:
            self._draw_menu(game)
        elif game.state is GameState.GAMEOVER:
            self._draw_game_over(game)
        elif game.state is GameState.PAUSED:
            self._draw_paused(game)

    def _draw_background(self, game: "SpaceInvadersGame") -> None:
        self.canvas.set_color(COLOR_BACKGROUND)
        self.canvas.fill_rect(0, 0, game.width, game.height)

    def _draw_entity(self, entity: Entity) -> None:
        self.canvas.set_color(entity.color)
        self.canvas.fill_rect(entity.x, entity.y, entity.width, entity.height)

    def _draw_hud(self, game: "SpaceInvadersGame") -> None:
        c = self.canvas
        c.set_color(COLOR_TEXT)
        c.draw_text(f"Score: {game.score}", 10, 25)
        c.draw_text(f"Ammo: {game.ammunition}", 10, 50)
        c.draw_text(f"Lives: {game.lives}", 10, 75)
        c.draw_text(f"Level: {game.level}", 10, 100)
        c.draw_text(f"Multiplier: {game.multiplier:.1f}x", 10, 125)
        c.draw_text(
            "Controls: Arrow keys to move, Space to shoot, P to pause",
            10,
            game.height - 10,
            size=12,
        )

    def _draw_notice(self, game: "SpaceInvadersGame") -> None:
        if not game.notice:
            return
        self.canvas.set_color("#00ffff")
        self.canvas.draw_text(game.notice, game.width / 2, 160, size=28, align="center")

    def _draw_menu(self, game: "SpaceInvadersGame") -> None:
        c = self.canvas
        cx = game.width / 2
        c.set_color(COLOR_OVERLAY)
        c.fill_rect(0, 0, game.width, game.height)

        c.set_color(COLOR_TEXT)
        c.draw_text("AT Protocol Space Invaders", cx, 200, size=32, align="center")
        c.draw_text(f"Ammunition: {game.ammunition}", cx, 250, size=18, align="center")
        c.draw_text(
            f"Multiplier: {game.multiplier:.1f}x", cx, 280, size=18, align="center"
        )
        c.draw_text("Press ENTER to start", cx, 350, size=18, align="center")

    def _draw_paused(self, game: "SpaceInvadersGame") -> None:
        c = self.canvas
        cx = game.width / 2
        c.set_color(COLOR_OVERLAY)
        c.fill_rect(0, 0, game.width, game.height)

        c.set_color("#ffff00")
        c.draw_text("PAUSED", cx, 250, size=36, align="center")
        c.set_color(COLOR_TEXT)
        c.draw_text("Press P to resume", cx, 300, size=16, align="center")

    def _draw_game_over(self, game: "SpaceInvadersGame") -> None:
        c = self.canvas
        cx = game.width / 2
        c.set_color(COLOR_GAMEOVER_OVERLAY)
        c.fill_rect(0, 0, game.width, game.height)

        c.set_color("#ff0000")
        c.draw_text("GAME OVER", cx, 250, size=36, align="center")
        c.set_color(COLOR_TEXT)
        c.draw_text(f"Final Score: {game.score}", cx, 300, size=20, align="center")
        c.draw_text("Restart the game to play again", cx, 350, size=16, align="center")
