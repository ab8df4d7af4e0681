"""
AT Protocol Space Invaders utils
"""

from __future__ import annotations

import logging

import pygame

logger = logging.getLogger("atproto_invaders")


def configure_logging(level: int | str = logging.INFO) -> None:
    """
    Configure the root logging handler once for the whole program.

    :param level: Logging level, as a number or a level name
    :type level: int | str
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value between low and high bounds"""
    return low if value < low else high if value > high else value


def to_int32(value: int) -> int:
    """Wrap an integer to a signed 32-bit value."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def set_screen(caption: str, width: int, height: int) -> pygame.Surface:
    """
    Set the screen

    :param caption: Caption of the screen
    :type caption: str

    :param width: Width of the screen
    :type width: int

    :param height: Height of the screen
    :type height: int

    :return: pygame.Surface
    """
    screen = pygame.display.set_mode((width, height))
    pygame.display.set_caption(caption)

    return screen
