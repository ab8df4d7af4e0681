"""
Keyboard input routing
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

import pygame

from atproto_invaders.utils import logger

KEY_LEFT = "ArrowLeft"
KEY_RIGHT = "ArrowRight"
KEY_FIRE = "Space"
KEY_PAUSE = "KeyP"
KEY_START = "Enter"
KEY_QUIT = "Escape"


class Intent(str, Enum):
    """One-shot control intents, fired once per key press."""

    FIRE = "fire"
    PAUSE = "pause"
    START = "start"
    QUIT = "quit"


EDGE_KEYS = {
    KEY_FIRE: Intent.FIRE,
    KEY_PAUSE: Intent.PAUSE,
    KEY_START: Intent.START,
    KEY_QUIT: Intent.QUIT,
}

PYGAME_KEY_CODES = {
    pygame.K_LEFT: KEY_LEFT,
    pygame.K_RIGHT: KEY_RIGHT,
    pygame.K_SPACE: KEY_FIRE,
    pygame.K_p: KEY_PAUSE,
    pygame.K_RETURN: KEY_START,
    pygame.K_KP_ENTER: KEY_START,
    pygame.K_ESCAPE: KEY_QUIT,
}

IntentHandler = Callable[[Intent], None]


class InputRouter:
    """
    Tracks held keys and turns key presses into intents.

    Keys are host-neutral codes (``"ArrowLeft"``, ``"Space"``...). Held keys
    drive movement; fire, pause, start and quit are edge-triggered and reach
    the handler once per press, however long the key is held.
    """

    def __init__(self):
        self.keys: dict[str, bool] = {}
        self._handler: IntentHandler | None = None

    @property
    def attached(self) -> bool:
        return self._handler is not None

    def attach(self, handler: IntentHandler) -> None:
        """
        Start routing intents to handler

        :param handler: Called with each edge-triggered intent
        :type handler: IntentHandler
        """
        self._handler = handler
        logger.debug("Input router attached")

    def detach(self) -> None:
        """Stop routing intents and forget every held key."""
        if self._handler is None:
            return
        self._handler = None
        self.keys.clear()
        logger.debug("Input router detached")

    def key_down(self, code: str) -> Intent | None:
        """
        Record a key press.

        :param code: Key identifier, e.g. ``"Space"``
        :type code: str

        :return: The intent fired by this press, if any
        :rtype: Intent | None
        """
        if self._handler is None:
            return None

        repeat = self.keys.get(code, False)
        self.keys[code] = True

        intent = EDGE_KEYS.get(code)
        if intent is None or repeat:
            return None
        self._handler(intent)
        return intent

    def key_up(self, code: str) -> None:
        """
        Record a key release

        :param code: Key identifier, e.g. ``"ArrowLeft"``
        :type code: str
        """
        if self._handler is None:
            return
        self.keys[code] = False

    def is_held(self, code: str) -> bool:
        """Whether the key is currently down."""
        return self.keys.get(code, False)

    @property
    def move_left(self) -> bool:
        return self.is_held(KEY_LEFT)

    @property
    def move_right(self) -> bool:
        return self.is_held(KEY_RIGHT)

    def handle_event(self, event: pygame.event.Event) -> Intent | None:
        """
        Feed a pygame keyboard event; other events are ignored.

        :param event: Event from ``pygame.event.get()``
        :type event: pygame.event.Event
        """
        if event.type not in (pygame.KEYDOWN, pygame.KEYUP):
            return None

        code = PYGAME_KEY_CODES.get(event.key)
        if code is None:
            return None

        if event.type == pygame.KEYDOWN:
            return self.key_down(code)
        self.key_up(code)
        return None
