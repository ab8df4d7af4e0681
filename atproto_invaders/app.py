"""
Pygame host for the game: window, frame loop, messages and teardown.
"""

from __future__ import annotations

import argparse
import asyncio
from typing import ClassVar, Sequence

import pygame

from atproto_invaders.config import Settings
from atproto_invaders.errors import AlreadyRunning
from atproto_invaders.game import SpaceInvadersGame
from atproto_invaders.identity import HANDLE_KEY, SocialStatsClient
from atproto_invaders.render import PygameCanvas
from atproto_invaders.storage import JsonFileStore, MemoryStore
from atproto_invaders.utils import configure_logging, logger, set_screen


async def prompt_handle() -> str | None:
    """Ask for the player's handle on the terminal."""
    try:
        return await asyncio.to_thread(
            input, "Enter your AT Protocol handle (e.g., username.bsky.social): "
        )
    except EOFError:
        return None


def fixed_handle(handle: str):
    """Credential resolver that always answers with handle."""

    async def resolve() -> str:
        return handle

    return resolve


def build_client(settings: Settings) -> SocialStatsClient:
    """
    Identity client for the command line settings.

    A ``--handle`` overrides the stored one; if it cannot be written to the
    store it is still used for this run.

    :param settings: Game settings
    :type settings: Settings

    :return: SocialStatsClient
    """
    store = JsonFileStore(settings.store_path) if settings.store_path else MemoryStore()
    resolver = prompt_handle

    if settings.handle and settings.handle.strip():
        handle = settings.handle.strip()
        resolver = fixed_handle(handle)
        try:
            store.set(HANDLE_KEY, handle)
        except OSError as e:
            logger.warning(f"Could not store handle {handle}, playing unsaved: {e}")
            data = {key: store.get(key) for key in store.keys()}
            data[HANDLE_KEY] = handle
            store = MemoryStore(data)

    return SocialStatsClient(
        store=store, resolver=resolver, daily_limit=settings.daily_limit
    )


class GameHost:
    """
    Owns the window and drives one game instance per display refresh.

    Only one game may be active per process; ``claim`` enforces it.
    """

    _active: ClassVar[SpaceInvadersGame | None] = None

    def __init__(self, settings: Settings, client: SocialStatsClient | None = None):
        logger.debug(f"Initializing {settings.title}")
        self.settings = settings
        self.client = client
        self._clock = pygame.time.Clock()
        self._screen: pygame.Surface | None = None
        self._carry_on = True
        self.game: SpaceInvadersGame | None = None
        pygame.init()

    @classmethod
    def claim(cls, game: SpaceInvadersGame) -> None:
        """
        Register game as the running instance

        :raise AlreadyRunning: If another live instance is registered
        """
        current = cls._active
        if current is not None and current is not game and not current.destroyed:
            raise AlreadyRunning("A game is already running")
        cls._active = game

    @classmethod
    def release(cls, game: SpaceInvadersGame) -> None:
        if cls._active is game:
            cls._active = None

    def _set_screen(self) -> pygame.Surface:
        if self._screen is None:
            logger.debug("Setting screen")
            self._screen = set_screen(
                self.settings.title, self.settings.width, self.settings.height
            )
        return self._screen

    def _make_canvas(self, width: int, height: int) -> PygameCanvas:
        screen = self._set_screen()
        if screen.get_size() != (width, height):
            logger.warning(
                f"Screen is {screen.get_size()}, game asked for {(width, height)}"
            )
        return PygameCanvas(screen)

    def notify(self, message: str, kind: str = "info") -> None:
        """
        Show message on top of the window and wait for a key press.
        """
        if kind == "error":
            logger.error(message)
        else:
            logger.info(message)

        canvas = PygameCanvas(self._set_screen())
        canvas.set_color("#000000")
        canvas.fill_rect(0, 0, self.settings.width, self.settings.height)
        canvas.set_color("#ff4444" if kind == "error" else "#ffffff")
        canvas.draw_text(
            message, self.settings.width / 2, self.settings.height / 2, 24, "center"
        )
        canvas.set_color("#ffffff")
        canvas.draw_text(
            "Press any key",
            self.settings.width / 2,
            self.settings.height / 2 + 40,
            16,
            "center",
        )
        pygame.display.flip()

        while True:
            event = pygame.event.wait()
            if event.type in (pygame.QUIT, pygame.KEYDOWN, pygame.MOUSEBUTTONDOWN):
                return

    def launch(self) -> SpaceInvadersGame | None:
        """
        Build, register and load a game.

        :return: The game once it reached the menu, otherwise None
        """
        client = self.client or SocialStatsClient(
            store=MemoryStore(),
            resolver=prompt_handle,
            daily_limit=self.settings.daily_limit,
        )
        game = SpaceInvadersGame(
            client=client,
            settings=self.settings,
            canvas_factory=self._make_canvas,
            notifier=self.notify,
        )

        try:
            self.claim(game)
        except AlreadyRunning as e:
            logger.warning(str(e))
            return None

        if not asyncio.run(game.init()):
            game.destroy()
            self.release(game)
            return None

        game.on_quit = lambda _: self.stop()
        self.game = game
        return game

    def stop(self) -> None:
        self._carry_on = False

    def handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logger.debug("Quitting the game")
                self.stop()
            else:
                self.game.input.handle_event(event)

    def run(self) -> None:
        """
        Run the game until the window closes or Escape is pressed
        """
        logger.debug("Running the game")
        try:
            if self.launch() is None:
                return

            while self._carry_on:
                self.handle_events()
                if not self._carry_on:
                    break
                self.game.frame()
                pygame.display.flip()
                self._clock.tick(self.settings.fps)
        finally:
            if self.game is not None:
                self.game.destroy()
                self.release(self.game)
            pygame.quit()


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="AT Protocol Space Invaders")
    parser.add_argument("--handle", help="AT Protocol handle to play as")
    parser.add_argument(
        "--store", help="JSON file keeping the handle, stats and daily usage"
    )
    parser.add_argument("--fps", type=int, default=None, help="Frames per second")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def run(argv: Sequence[str] | None = None) -> None:
    """
    Main entry point for AT Protocol Space Invaders.
    """
    args = parse_args(argv)
    configure_logging(args.log_level)

    settings_data = {
        "handle": args.handle,
        "store_path": args.store,
        "seed": args.seed,
    }
    if args.fps is not None:
        settings_data["fps"] = args.fps
    settings = Settings.from_dict(settings_data)

    host = GameHost(settings, client=build_client(settings))
    logger.info("Starting AT Protocol Space Invaders...")
    logger.debug(settings.to_dict())
    host.run()


if __name__ == "__main__":
    run()
