import asyncio
import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pytest

from atproto_invaders.config import Settings
from atproto_invaders.errors import NoIdentifier
from atproto_invaders.game import SpaceInvadersGame
from atproto_invaders.identity import DailyQuota, Session


class FakeProvider:
    """Identity provider returning fixed stats."""

    def __init__(
        self,
        handle="test.user",
        ammunition=100,
        tags=("social", "tech"),
        used=0,
        limit=10,
        fail_auth=False,
    ):
        self.handle = handle
        self.ammunition = ammunition
        self.tags = list(tags)
        self.used = used
        self.limit = limit
        self.fail_auth = fail_auth
        self.recorded = 0

    async def authenticate(self):
        if self.fail_auth:
            raise NoIdentifier("No identifier provided")
        return Session(handle=self.handle)

    async def get_ammunition_seed(self, session):
        return self.ammunition

    async def get_multiplier_inputs(self, session):
        return list(self.tags)

    def check_daily_quota(self, session):
        return DailyQuota(used=self.used, limit=self.limit)

    def record_session(self, session):
        self.recorded += 1
        self.used += 1


class RecordingCanvas:
    """Canvas that records every drawing call."""

    def __init__(self, width=800, height=600):
        self.width = width
        self.height = height
        self.calls = []
        self.released = False

    def set_color(self, color):
        self.calls.append(("color", color))

    def fill_rect(self, x, y, width, height):
        self.calls.append(("rect", x, y, width, height))

    def draw_text(self, text, x, y, size=16, align="left"):
        self.calls.append(("text", text))

    def release(self):
        self.released = True

    @property
    def texts(self):
        return [c[1] for c in self.calls if c[0] == "text"]


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def messages():
    return []


@pytest.fixture
def make_game(provider, messages):
    def factory(client=None, **settings):
        settings.setdefault("enemy_fire_chance", 0.0)
        return SpaceInvadersGame(
            client=client or provider,
            settings=Settings(**settings),
            canvas_factory=RecordingCanvas,
            notifier=lambda message, kind: messages.append((message, kind)),
        )

    return factory


@pytest.fixture
def game(make_game):
    """A game loaded to the menu."""
    g = make_game()
    assert asyncio.run(g.init())
    return g


@pytest.fixture
def playing(game):
    game.start_game()
    return game
