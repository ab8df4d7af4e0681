"""
Space Invaders game engine.

``SpaceInvadersGame`` owns the player, the enemy formation and both bullet
lists, advances them once per frame and moves through the lifecycle
loading -> menu -> playing <-> paused -> gameover.
"""

from __future__ import annotations

import math
import random
from typing import Callable

from atproto_invaders.config import Settings
from atproto_invaders.constants import (
    BASE_HIT_SCORE,
    ENEMY_DROP_STEP,
    LOSS_MARGIN,
    NOTICE_FRAMES,
    SPEED_INCREMENT,
)
from atproto_invaders.controls import InputRouter, Intent
from atproto_invaders.entities import (
    Bullet,
    Enemy,
    Player,
    enemy_bullet,
    make_formation,
    make_player,
    player_bullet,
)
from atproto_invaders.errors import QuotaExhausted
from atproto_invaders.identity import Session, SocialStatsClient, calculate_multiplier
from atproto_invaders.render import Canvas, Renderer
from atproto_invaders.states import GameState
from atproto_invaders.utils import clamp, logger

Notifier = Callable[[str, str], None]
CanvasFactory = Callable[[int, int], Canvas]

LOAD_FAILED_MESSAGE = "Failed to load game. Please refresh and try again."
QUOTA_MESSAGE = "Daily limit reached. Come back tomorrow!"


def log_notifier(message: str, kind: str = "info") -> None:
    """Notifier used when the host supplies none."""
    if kind == "error":
        logger.error(message)
    else:
        logger.info(message)


class SpaceInvadersGame:  # pylint: disable=too-many-instance-attributes
    """
    Space Invaders game

    :param client: Identity/stats provider
    :type client: SocialStatsClient | None

    :param settings: Game settings
    :type settings: Settings | None

    :param canvas_factory: Builds the drawing surface during ``init``;
        without one the game runs headless
    :type canvas_factory: CanvasFactory | None

    :param notifier: Blocking message channel, called with (message, kind)
    :type notifier: Notifier | None

    :param rng: Random source for enemy fire
    :type rng: random.Random | None
    """

    def __init__(
        self,
        client: SocialStatsClient | None = None,
        settings: Settings | None = None,
        canvas_factory: CanvasFactory | None = None,
        notifier: Notifier | None = None,
        rng: random.Random | None = None,
    ):  # pylint: disable=too-many-arguments
        self.settings = settings or Settings()
        self.client = client or SocialStatsClient(daily_limit=self.settings.daily_limit)
        self.canvas_factory = canvas_factory
        self.notifier = notifier or log_notifier
        self.rng = rng or random.Random(self.settings.seed)

        self.state = GameState.LOADING
        self.score = 0
        self.ammunition = 100
        self.multiplier = 1.0
        self.lives = self.settings.lives
        self.level = 1
        self.game_speed = 1.0

        self.width = self.settings.width
        self.height = self.settings.height

        self.player: Player | None = None
        self.enemies: list[Enemy] = []
        self.bullets: list[Bullet] = []
        self.enemy_bullets: list[Bullet] = []

        self.notice: str | None = None
        self.notice_frames = 0

        self.input = InputRouter()
        self.canvas: Canvas | None = None
        self.renderer: Renderer | None = None
        self.session: Session | None = None

        self.quit_requested = False
        self.on_quit: Callable[["SpaceInvadersGame"], None] | None = None
        self.destroyed = False

    @property
    def is_running(self) -> bool:
        """True once loading succeeded and until the game is destroyed."""
        return self.state is not GameState.LOADING and not self.destroyed

    async def init(self) -> bool:
        """
        Load the player's stats and get the game to the menu.

        On failure the game stays in ``loading``, a message is surfaced
        through the notifier and nothing is attached.

        :return: True when the game reached the menu
        :rtype: bool
        """
        if self.state is not GameState.LOADING or self.destroyed:
            logger.warning(f"init() ignored in state {self.state.value}")
            return False

        try:
            self.session = await self.client.authenticate()
            likes = await self.client.get_ammunition_seed(self.session)
            tags = await self.client.get_multiplier_inputs(self.session)

            self.ammunition = max(0, min(likes, self.settings.max_ammunition))
            self.multiplier = calculate_multiplier(tags)

            quota = self.client.check_daily_quota(self.session)
            if quota.remaining <= 0:
                raise QuotaExhausted(self.session.handle, quota.limit)
        except QuotaExhausted as e:
            logger.info(str(e))
            self.show_message(QUOTA_MESSAGE, "error")
            return False
        except Exception as e:  # pylint: disable=broad-except
            logger.error(f"Game initialization failed: {e!r}")
            self.show_message(LOAD_FAILED_MESSAGE, "error")
            return False

        if self.destroyed:
            logger.info("Game destroyed while loading, not starting")
            return False

        self.create_canvas()
        self.init_player()
        self.init_enemies()
        self.input.attach(self.handle_intent)

        self.state = GameState.MENU
        logger.info(
            f"Game ready for {self.session.handle}: ammunition={self.ammunition} "
            f"multiplier={self.multiplier:.1f}"
        )
        return True

    def create_canvas(self) -> None:
        """Build the drawing surface through the canvas factory, if any."""
        if self.canvas_factory is None:
            logger.debug("No canvas factory, running headless")
            return
        self.canvas = self.canvas_factory(self.width, self.height)
        self.renderer = Renderer(self.canvas)

    def init_player(self) -> None:
        """Place the player at the bottom center of the canvas."""
        self.player = make_player(self.width, self.height)

    def init_enemies(self) -> None:
        """Replace the formation with a fresh one."""
        self.enemies = make_formation()
        logger.debug(f"Formation spawned with {len(self.enemies)} enemies")

    # Frame

    def frame(self) -> None:
        """One animation frame: advance the simulation, then draw it."""
        if not self.is_running:
            return
        self.update()
        self.render()

    def render(self) -> None:
        """Draw the current state; a no-op when headless."""
        if self.renderer is not None:
            self.renderer.render(self)

    def update(self) -> None:
        """Advance the game by one tick; only runs while playing."""
        if self.state is not GameState.PLAYING:
            return

        if self.notice_frames > 0:
            self.notice_frames -= 1
            if self.notice_frames == 0:
                self.notice = None

        self.update_player()
        self.update_enemies()
        self.update_bullets()
        self.check_collisions()
        if self.state is GameState.PLAYING:
            self.check_game_conditions()

    def update_player(self) -> None:
        """
        Move the player while left or right is held, keeping it on screen.
        """
        player = self.player
        if player is None:
            return

        if self.input.move_left:
            player.x -= player.speed
        if self.input.move_right:
            player.x += player.speed
        player.x = clamp(player.x, 0, self.width - player.width)

    def update_enemies(self) -> None:
        """
        Move the formation as one body.

        When any enemy touches a side every enemy turns around and drops
        one step before moving.
        """
        change_direction = any(
            enemy.x <= 0 or enemy.x >= self.width - enemy.width
            for enemy in self.enemies
        )

        for enemy in self.enemies:
            if change_direction:
                enemy.direction *= -1
                enemy.y += ENEMY_DROP_STEP
            enemy.x += enemy.speed * enemy.direction * self.game_speed

            if self.rng.random() < self.settings.enemy_fire_chance:
                self.enemy_shoot(enemy)

    def update_bullets(self) -> None:
        """
        Move both bullet lists and drop bullets that left the canvas:
        player bullets at the top, enemy bullets at the bottom.
        """
        for bullet in self.bullets:
            bullet.y -= bullet.speed
        self.bullets = [b for b in self.bullets if b.y > 0]

        for bullet in self.enemy_bullets:
            bullet.y += bullet.speed
        self.enemy_bullets = [b for b in self.enemy_bullets if b.y < self.height]

    # Actions

    def shoot(self) -> None:
        """Fire one bullet from the player, if playing and armed."""
        if self.state is not GameState.PLAYING or self.ammunition <= 0:
            return
        if self.player is None:
            return

        bullet = player_bullet(self.player)
        self.bullets.append(bullet)
        self.ammunition -= 1
        logger.debug(f"Shooting bullet at ({bullet.x}, {bullet.y})")

    def enemy_shoot(self, enemy: Enemy) -> None:
        """
        Drop a bullet from an enemy

        :param enemy: Shooting enemy
        :type enemy: Enemy
        """
        self.enemy_bullets.append(enemy_bullet(enemy))

    def start_game(self) -> None:
        """
        Leave the menu and count the game against the daily quota.

        A failure to record the game is logged and play goes on.
        """
        if self.state is not GameState.MENU:
            return
        self.state = GameState.PLAYING
        logger.info("Game started")
        try:
            self.client.record_session(self.session)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(f"Game session not recorded: {e!r}")

    def toggle_pause(self) -> None:
        """Pause a running game or resume a paused one; no-op otherwise."""
        if self.state is GameState.PLAYING:
            self.state = GameState.PAUSED
        elif self.state is GameState.PAUSED:
            self.state = GameState.PLAYING
        else:
            return
        logger.info(f"Game {self.state.value}")

    def game_over(self) -> None:
        """End the game; nothing leaves this state."""
        if self.state is GameState.GAMEOVER:
            return
        self.state = GameState.GAMEOVER
        logger.info(f"Game over at level {self.level} with score {self.score}")

    def request_quit(self) -> None:
        """Ask the host to tear the game down."""
        self.quit_requested = True
        if self.on_quit is not None:
            self.on_quit(self)

    def handle_intent(self, intent: Intent) -> None:
        """Dispatch an edge-triggered intent from the input router."""
        if intent is Intent.FIRE:
            self.shoot()
        elif intent is Intent.PAUSE:
            self.toggle_pause()
        elif intent is Intent.START:
            self.start_game()
        elif intent is Intent.QUIT:
            self.request_quit()

    # Rules

    def check_collisions(self) -> None:
        """
        Resolve hits in order: player bullets on enemies, enemy bullets on
        the player, enemies ramming the player.
        """
        points = math.floor(BASE_HIT_SCORE * self.multiplier)

        surviving: list[Bullet] = []
        for bullet in self.bullets:
            hit = next(
                (i for i, enemy in enumerate(self.enemies) if bullet.overlaps(enemy)),
                None,
            )
            if hit is None:
                surviving.append(bullet)
                continue
            del self.enemies[hit]
            self.score += points
            logger.debug(f"Hit! Score: {self.score}")
        self.bullets = surviving

        player = self.player
        if player is None:
            return

        for i, bullet in enumerate(self.enemy_bullets):
            if bullet.overlaps(player):
                del self.enemy_bullets[i]
                self.lives -= 1
                logger.debug(f"Player hit, {self.lives} lives left")
                if self.lives <= 0:
                    self.game_over()
                break

        if any(enemy.overlaps(player) for enemy in self.enemies):
            self.game_over()

    def check_game_conditions(self) -> None:
        """
        Advance the level once the formation is gone, and end the game if
        any enemy reached the loss line.
        """
        if not self.enemies:
            self.level_up()

        threshold = self.height - LOSS_MARGIN
        if any(enemy.bottom >= threshold for enemy in self.enemies):
            self.game_over()

    def level_up(self) -> None:
        """
        Start the next wave: faster formation, fresh layout, no bullets
        left over from the previous wave.
        """
        self.level += 1
        self.game_speed += SPEED_INCREMENT
        self.init_enemies()
        self.bullets.clear()
        self.enemy_bullets.clear()

        self.notice = f"Level {self.level}!"
        self.notice_frames = NOTICE_FRAMES
        logger.info(f"Level {self.level}, speed {self.game_speed:.1f}")

    # Host integration

    def show_message(self, message: str, kind: str = "info") -> None:
        """
        Send a message to the host's notifier

        :param message: Text shown to the player
        :type message: str

        :param kind: ``"info"``, ``"success"`` or ``"error"``
        :type kind: str
        """
        self.notifier(message, kind)

    def destroy(self) -> None:
        """Detach input and release the drawing surface."""
        if self.destroyed:
            return
        self.input.detach()
        if self.canvas is not None:
            self.canvas.release()
        self.canvas = None
        self.renderer = None
        self.destroyed = True
        logger.debug("Game destroyed")
