"""
Constants for the game.
"""

from __future__ import annotations

FPS = 60
WINDOW_SIZE = (800, 600)
TITLE = "AT Protocol Space Invaders"

# Player
PLAYER_SIZE = (50, 30)
PLAYER_SPEED = 5.0
PLAYER_LIVES = 3

# Formation
ENEMY_ROWS = 5
ENEMY_COLS = 10
ENEMY_ORIGIN = (100.0, 80.0)
ENEMY_SPACING = (60.0, 40.0)
ENEMY_SIZE = (30, 20)
ENEMY_SPEED = 1.0
ENEMY_DROP_STEP = 20.0
ENEMY_FIRE_CHANCE = 0.001
LOSS_MARGIN = 100  # enemies reaching height - LOSS_MARGIN end the game

# Projectiles
BULLET_SIZE = (4, 10)
PLAYER_BULLET_SPEED = 7.0
ENEMY_BULLET_SPEED = 3.0

# Rules
BASE_HIT_SCORE = 100
SPEED_INCREMENT = 0.1
MAX_AMMUNITION = 1000
NOTICE_FRAMES = 90

# Colors (opaque display tokens handed to the canvas)
COLOR_BACKGROUND = "#000000"
COLOR_PLAYER = "#00ff00"
COLOR_FRONT_ROW = "#ff0000"
COLOR_MID_ROW = "#ff8800"
COLOR_BACK_ROW = "#ffff00"
COLOR_PLAYER_BULLET = "#00ff00"
COLOR_ENEMY_BULLET = "#ff0000"
COLOR_TEXT = "#ffffff"
COLOR_OVERLAY = (0, 0, 0, 178)
COLOR_GAMEOVER_OVERLAY = (0, 0, 0, 204)

# Identity / stats
DEFAULT_AMMUNITION = 100
DEFAULT_TAGS = ("basic",)
DAILY_LIMIT = 10
CACHE_TIMEOUT = 5 * 60  # seconds
TAG_BONUS = 0.2
MAX_TAG_BONUS = 1.0
CATEGORY_TAGS = (
    "social",
    "tech",
    "creative",
    "business",
    "art",
    "music",
    "gaming",
    "education",
    "health",
    "food",
)
