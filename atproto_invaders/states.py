"""
Game lifecycle states
"""

from enum import Enum


class GameState(str, Enum):
    LOADING = "loading"
    MENU = "menu"
    PLAYING = "playing"
    PAUSED = "paused"
    GAMEOVER = "gameover"
