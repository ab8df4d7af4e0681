"""
AT Protocol Space Invaders
"""

from atproto_invaders.game import SpaceInvadersGame
from atproto_invaders.identity import Session, SocialStatsClient
from atproto_invaders.states import GameState

__all__ = ["GameState", "Session", "SocialStatsClient", "SpaceInvadersGame"]
