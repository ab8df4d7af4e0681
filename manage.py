"""
This is the main file to run the game.
It imports the run function from the atproto_invaders package and calls it.
"""

from atproto_invaders.app import run

if __name__ == "__main__":
    run()
