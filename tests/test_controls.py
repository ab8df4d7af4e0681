import pygame
import pytest

from atproto_invaders.controls import (
    KEY_FIRE,
    KEY_LEFT,
    KEY_PAUSE,
    KEY_QUIT,
    KEY_RIGHT,
    KEY_START,
    InputRouter,
    Intent,
)


@pytest.fixture
def fired():
    return []


@pytest.fixture
def router(fired):
    r = InputRouter()
    r.attach(fired.append)
    return r


@pytest.mark.parametrize(
    "code, intent",
    [
        (KEY_FIRE, Intent.FIRE),
        (KEY_PAUSE, Intent.PAUSE),
        (KEY_START, Intent.START),
        (KEY_QUIT, Intent.QUIT),
    ],
)
def test_edge_keys(router, fired, code, intent):
    assert router.key_down(code) is intent
    assert fired == [intent]


def test_held_key_fires_once(router, fired):
    router.key_down(KEY_FIRE)
    router.key_down(KEY_FIRE)
    router.key_down(KEY_FIRE)
    assert fired == [Intent.FIRE]

    router.key_up(KEY_FIRE)
    router.key_down(KEY_FIRE)
    assert fired == [Intent.FIRE, Intent.FIRE]


def test_movement_is_held_state(router, fired):
    router.key_down(KEY_LEFT)
    assert router.move_left and not router.move_right
    router.key_down(KEY_RIGHT)
    router.key_up(KEY_LEFT)
    assert router.move_right and not router.move_left
    assert fired == []


def test_detached_router_ignores_keys(router, fired):
    router.key_down(KEY_LEFT)
    router.detach()
    assert not router.attached
    assert not router.move_left
    assert router.key_down(KEY_FIRE) is None
    assert fired == []


def test_pygame_events(router, fired):
    router.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_SPACE))
    router.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_LEFT))
    assert fired == [Intent.FIRE]
    assert router.move_left

    router.handle_event(pygame.event.Event(pygame.KEYUP, key=pygame.K_LEFT))
    assert not router.move_left

    router.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_a))
    router.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1))
    assert fired == [Intent.FIRE]
