"""Screen geometry and sprite animation helpers for the game client."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from bitduels.game import to_p2_x, to_p2_y

Vec2 = tuple[float, float]

ANIM_MOVE_SPEED = 5.0
ATTACK_SPEED_FACTOR = 3.0
SNAP_DISTANCE = 10.0
PLACEMENT_ROWS = 3.0


def move_towards(current: Vec2, target: Vec2, speed: float, delta_time: float) -> Vec2:
    """Step from `current` towards `target` by `speed` units.

    Snaps onto the target once it is no more than ten units away. The step is
    per frame, so `delta_time` does not change its length.
    """
    dx = target[0] - current[0]
    dy = target[1] - current[1]
    magnitude = math.hypot(dx, dy)
    if magnitude <= SNAP_DISTANCE:
        return target
    return (current[0] + dx / magnitude * speed, current[1] + dy / magnitude * speed)


def uppercase_first_letter(text: str) -> str:
    """Return `text` with its first character upper-cased."""
    if not text:
        raise ValueError("cannot capitalise an empty string")
    return text[0].upper()[0] + text[1:]


def cursor_to_tile(
    x: float, y: float, tile_size: float, is_player_1: bool
) -> Optional[tuple[int, int]]:
    """Map a cursor position in window pixels to the board tile a card is placed on.

    Returns None when the cursor is outside the board columns or beyond the
    rows a player may place cards on. The tile is given in the coordinates the
    server expects from this player.
    """
    if x < tile_size * 5.0 or x > tile_size * 10.0:
        return None
    x -= tile_size * 5.0
    x -= math.fmod(x, tile_size)
    y -= math.fmod(y, tile_size)
    x /= tile_size
    y /= tile_size
    if y > PLACEMENT_ROWS:
        return None
    if is_player_1:
        y = 8.0 - y
    else:
        x = 4.0 - x
    return int(x), int(y)


def win_coordinates(x: int, y: int, is_player_1: bool) -> tuple[int, int]:
    """Return the tile a win claim names, in player 1's coordinates."""
    if is_player_1:
        return x, y
    return to_p2_x(x), to_p2_y(y)


@dataclass
class MovementAnimation:
    """Slides a sprite towards `target`."""

    target: Vec2

    def step(self, position: Vec2, speed: float, delta_time: float) -> tuple[Vec2, bool]:
        """Advance one frame; return the new position and whether the slide is over."""
        moved = move_towards(position, self.target, speed, delta_time)
        return moved, moved == self.target


@dataclass
class AttackAnimation:
    """Lunges a sprite at `target`, then brings it back to `initial`."""

    target: Vec2
    initial: Vec2
    moving_back: bool = False

    def step(self, position: Vec2, speed: float, delta_time: float) -> tuple[Vec2, bool]:
        """Advance one frame; return the new position and whether the lunge is over."""
        goal = self.initial if self.moving_back else self.target
        moved = move_towards(position, goal, speed * ATTACK_SPEED_FACTOR, delta_time)
        if moved == self.target or moved == self.initial:
            if self.moving_back:
                return moved, True
            self.moving_back = True
        return moved, False