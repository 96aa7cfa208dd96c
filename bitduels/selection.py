"""Selecting cards on the board and working out where they may move or attack."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from bitduels.cards import CardEntity
from bitduels.game import BOARD_HEIGHT, BOARD_WIDTH

Vec2 = tuple[float, float]

_REACH = 1.5


def is_in_boundary(bound_1: Vec2, bound_2: Vec2, position: Vec2) -> bool:
    """Whether `position` lies strictly inside the box from top-left `bound_1` to bottom-right `bound_2`.

    The y axis points up, so `bound_1` has the larger y.
    """
    x, y = position
    return bound_1[0] < x < bound_2[0] and bound_2[1] < y < bound_1[1]


def is_tile_clicked(center: Vec2, tile_size: float, world_pos: Vec2) -> bool:
    """Whether a click at `world_pos` falls on the tile centred at `center`."""
    half = tile_size / 2.0
    cx, cy = center
    return is_in_boundary((cx - half, cy + half), (cx + half, cy - half), world_pos)


def tile_to_world(
    x: int, y: int, tile_size: float, window_width: float, window_height: float
) -> Vec2:
    """Return the world position of the centre of board tile (x, y).

    The board starts one third of the way across the window, at its top edge.
    """
    start_y = window_height / 2.0 - tile_size / 2.0
    start_x = -window_width / 2.0 + tile_size / 2.0 + window_width / 3.0
    return (start_x + x * tile_size, start_y - y * tile_size)


def _tiles() -> Iterable[tuple[int, int]]:
    for x in range(BOARD_WIDTH):
        for y in range(BOARD_HEIGHT):
            yield x, y


def _in_reach(selected: CardEntity, x: int, y: int) -> bool:
    return math.hypot(x - selected.x, y - selected.y) < _REACH


def _can_act(selected: CardEntity) -> bool:
    return selected.stun_count <= 0 and selected.y != 0


def move_targets(
    selected: CardEntity, cards: Iterable[CardEntity], is_self_turn: bool
) -> set[tuple[int, int]]:
    """Return the free tiles next to `selected` that it may move to this turn."""
    if not is_self_turn or not _can_act(selected):
        return set()
    if selected.has_moved or selected.has_attacked:
        return set()
    occupied = {(card.x, card.y) for card in cards}
    return {
        (x, y)
        for x, y in _tiles()
        if _in_reach(selected, x, y) and (x, y) not in occupied
    }


def attack_targets(
    selected: CardEntity,
    cards: Iterable[CardEntity],
    is_player_1: bool,
    is_self_turn: bool,
) -> dict[tuple[int, int], float]:
    """Return the enemy tiles next to `selected` it may attack, with the damage it deals."""
    if not is_self_turn or not _can_act(selected) or selected.has_attacked:
        return {}
    enemies = {(card.x, card.y) for card in cards if card.is_owned_by_p1 != is_player_1}
    damage = selected.card.damage
    return {
        (x, y): damage
        for x, y in _tiles()
        if _in_reach(selected, x, y) and (x, y) in enemies
    }


def _same_tile(a: CardEntity, b: CardEntity) -> bool:
    return a.x == b.x and a.y == b.y


@dataclass
class Selection:
    """The card the player has selected to act with, and the card being viewed."""

    selected: Optional[CardEntity] = None
    viewing: Optional[CardEntity] = None

    def click(self, card: CardEntity, is_player_1: bool) -> None:
        """Update the selection after the player clicks on `card`.

        Clicking the selected or viewed card again drops it; only the player's
        own cards can be selected, but any card can be viewed.
        """
        owned = card.is_owned_by_p1 == is_player_1
        if self.selected is not None:
            if _same_tile(self.selected, card):
                if owned:
                    self.selected = None
                self.viewing = None
                return
        elif self.viewing is not None and _same_tile(self.viewing, card):
            self.viewing = None
            return
        if owned:
            self.selected = card
        self.viewing = card

    def clear(self) -> None:
        """Drop the selected card once it has acted; the viewed card stays."""
        self.selected = None