"""Text and rules behind the in-game side panels."""

from __future__ import annotations

import math

from bitduels.cards import Card, CardEntity
from bitduels.geometry import uppercase_first_letter


def _number(value: float) -> str:
    if math.isfinite(value) and float(value).is_integer():
        if value == 0 and math.copysign(1.0, value) < 0:
            return "-0"
        return str(int(value))
    return repr(float(value))


def describe_card(card_entity: CardEntity) -> tuple[str, str, str, str, str]:
    """Return the name, damage, health, stun and ability lines for a viewed card."""
    card = card_entity.card
    return (
        f"Current Card: {uppercase_first_letter(card.name)}",
        f"Damage: {_number(card.damage)}",
        f"Health: {_number(card_entity.current_hp)}",
        "Stunned: Yes" if card_entity.stun_count > 0 else "Stunned: No",
        "Abilities: " + "".join(str(ability) for ability in card.abilities),
    )


def card_button_label(card: Card) -> str:
    """Return the caption of a deck card's button."""
    return f"{uppercase_first_letter(card.name)} [{card.cost} Spirits]"


def can_place_card(
    is_placing: bool, pawns: int, spirits: int, card: Card, is_self_turn: bool
) -> bool:
    """Whether the player may start placing `card` now."""
    return not is_placing and pawns > 0 and spirits >= card.cost and is_self_turn


def can_win(card_entity: CardEntity, is_player_1: bool, is_self_turn: bool) -> bool:
    """Whether the viewed card lets the player claim victory."""
    return (
        card_entity.y == 0
        and not card_entity.has_moved
        and card_entity.is_owned_by_p1 == is_player_1
        and is_self_turn
        and not card_entity.stun_count > 0
    )