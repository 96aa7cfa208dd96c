"""Card definitions, card abilities and the state of a card on the board."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_U8_MAX = 255


def _field(data: Any, key: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {data!r}")
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field {key!r}") from None


def _int(value: Any, name: str, low: int = _I32_MIN, high: int = _I32_MAX) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ValueError(f"{name} must be an integer in [{low}, {high}], got {value!r}")
    return value


def _float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return float(value)


def _bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be a boolean, got {value!r}")
    return value


def _str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {value!r}")
    return value


class CardType(Enum):
    """The kind of a card."""

    TROOP = "Troop"
    SPELL = "Spell"
    BUILDING = "Building"


@dataclass
class MultiAttack:
    """Lets a troop attack `max_attacks` extra times per turn."""

    max_attacks: int
    attack_count: int = 0

    def __str__(self) -> str:
        return f"Multi-Attack {self.max_attacks + 1}"


@dataclass(frozen=True)
class SpiritCollector:
    """Collects the full cost of a defeated card instead of half."""

    def __str__(self) -> str:
        return "Spirit Collector"


@dataclass(frozen=True)
class Stun:
    """Adds `amount` turns of stun to the attacked card."""

    amount: int

    def __str__(self) -> str:
        return "Stun"


Ability = Union[MultiAttack, SpiritCollector, Stun]


def ability_to_json(ability: Ability) -> Any:
    """Return the wire form of an ability."""
    match ability:
        case MultiAttack(max_attacks=max_attacks, attack_count=attack_count):
            return {"MultiAttack": {"max_attacks": max_attacks, "attack_count": attack_count}}
        case SpiritCollector():
            return "SpiritCollector"
        case Stun(amount=amount):
            return {"Stun": {"amount": amount}}
    raise ValueError(f"not a card ability: {ability!r}")


def ability_from_json(data: Any) -> Ability:
    """Build an ability from its wire form; raise ValueError if it is malformed."""
    if data == "SpiritCollector":
        return SpiritCollector()
    if isinstance(data, dict) and len(data) == 1:
        ((tag, body),) = data.items()
        if tag == "MultiAttack":
            return MultiAttack(
                _int(_field(body, "max_attacks"), "max_attacks", 0, _U8_MAX),
                _int(_field(body, "attack_count"), "attack_count", 0, _U8_MAX),
            )
        if tag == "Stun":
            return Stun(_int(_field(body, "amount"), "amount"))
    raise ValueError(f"unknown card ability: {data!r}")


@dataclass
class Card:
    """A card as it appears in a deck."""

    name: str
    card_type: CardType
    hp: float
    attack: float
    cost: int
    abilities: list[Ability] = field(default_factory=list)

    @property
    def damage(self) -> float:
        """Damage dealt by one attack of this card."""
        return self.attack

    def to_json(self) -> dict[str, Any]:
        """Return the wire form of the card."""
        return {
            "name": self.name,
            "type_": self.card_type.value,
            "hp": float(self.hp),
            "attack": float(self.attack),
            "cost": self.cost,
            "abilities": [ability_to_json(ability) for ability in self.abilities],
        }

    @classmethod
    def from_json(cls, data: Any) -> Card:
        """Build a card from its wire form; raise ValueError if it is malformed."""
        type_value = _str(_field(data, "type_"), "type_")
        try:
            card_type = CardType(type_value)
        except ValueError:
            raise ValueError(f"unknown card type {type_value!r}") from None
        abilities = _field(data, "abilities")
        if not isinstance(abilities, list):
            raise ValueError(f"abilities must be a list, got {abilities!r}")
        return cls(
            name=_str(_field(data, "name"), "name"),
            card_type=card_type,
            hp=_float(_field(data, "hp"), "hp"),
            attack=_float(_field(data, "attack"), "attack"),
            cost=_int(_field(data, "cost"), "cost"),
            abilities=[ability_from_json(ability) for ability in abilities],
        )


def card_collection() -> dict[str, Card]:
    """Return a fresh copy of every card in the game, keyed by name."""
    return {
        "skeleton": Card("skeleton", CardType.TROOP, 5.0, 3.0, 2),
        "reaper": Card("reaper", CardType.TROOP, 6.0, 4.0, 5, [SpiritCollector()]),
        "kraken": Card("kraken", CardType.TROOP, 12.0, 1.0, 6, [MultiAttack(2)]),
        "spider": Card("spider", CardType.TROOP, 4.0, 2.0, 4, [Stun(2)]),
        "crow": Card("crow", CardType.TROOP, 2.0, 2.0, 3, [MultiAttack(1)]),
    }


def card_from_name(name: str) -> Card:
    """Return the card with this name, or the skeleton if there is none."""
    collection = card_collection()
    return collection.get(name, collection["skeleton"])


@dataclass
class CardEntity:
    """A card placed on the board, with its position and turn state."""

    card: Card
    current_hp: float
    x: int
    y: int
    is_owned_by_p1: bool
    has_moved: bool
    has_attacked: bool
    stun_count: int

    @classmethod
    def create(cls, card: Card, x: int, y: int, is_owned_by_p1: bool) -> CardEntity:
        """Place a copy of `card` at (x, y); new cards start stunned for one turn."""
        return cls(
            card=copy.deepcopy(card),
            current_hp=card.hp,
            x=x,
            y=y,
            is_owned_by_p1=is_owned_by_p1,
            has_moved=False,
            has_attacked=False,
            stun_count=1,
        )

    def moved(self) -> None:
        """Record that the card moved this turn."""
        self.has_moved = True

    def attacked(self) -> None:
        """Record an attack, spending an extra attack first if one is left."""
        for ability in self.card.abilities:
            if isinstance(ability, MultiAttack) and ability.attack_count < ability.max_attacks:
                ability.attack_count += 1
                return
        self.has_attacked = True

    def reset(self) -> None:
        """Start a new turn for this card."""
        self.has_moved = False
        self.has_attacked = False
        if self.stun_count > 0:
            self.stun_count -= 1
        for ability in self.card.abilities:
            if isinstance(ability, MultiAttack):
                ability.attack_count = 0

    def to_json(self) -> dict[str, Any]:
        """Return the wire form of the entity."""
        return {
            "card": self.card.to_json(),
            "current_hp": float(self.current_hp),
            "position_x": self.x,
            "position_y": self.y,
            "is_owned_by_p1": self.is_owned_by_p1,
            "has_moved": self.has_moved,
            "has_attacked": self.has_attacked,
            "stun_count": self.stun_count,
        }

    @classmethod
    def from_json(cls, data: Any) -> CardEntity:
        """Build an entity from its wire form; raise ValueError if it is malformed."""
        return cls(
            card=Card.from_json(_field(data, "card")),
            current_hp=_float(_field(data, "current_hp"), "current_hp"),
            x=_int(_field(data, "position_x"), "position_x"),
            y=_int(_field(data, "position_y"), "position_y"),
            is_owned_by_p1=_bool(_field(data, "is_owned_by_p1"), "is_owned_by_p1"),
            has_moved=_bool(_field(data, "has_moved"), "has_moved"),
            has_attacked=_bool(_field(data, "has_attacked"), "has_attacked"),
            stun_count=_int(_field(data, "stun_count"), "stun_count"),
        )