"""Messages exchanged between the game server and its clients, and their JSON form."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Union

from bitduels.cards import Card, CardEntity

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


class MessageError(ValueError):
    """Raised when a message cannot be encoded or decoded."""


@dataclass(frozen=True)
class StartGame:
    """Server: the game begins; tells the client whether it is player 1."""

    is_player_1: bool


@dataclass(frozen=True)
class StartTurn:
    """Server: the receiving player's turn begins."""


@dataclass
class CardSpawned:
    """Server: a card was placed on the board."""

    card_entity: CardEntity


@dataclass(frozen=True)
class MoveTroop:
    """Both directions: a troop moves from the start tile to the end tile."""

    start_x: int
    start_y: int
    end_x: int
    end_y: int


@dataclass(frozen=True)
class AttackTroop:
    """Both directions: the troop on the start tile attacks the end tile."""

    start_x: int
    start_y: int
    end_x: int
    end_y: int


@dataclass(frozen=True)
class EndGame:
    """Server: the game is over; tells the client whether it won."""

    won: bool


@dataclass(frozen=True)
class ChatMessage:
    """Both directions: a line of chat."""

    text: str


@dataclass
class PlayerInfo:
    """Client: the player's name and deck, sent before the game starts."""

    username: str
    deck: list[Card]


@dataclass
class SpawnCard:
    """Client: place a card from the deck on the given tile."""

    card: Card
    x: int
    y: int


@dataclass(frozen=True)
class EndTurn:
    """Client: the player ends their turn."""


@dataclass(frozen=True)
class WinGame:
    """Client: claim victory with the card on the given tile."""

    x: int
    y: int


@dataclass(frozen=True)
class Resign:
    """Client: the player gives up."""


ServerMessage = Union[StartGame, StartTurn, CardSpawned, MoveTroop, AttackTroop, EndGame, ChatMessage]
ClientMessage = Union[
    PlayerInfo, MoveTroop, AttackTroop, SpawnCard, EndTurn, WinGame, ChatMessage, Resign
]


def _to_wire(message: Any) -> Any:
    match message:
        case StartGame(is_player_1=flag):
            return {"StartGame": flag}
        case EndGame(won=flag):
            return {"EndGame": flag}
        case StartTurn() | EndTurn() | Resign():
            return type(message).__name__
        case CardSpawned(card_entity=entity):
            return {"SpawnCard": entity.to_json()}
        case SpawnCard(card=card, x=x, y=y):
            return {"SpawnCard": [card.to_json(), x, y]}
        case MoveTroop() | AttackTroop():
            return {
                type(message).__name__: [
                    message.start_x,
                    message.start_y,
                    message.end_x,
                    message.end_y,
                ]
            }
        case WinGame(x=x, y=y):
            return {"WinGame": [x, y]}
        case ChatMessage(text=text):
            return {"ChatMessage": text}
        case PlayerInfo(username=username, deck=deck):
            return {"PlayerInfo": [username, [card.to_json() for card in deck]]}
    raise MessageError(f"not a message: {message!r}")


def encode_message(message: ServerMessage | ClientMessage) -> str:
    """Return the compact JSON text of a message."""
    try:
        wire = _to_wire(message)
    except MessageError:
        raise
    except ValueError as exc:
        raise MessageError(str(exc)) from exc
    return json.dumps(wire, separators=(",", ":"), ensure_ascii=False)


_UNIT = object()


def _parse(data: str | bytes | bytearray) -> Any:
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MessageError(f"message is not UTF-8: {exc}") from exc
    try:
        return json.loads(data)
    except json.JSONDecodeError as exc:
        raise MessageError(f"message is not JSON: {exc}") from exc


def _variant(wire: Any) -> tuple[str, Any]:
    if isinstance(wire, str):
        return wire, _UNIT
    if isinstance(wire, dict) and len(wire) == 1:
        ((tag, body),) = wire.items()
        return tag, body
    raise MessageError(f"not a message: {wire!r}")


def _i32(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not _I32_MIN <= value <= _I32_MAX:
        raise MessageError(f"expected a 32-bit integer, got {value!r}")
    return value


def _bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise MessageError(f"expected a boolean, got {value!r}")
    return value


def _str(value: Any) -> str:
    if not isinstance(value, str):
        raise MessageError(f"expected a string, got {value!r}")
    return value


def _items(body: Any, size: int) -> list[Any]:
    if not isinstance(body, list) or len(body) != size:
        raise MessageError(f"expected a list of {size} items, got {body!r}")
    return body


def _i32s(body: Any, size: int) -> list[int]:
    return [_i32(value) for value in _items(body, size)]


def _unit(cls: type) -> Callable[[Any], Any]:
    def decode(body: Any) -> Any:
        if body is not _UNIT:
            raise MessageError(f"{cls.__name__} carries no data")
        return cls()

    return decode


def _player_info(body: Any) -> PlayerInfo:
    username, deck = _items(body, 2)
    if not isinstance(deck, list):
        raise MessageError(f"expected a deck list, got {deck!r}")
    return PlayerInfo(_str(username), [Card.from_json(card) for card in deck])


def _spawn_card(body: Any) -> SpawnCard:
    card, x, y = _items(body, 3)
    return SpawnCard(Card.from_json(card), _i32(x), _i32(y))


_SERVER_DECODERS: dict[str, Callable[[Any], Any]] = {
    "StartGame": lambda body: StartGame(_bool(body)),
    "StartTurn": _unit(StartTurn),
    "SpawnCard": lambda body: CardSpawned(CardEntity.from_json(body)),
    "MoveTroop": lambda body: MoveTroop(*_i32s(body, 4)),
    "AttackTroop": lambda body: AttackTroop(*_i32s(body, 4)),
    "EndGame": lambda body: EndGame(_bool(body)),
    "ChatMessage": lambda body: ChatMessage(_str(body)),
}

_CLIENT_DECODERS: dict[str, Callable[[Any], Any]] = {
    "PlayerInfo": _player_info,
    "MoveTroop": lambda body: MoveTroop(*_i32s(body, 4)),
    "AttackTroop": lambda body: AttackTroop(*_i32s(body, 4)),
    "SpawnCard": _spawn_card,
    "EndTurn": _unit(EndTurn),
    "WinGame": lambda body: WinGame(*_i32s(body, 2)),
    "ChatMessage": lambda body: ChatMessage(_str(body)),
    "Resign": _unit(Resign),
}


def _decode(data: str | bytes | bytearray, decoders: dict[str, Callable[[Any], Any]], side: str) -> Any:
    tag, body = _variant(_parse(data))
    decoder = decoders.get(tag)
    if decoder is None:
        raise MessageError(f"unknown {side} message {tag!r}")
    try:
        return decoder(body)
    except MessageError:
        raise
    except ValueError as exc:
        raise MessageError(str(exc)) from exc


def decode_server_message(data: str | bytes | bytearray) -> ServerMessage:
    """Decode a message sent by the server; raise MessageError if it is invalid."""
    return _decode(data, _SERVER_DECODERS, "server")


def decode_client_message(data: str | bytes | bytearray) -> ClientMessage:
    """Decode a message sent by a client; raise MessageError if it is invalid."""
    return _decode(data, _CLIENT_DECODERS, "client")