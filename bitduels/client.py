"""Client-side game state: the server link and what the server's messages do to it."""

from __future__ import annotations

import logging
import queue
import socket
import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Optional

from bitduels.cards import CardEntity, SpiritCollector, Stun
from bitduels.framing import start_reader, write_packet
from bitduels.game import STARTING_PAWNS, STARTING_SPIRITS
from bitduels.messages import (
    AttackTroop,
    CardSpawned,
    ChatMessage,
    EndGame,
    EndTurn,
    MessageError,
    MoveTroop,
    StartGame,
    StartTurn,
    decode_server_message,
)

logger = logging.getLogger(__name__)

YOUR_TURN = "Your Turn"
OPPONENTS_TURN = "Opponent's Turn"


class GameState(Enum):
    """The screen the client is showing."""

    OPENING = auto()
    WAITING = auto()
    PREPARING_FOR_GAME = auto()
    SETTINGS = auto()
    DECK_BUILDING = auto()
    MAIN_MENU = auto()
    PLAYING = auto()


_HANDLING_STATES = frozenset({GameState.PREPARING_FOR_GAME, GameState.PLAYING})


def _half(value: int) -> int:
    quotient = abs(value) // 2
    return quotient if value >= 0 else -quotient


class ServerLink:
    """A connection to the game server; received messages are queued by a reader thread."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._incoming: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._reader = start_reader(sock, self._incoming, decode_server_message)

    def send(self, message: Any) -> None:
        """Send one message to the server; failures are logged and otherwise ignored."""
        with self._lock:
            try:
                write_packet(self._sock, message)
            except MessageError as exc:
                logger.warning("could not encode message: %s", exc)
            except OSError as exc:
                logger.warning("could not send message: %s", exc)

    def poll(self) -> list[Any]:
        """Return every message received since the last poll, oldest first."""
        messages = []
        while True:
            try:
                messages.append(self._incoming.get_nowait())
            except queue.Empty:
                return messages

    def close(self) -> None:
        """Close the connection."""
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()

    def __enter__(self) -> ServerLink:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def _split_address(server_address: str) -> tuple[str, int]:
    host, sep, port_text = server_address.rpartition(":")
    if not sep or not host:
        raise ValueError(f"server address must be host:port, got {server_address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"invalid port in server address {server_address!r}") from None
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port out of range in server address {server_address!r}")
    return host, port


def connect(server_address: str) -> ServerLink:
    """Open a connection to a server given as "host:port".

    Raises ValueError for a malformed address and OSError if it cannot connect.
    """
    host, port = _split_address(server_address)
    sock = socket.create_connection((host, port))
    logger.info("successfully established TCP connection")
    return ServerLink(sock)


@dataclass
class ClientState:
    """What one player's client knows about the game in progress."""

    state: GameState = GameState.PREPARING_FOR_GAME
    is_player_1: bool = False
    is_self_turn: bool = False
    spirits: int = STARTING_SPIRITS
    pawns: int = STARTING_PAWNS
    cards: list[CardEntity] = field(default_factory=list)
    chat_messages: list[str] = field(default_factory=list)
    won: Optional[bool] = None

    @property
    def turn_label(self) -> str:
        """The text of the turn indicator."""
        return YOUR_TURN if self.is_self_turn else OPPONENTS_TURN

    def card_at(self, x: int, y: int) -> Optional[CardEntity]:
        """Return the card on tile (x, y) in this player's view, if any."""
        return next((card for card in self.cards if card.x == x and card.y == y), None)

    def reset_currencies(self) -> None:
        """Restore the starting spirits and pawns."""
        self.spirits = STARTING_SPIRITS
        self.pawns = STARTING_PAWNS

    def end_turn(self) -> EndTurn:
        """End this player's turn; return the message to send to the server."""
        self.is_self_turn = False
        for card in self.cards:
            if card.is_owned_by_p1 != self.is_player_1:
                card.reset()
        return EndTurn()

    def handle(self, message: Any) -> bool:
        """Apply a server message.

        Messages are only applied while preparing for or playing a game;
        otherwise nothing changes and False is returned.
        """
        if self.state not in _HANDLING_STATES:
            return False
        match message:
            case StartGame(is_player_1=is_player_1):
                self.is_self_turn = is_player_1
                self.is_player_1 = is_player_1
                self.state = GameState.PLAYING
            case CardSpawned(card_entity=entity):
                self.cards.append(entity)
            case MoveTroop():
                self._move(message)
            case AttackTroop():
                self._attack(message)
            case StartTurn():
                self.is_self_turn = True
                for card in self.cards:
                    if card.is_owned_by_p1 == self.is_player_1:
                        card.reset()
                self.spirits += 1
            case EndGame(won=won):
                self.cards.clear()
                self.won = won
                self.state = GameState.WAITING
                self.reset_currencies()
            case ChatMessage(text=text):
                self.chat_messages.append(text)
            case _:
                raise MessageError(f"not a server message: {message!r}")
        return True

    def _move(self, message: MoveTroop) -> None:
        for card in self.cards:
            if card.x == message.start_x and card.y == message.start_y:
                card.x = message.end_x
                card.y = message.end_y
                card.moved()

    def _attack(self, message: AttackTroop) -> None:
        attacker: Optional[CardEntity] = None
        target: Optional[CardEntity] = None
        for card in self.cards:
            if card.x == message.start_x and card.y == message.start_y:
                attacker = card
            elif card.x == message.end_x and card.y == message.end_y:
                target = card
        if attacker is None or target is None:
            raise LookupError(f"no cards on the tiles of {message}")
        target.current_hp -= attacker.card.damage
        attacker.attacked()
        abilities = list(attacker.card.abilities)
        for ability in abilities:
            if isinstance(ability, Stun):
                target.stun_count += ability.amount
        if target.current_hp <= 0:
            self.cards = [card for card in self.cards if card is not target]
            attacker.x = message.end_x
            attacker.y = message.end_y
            if target.is_owned_by_p1 == self.is_player_1:
                self.pawns += 1
            if attacker.is_owned_by_p1 == self.is_player_1:
                cost = target.card.cost
                if any(isinstance(ability, SpiritCollector) for ability in abilities):
                    self.spirits += cost
                else:
                    self.spirits += _half(cost)