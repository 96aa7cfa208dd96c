"""Server-side rules of a duel: turns, currencies and the shared board."""

from __future__ import annotations

import copy
import logging
import math
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from bitduels.cards import Card, CardEntity, SpiritCollector, Stun
from bitduels.messages import (
    AttackTroop,
    CardSpawned,
    ChatMessage,
    EndGame,
    EndTurn,
    MoveTroop,
    PlayerInfo,
    SpawnCard,
    StartGame,
    StartTurn,
    WinGame,
)

logger = logging.getLogger(__name__)

BOARD_WIDTH = 5
BOARD_HEIGHT = 9
STARTING_PAWNS = 6
STARTING_SPIRITS = 8
MAX_CHAT_BYTES = 20


def to_p2_x(x: int) -> int:
    """Mirror a column into player 2's view of the board."""
    return BOARD_WIDTH - 1 - x


def to_p2_y(y: int) -> int:
    """Mirror a row into player 2's view of the board."""
    return BOARD_HEIGHT - 1 - y


def grid_distance(ax: int, ay: int, bx: int, by: int) -> int:
    """Euclidean distance between two tiles, truncated to an integer."""
    return int(math.hypot(ax - bx, ay - by))


def _on_board(x: int, y: int) -> bool:
    return 0 <= x < BOARD_WIDTH and 0 <= y < BOARD_HEIGHT


def _half(value: int) -> int:
    quotient = abs(value) // 2
    return quotient if value >= 0 else -quotient


@dataclass(frozen=True)
class Delivery:
    """A message the server must send to one of the two players."""

    to_player_1: bool
    message: Any


@dataclass
class _Player:
    username: str = ""
    deck: Optional[list[Card]] = None
    pawns: int = STARTING_PAWNS
    spirits: int = STARTING_SPIRITS
    backlog: deque = field(default_factory=deque)


class GameSession:
    """The state of one game; feed it client messages, send what it returns."""

    def __init__(self, censor: Optional[Callable[[str], str]] = None) -> None:
        self._censor: Callable[[str], str] = censor or (lambda text: text)
        self.players: dict[bool, _Player] = {True: _Player(), False: _Player()}
        self.is_player_1_turn = True
        self.started = False
        self.over = False
        self.winner: Optional[bool] = None
        self._board: dict[tuple[int, int], CardEntity] = {}

    def card_at(self, x: int, y: int) -> Optional[CardEntity]:
        """Return the card on tile (x, y) in player 1's coordinates, if any."""
        if not _on_board(x, y):
            raise IndexError(f"tile ({x}, {y}) is off the board")
        return self._board.get((x, y))

    def join(self, is_player_1: bool, message: Any) -> list[Delivery]:
        """Handle a message sent before the game starts.

        Each player must first send PlayerInfo; anything they send before it is
        dropped. The game starts as soon as both players have sent theirs.
        """
        if self.started:
            return self.handle(is_player_1, message)
        player = self.players[is_player_1]
        if isinstance(message, PlayerInfo):
            if player.deck is None:
                player.username = message.username
                player.deck = list(message.deck)
        elif player.deck is not None:
            player.backlog.append(message)
        if all(p.deck is not None for p in self.players.values()):
            self.started = True
            logger.info("starting game")
            deliveries = [
                Delivery(True, StartGame(True)),
                Delivery(True, StartTurn()),
                Delivery(False, StartGame(False)),
            ]
            return deliveries + self._drain()
        return []

    def handle(self, is_player_1: bool, message: Any) -> list[Delivery]:
        """Handle a message from a player and return what must be sent out.

        Chat from the waiting player is relayed at once; their other messages
        wait until their turn comes.
        """
        if not self.started:
            return self.join(is_player_1, message)
        if self.over:
            return []
        self.players[is_player_1].backlog.append(message)
        return self._drain()

    def _drain(self) -> list[Delivery]:
        deliveries: list[Delivery] = []
        while not self.over:
            waiting = not self.is_player_1_turn
            kept: deque = deque()
            for message in self.players[waiting].backlog:
                if isinstance(message, ChatMessage):
                    deliveries.extend(self._chat(waiting, message.text))
                else:
                    kept.append(message)
            self.players[waiting].backlog = kept
            current = self.players[self.is_player_1_turn].backlog
            if not current:
                break
            deliveries.extend(self._act(current.popleft()))
        return deliveries

    def _act(self, message: Any) -> list[Delivery]:
        # Every action taken on a player's turn earns them one spirit.
        self.players[self.is_player_1_turn].spirits += 1
        match message:
            case MoveTroop():
                return self._move(message)
            case AttackTroop():
                return self._attack(message)
            case EndTurn():
                return self._end_turn()
            case SpawnCard():
                return self._spawn(message)
            case WinGame():
                return self._win(message)
            case ChatMessage(text=text):
                return self._chat(self.is_player_1_turn, text)
        return []

    def _abort(self, reason: str) -> list[Delivery]:
        logger.warning("game aborted: %s", reason)
        self.over = True
        return []

    def _oriented(self, message: MoveTroop | AttackTroop) -> tuple[int, int, int, int]:
        coords = (message.start_x, message.start_y, message.end_x, message.end_y)
        if self.is_player_1_turn:
            return coords
        sx, sy, ex, ey = coords
        return to_p2_x(sx), to_p2_y(sy), to_p2_x(ex), to_p2_y(ey)

    @staticmethod
    def _both(for_player_1: Any, for_player_2: Any) -> list[Delivery]:
        return [Delivery(True, for_player_1), Delivery(False, for_player_2)]

    def _move(self, message: MoveTroop) -> list[Delivery]:
        sx, sy, ex, ey = self._oriented(message)
        if not (_on_board(sx, sy) and _on_board(ex, ey)):
            return self._abort(f"move outside the board: {message}")
        card = self._board.get((sx, sy))
        if card is None:
            return []
        if (
            (ex, ey) not in self._board
            and card.is_owned_by_p1 == self.is_player_1_turn
            and not card.has_attacked
            and not card.has_moved
            and card.stun_count == 0
        ):
            del self._board[(sx, sy)]
            card.moved()
            self._board[(ex, ey)] = card
            return self._both(
                MoveTroop(sx, sy, ex, ey),
                MoveTroop(to_p2_x(sx), to_p2_y(sy), to_p2_x(ex), to_p2_y(ey)),
            )
        return []

    def _attack(self, message: AttackTroop) -> list[Delivery]:
        sx, sy, ex, ey = self._oriented(message)
        if not (_on_board(sx, sy) and _on_board(ex, ey)):
            return self._abort(f"attack outside the board: {message}")
        attacker = self._board.get((sx, sy))
        target = self._board.get((ex, ey))
        if attacker is None or target is None:
            return []
        if not (
            attacker.is_owned_by_p1 == self.is_player_1_turn
            and not attacker.has_attacked
            and target.is_owned_by_p1 != self.is_player_1_turn
            and attacker.stun_count == 0
        ):
            return []
        attacker.moved()
        abilities = list(attacker.card.abilities)
        for ability in abilities:
            if isinstance(ability, Stun):
                target.stun_count += ability.amount
        attacker.attacked()
        target.current_hp -= attacker.card.damage
        if target.current_hp <= 0:
            del self._board[(sx, sy)]
            self._board[(ex, ey)] = attacker
            cost = target.card.cost
            collects_all = any(isinstance(a, SpiritCollector) for a in abilities)
            owner = attacker.is_owned_by_p1
            self.players[owner].spirits += cost if collects_all else _half(cost)
            self.players[not owner].pawns += 1
        return self._both(
            AttackTroop(sx, sy, ex, ey),
            AttackTroop(to_p2_x(sx), to_p2_y(sy), to_p2_x(ex), to_p2_y(ey)),
        )

    def _end_turn(self) -> list[Delivery]:
        self.is_player_1_turn = not self.is_player_1_turn
        for card in self._board.values():
            card.reset()
        return [Delivery(self.is_player_1_turn, StartTurn())]

    def _spawn(self, message: SpawnCard) -> list[Delivery]:
        x, y = message.x, message.y
        if not _on_board(x, y):
            return self._abort(f"card spawned outside the board: ({x}, {y})")
        player = self.players[self.is_player_1_turn]
        if player.pawns < 1 or player.spirits < message.card.cost:
            return []
        if (x, y) in self._board:
            return []
        entity = CardEntity.create(message.card, x, y, self.is_player_1_turn)
        self._board[(x, y)] = entity
        player.pawns -= 1
        player.spirits -= message.card.cost
        mirrored = copy.deepcopy(entity)
        mirrored.x = to_p2_x(x)
        mirrored.y = to_p2_y(y)
        return self._both(CardSpawned(copy.deepcopy(entity)), CardSpawned(mirrored))

    def _win(self, message: WinGame) -> list[Delivery]:
        x, y = message.x, message.y
        if not _on_board(x, y):
            return self._abort(f"win claimed outside the board: ({x}, {y})")
        card = self._board.get((x, y))
        if card is None or y not in (0, BOARD_HEIGHT - 1):
            return []
        turn = self.is_player_1_turn
        if card.is_owned_by_p1 == turn and card.stun_count <= 0 and not card.has_moved:
            self.over = True
            self.winner = turn
            return [Delivery(True, EndGame(turn)), Delivery(False, EndGame(not turn))]
        return []

    def _chat(self, sender: bool, text: str) -> list[Delivery]:
        if len(text.encode("utf-8")) > MAX_CHAT_BYTES:
            return []
        line = f"{self.players[sender].username}: {self._censor(text)}"
        return self._both(ChatMessage(line), ChatMessage(line))