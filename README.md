# bitduels

A two-player, turn-based card duel played on a board 5 tiles wide and
9 tiles tall. Each player brings a deck of cards, spends *spirits* and
*pawns* to put troops on the board, then moves and attacks until one of
them has an unstunned troop that has not moved this turn on an end row
and claims the win.

## What is in the package

- `bitduels.cards`: the card collection (`card_collection()`,
  `card_from_name()`, which falls back to the skeleton for unknown
  names), the abilities `MultiAttack`, `SpiritCollector` and `Stun`,
  `Card`, and `CardEntity`, the per-turn state of a card on the board.
- `bitduels.messages`: the messages the client and server exchange
  (`StartGame`, `StartTurn`, `CardSpawned`, `MoveTroop`, `AttackTroop`,
  `EndGame`, `ChatMessage`, `PlayerInfo`, `SpawnCard`, `EndTurn`,
  `WinGame`, `Resign`) with `encode_message`, `decode_server_message`
  and `decode_client_message`. Invalid input raises `MessageError`.
- `bitduels.framing`: the wire format, a 4-byte big-endian length
  followed by the UTF-8 JSON text: `pack_length`, `unpack_length`,
  `encode_packet`, `write_packet`, `read_packet`, `pump_packets` and
  `start_reader`, which pumps decoded messages into a queue on a daemon
  thread.
- `bitduels.game`: `GameSession`, the authoritative rules of one match.
  Pass each player's messages to `join` and `handle`; each returns a list
  of `Delivery` objects (`to_player_1`, `message`) to send out. The
  session tracks `over` and `winner`, and `card_at(x, y)` looks up the
  board in player 1's coordinates. An optional `censor` callable is
  applied to chat text; chat longer than 20 bytes is dropped.
- `bitduels.server`: the TCP match server (`serve`, `run_game`,
  `Connection`, `main`).
- `bitduels.client`: `connect("host:port")` returning a `ServerLink`
  (`send`, `poll`, `close`, usable as a context manager), and
  `ClientState`, which applies server messages to one player's view of
  the game.
- `bitduels.selection`: selecting and viewing cards (`Selection`), the
  tiles a selected card may move to or attack (`move_targets`,
  `attack_targets`) and board-to-world geometry (`tile_to_world`,
  `is_tile_clicked`, `is_in_boundary`).
- `bitduels.geometry`: `move_towards`, the `MovementAnimation` and
  `AttackAnimation` steppers, `cursor_to_tile` for placing cards and
  `win_coordinates`.
- `bitduels.panel`: the texts and checks behind the in-game side panels
  (`describe_card`, `card_button_label`, `can_place_card`, `can_win`).
- `bitduels.settings`: `Settings` with JSON storage (`load_settings`,
  `save_settings`, `default_settings_path`), `sanitize_input`, and the
  animated `WaitingText`.

## Installing

```
pip install .
```

Python 3.10 or later is required; there are no third-party runtime
dependencies.

## Running a server

```
bitduels-server
```

The server listens on TCP port 1000 on all interfaces (on many systems
a port below 1024 needs extra privileges). Give `dev` as the first
argument to listen on `127.0.0.1` only:

```
bitduels-server dev
```

Every two clients that connect are paired into a match, each run on its
own thread. The first of the two to connect plays as player 1 and moves
first. The command exits with status 1 if the port cannot be bound.

## Using the library

```python
from bitduels.cards import card_from_name, CardEntity
from bitduels.messages import SpawnCard, encode_message, decode_client_message

reaper = card_from_name("reaper")
data = encode_message(SpawnCard(reaper, 2, 8))
assert decode_client_message(data) == SpawnCard(reaper, 2, 8)

troop = CardEntity.create(reaper, 2, 8, True)
troop.reset()  # a fresh troop is stunned for its first turn
```

A match can be played without any sockets:

```python
from bitduels.cards import card_from_name
from bitduels.game import GameSession
from bitduels.messages import PlayerInfo

deck = [card_from_name(name) for name in ("skeleton", "reaper", "kraken", "spider", "crow")]
session = GameSession()
session.join(True, PlayerInfo("alice", deck))
for delivery in session.join(False, PlayerInfo("bob", deck)):
    print(delivery.to_player_1, delivery.message)
```

## What the package does not do

There is no graphical client: nothing here draws the board, plays
sound, or reads the mouse and keyboard. The client-side modules hold the
state, rules and geometry such a front end would use, and `connect`
gives it a link to the server, but no command starts a playable client.

## Running the tests

```
pip install ".[test]"
pytest
```