"""The game server: pairs up connecting players and runs their games."""

from __future__ import annotations

import logging
import queue
import socket
import sys
import threading
import time
from typing import Any, Callable, Optional

from bitduels.framing import start_reader, write_packet
from bitduels.game import GameSession
from bitduels.messages import MessageError, decode_client_message

logger = logging.getLogger(__name__)

PORT = 1000
_POLL_INTERVAL = 0.01


class Connection:
    """A connected player: messages they sent are queued by a reader thread."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._queue: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._reader = start_reader(sock, self._queue, decode_client_message)

    def send(self, message: Any) -> None:
        """Send one message; failures are logged and otherwise ignored."""
        with self._lock:
            try:
                write_packet(self._sock, message)
            except MessageError as exc:
                logger.warning("could not encode message: %s", exc)
            except OSError as exc:
                logger.warning("could not send message: %s", exc)

    def poll(self) -> list[Any]:
        """Return every message received since the last poll."""
        messages = []
        while True:
            try:
                messages.append(self._queue.get_nowait())
            except queue.Empty:
                return messages

    def _finished(self) -> bool:
        return not self._reader.is_alive() and self._queue.empty()


def run_game(
    connection_1: Connection,
    connection_2: Connection,
    censor: Optional[Callable[[str], str]] = None,
) -> GameSession:
    """Run one game until it ends or both players are gone; return its session."""
    session = GameSession(censor)
    connections = {True: connection_1, False: connection_2}
    while not session.over:
        busy = False
        for is_player_1, connection in connections.items():
            for message in connection.poll():
                busy = True
                for delivery in session.handle(is_player_1, message):
                    connections[delivery.to_player_1].send(delivery.message)
                if session.over:
                    break
            if session.over:
                break
        if session.over:
            break
        if not busy:
            if all(connection._finished() for connection in connections.values()):
                logger.info("both players left")
                break
            time.sleep(_POLL_INTERVAL)
    return session


def bind_address(argv: list[str]) -> str:
    """Return the address to listen on: loopback when the first argument is "dev"."""
    if argv and argv[0] == "dev":
        return "127.0.0.1"
    return "0.0.0.0"


def serve(host: str, port: int) -> None:
    """Accept players forever, starting a game for every two of them."""
    with socket.create_server((host, port)) as listener:
        logger.info("server started")
        pending: Optional[Connection] = None
        while True:
            try:
                sock, _ = listener.accept()
            except OSError as exc:
                logger.error("%s", exc)
                continue
            logger.info("client connected")
            connection = Connection(sock)
            if pending is None:
                pending = connection
                continue
            logger.info("starting game instance")
            threading.Thread(
                target=run_game,
                args=(pending, connection),
                name="game",
                daemon=True,
            ).start()
            pending = None


def main(argv: Optional[list[str]] = None) -> int:
    """Start the server; returns a non-zero status if the port cannot be bound."""
    logging.basicConfig(level=logging.INFO)
    args = sys.argv[1:] if argv is None else argv
    try:
        serve(bind_address(args), PORT)
    except OSError as exc:
        logger.error("couldn't bind port: %s", exc)
        return 1
    return 0