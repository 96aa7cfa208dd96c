"""Length-prefixed framing of JSON messages over byte streams."""

from __future__ import annotations

import logging
import struct
import threading
from typing import Any, Callable, Optional

from bitduels.messages import MessageError, encode_message

logger = logging.getLogger(__name__)

_HEADER = struct.Struct(">I")
_HEADER_SIZE = _HEADER.size
_MAX_LENGTH = 0xFFFFFFFF

Decoder = Callable[[bytes], Any]


def pack_length(length: int) -> bytes:
    """Return `length` as a 4-byte big-endian unsigned integer."""
    if not 0 <= length <= _MAX_LENGTH:
        raise ValueError(f"packet length out of range: {length}")
    return _HEADER.pack(length)


def unpack_length(data: bytes) -> int:
    """Read a 4-byte big-endian unsigned length."""
    if len(data) != _HEADER_SIZE:
        raise ValueError(f"length header must be {_HEADER_SIZE} bytes, got {len(data)}")
    return _HEADER.unpack(data)[0]


def encode_packet(message: Any) -> bytes:
    """Return a message as a length header followed by its UTF-8 JSON."""
    body = encode_message(message).encode("utf-8")
    return pack_length(len(body)) + body


def write_packet(stream: Any, message: Any) -> None:
    """Write one framed message to a socket or a binary file-like object."""
    packet = encode_packet(message)
    sendall = getattr(stream, "sendall", None)
    if sendall is not None:
        sendall(packet)
        return
    stream.write(packet)
    flush = getattr(stream, "flush", None)
    if flush is not None:
        flush()


def _read_exactly(stream: Any, size: int) -> Optional[bytes]:
    """Read exactly `size` bytes, or return None if the stream ends first."""
    receive = getattr(stream, "recv", None) or stream.read
    chunks = bytearray()
    while len(chunks) < size:
        chunk = receive(size - len(chunks))
        if not chunk:
            return None
        chunks.extend(chunk)
    return bytes(chunks)


def read_packet(stream: Any, decoder: Decoder) -> Optional[Any]:
    """Read and decode one framed message.

    Returns None when the stream is closed or sends an empty packet; raises
    MessageError if the packet does not decode.
    """
    header = _read_exactly(stream, _HEADER_SIZE)
    if header is None:
        return None
    length = unpack_length(header)
    if length == 0:
        return None
    body = _read_exactly(stream, length)
    if body is None:
        return None
    return decoder(body)


def pump_packets(stream: Any, queue: Any, decoder: Decoder) -> int:
    """Put every decoded message from `stream` on `queue` until it closes.

    Invalid packets are logged and skipped. Returns the number of messages queued.
    """
    delivered = 0
    while True:
        try:
            message = read_packet(stream, decoder)
        except MessageError as exc:
            logger.warning("got an invalid packet: %s", exc)
            continue
        except OSError as exc:
            logger.info("connection closed: %s", exc)
            break
        if message is None:
            break
        queue.put(message)
        delivered += 1
    return delivered


def start_reader(stream: Any, queue: Any, decoder: Decoder) -> threading.Thread:
    """Start a daemon thread that pumps packets from `stream` into `queue`."""
    thread = threading.Thread(
        target=pump_packets,
        args=(stream, queue, decoder),
        name="packet-reader",
        daemon=True,
    )
    thread.start()
    return thread