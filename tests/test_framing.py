import io
import queue
import socket

import pytest

from bitduels.cards import CardEntity, card_from_name
from bitduels.framing import (
    encode_packet,
    pack_length,
    pump_packets,
    read_packet,
    start_reader,
    unpack_length,
    write_packet,
)
from bitduels.messages import (
    AttackTroop,
    CardSpawned,
    ChatMessage,
    EndTurn,
    MessageError,
    StartGame,
    decode_client_message,
    decode_server_message,
    encode_message,
)


def test_pack_length_matches_byteorder_case():
    assert pack_length(568) == bytes([0, 0, 2, 56])
    assert unpack_length(pack_length(568)) == 568


@pytest.mark.parametrize("length", [0, 1, 255, 65536, 0xFFFFFFFF])
def test_length_round_trip(length):
    assert unpack_length(pack_length(length)) == length


@pytest.mark.parametrize("length", [-1, 2**32])
def test_pack_length_out_of_range(length):
    with pytest.raises(ValueError):
        pack_length(length)


@pytest.mark.parametrize("data", [b"", b"\x00\x00", b"\x00\x00\x00\x00\x00"])
def test_unpack_length_wrong_size(data):
    with pytest.raises(ValueError):
        unpack_length(data)


def test_encode_packet_layout():
    message = AttackTroop(1, 2, 3, 4)
    packet = encode_packet(message)
    body = encode_message(message).encode("utf-8")
    assert packet[4:] == body
    assert unpack_length(packet[:4]) == len(body)


def test_header_counts_bytes_not_characters():
    packet = encode_packet(ChatMessage("é✓é"))
    assert unpack_length(packet[:4]) == len(packet) - 4


def test_write_then_read_through_file():
    stream = io.BytesIO()
    entity = CardEntity.create(card_from_name("kraken"), 2, 8, True)
    write_packet(stream, CardSpawned(entity))
    write_packet(stream, StartGame(False))
    stream.seek(0)
    assert read_packet(stream, decode_server_message) == CardSpawned(entity)
    assert read_packet(stream, decode_server_message) == StartGame(False)
    assert read_packet(stream, decode_server_message) is None


def test_write_then_read_through_socket():
    left, right = socket.socketpair()
    with left, right:
        write_packet(left, ChatMessage("hello"))
        assert read_packet(right, decode_client_message) == ChatMessage("hello")


def test_read_packet_at_end_of_stream():
    assert read_packet(io.BytesIO(b""), decode_server_message) is None


def test_read_packet_zero_length_ends_stream():
    assert read_packet(io.BytesIO(pack_length(0)), decode_server_message) is None


def test_read_packet_truncated_body():
    packet = encode_packet(EndTurn())
    assert read_packet(io.BytesIO(packet[:-1]), decode_client_message) is None


def test_read_packet_invalid_body():
    stream = io.BytesIO(pack_length(3) + b"bad")
    with pytest.raises(MessageError):
        read_packet(stream, decode_client_message)


def test_pump_packets_skips_invalid_packets():
    stream = io.BytesIO(
        encode_packet(EndTurn())
        + pack_length(3)
        + b"bad"
        + encode_packet(ChatMessage("gg"))
    )
    received = queue.Queue()
    assert pump_packets(stream, received, decode_client_message) == 2
    assert received.get_nowait() == EndTurn()
    assert received.get_nowait() == ChatMessage("gg")
    assert received.empty()


def test_start_reader_delivers_messages():
    stream = io.BytesIO(encode_packet(StartGame(True)) + encode_packet(ChatMessage("a: b")))
    received = queue.Queue()
    thread = start_reader(stream, received, decode_server_message)
    thread.join(timeout=5)
    assert not thread.is_alive()
    assert thread.daemon
    assert [received.get_nowait(), received.get_nowait()] == [
        StartGame(True),
        ChatMessage("a: b"),
    ]


def test_start_reader_stops_when_socket_closes():
    left, right = socket.socketpair()
    with right:
        received = queue.Queue()
        thread = start_reader(right, received, decode_client_message)
        write_packet(left, EndTurn())
        left.close()
        thread.join(timeout=5)
        assert not thread.is_alive()
        assert received.get_nowait() == EndTurn()