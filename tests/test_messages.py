import json

import pytest

from bitduels.cards import CardEntity, card_collection, card_from_name
from bitduels.messages import (
    AttackTroop,
    CardSpawned,
    ChatMessage,
    EndGame,
    EndTurn,
    MessageError,
    MoveTroop,
    PlayerInfo,
    Resign,
    SpawnCard,
    StartGame,
    StartTurn,
    WinGame,
    decode_client_message,
    decode_server_message,
    encode_message,
)

SERVER_MESSAGES = [
    StartGame(True),
    StartGame(False),
    StartTurn(),
    CardSpawned(CardEntity.create(card_from_name("spider"), 2, 3, True)),
    MoveTroop(0, 8, 0, 7),
    AttackTroop(4, 1, 3, 0),
    EndGame(True),
    ChatMessage("Player: gg"),
    ChatMessage("héllo ✓"),
]

CLIENT_MESSAGES = [
    PlayerInfo("Player", list(card_collection().values())),
    PlayerInfo("Nobody", []),
    MoveTroop(1, 2, 1, 3),
    AttackTroop(2, 2, 3, 3),
    SpawnCard(card_from_name("kraken"), 4, 8),
    EndTurn(),
    WinGame(2, 0),
    ChatMessage("hi"),
    Resign(),
]


@pytest.mark.parametrize("message", SERVER_MESSAGES)
def test_server_round_trip(message):
    assert decode_server_message(encode_message(message)) == message


@pytest.mark.parametrize("message", CLIENT_MESSAGES)
def test_client_round_trip(message):
    assert decode_client_message(encode_message(message)) == message


@pytest.mark.parametrize("message", CLIENT_MESSAGES)
def test_client_round_trip_from_bytes(message):
    assert decode_client_message(encode_message(message).encode("utf-8")) == message


def test_newtype_variant_wire_form():
    assert encode_message(StartGame(True)) == '{"StartGame":true}'


def test_tuple_variant_wire_form():
    assert encode_message(MoveTroop(1, 2, 3, 4)) == '{"MoveTroop":[1,2,3,4]}'


def test_unit_variant_wire_form():
    assert json.loads(encode_message(StartTurn())) == "StartTurn"


def test_card_spawned_carries_entity_json():
    entity = CardEntity.create(card_from_name("crow"), 1, 2, False)
    assert json.loads(encode_message(CardSpawned(entity)))["SpawnCard"] == entity.to_json()


def test_spawn_card_carries_card_json():
    card = card_from_name("reaper")
    wire = json.loads(encode_message(SpawnCard(card, 1, 2)))["SpawnCard"]
    assert wire == [card.to_json(), 1, 2]


def test_non_ascii_chat_is_kept_verbatim():
    text = "é✓"
    assert text in encode_message(ChatMessage(text))


def test_encode_rejects_non_message():
    with pytest.raises(MessageError):
        encode_message(object())


def test_client_spawn_is_not_a_server_message():
    encoded = encode_message(SpawnCard(card_from_name("crow"), 0, 0))
    with pytest.raises(MessageError):
        decode_server_message(encoded)


@pytest.mark.parametrize("message", [Resign(), EndTurn(), WinGame(0, 0), PlayerInfo("p", [])])
def test_client_only_messages_rejected_by_server_decoder(message):
    with pytest.raises(MessageError):
        decode_server_message(encode_message(message))


@pytest.mark.parametrize("message", [StartGame(True), StartTurn(), EndGame(False)])
def test_server_only_messages_rejected_by_client_decoder(message):
    with pytest.raises(MessageError):
        decode_client_message(encode_message(message))


@pytest.mark.parametrize(
    "data",
    [
        "not json",
        b"\xff\xfe",
        "42",
        '{"MoveTroop":[1,2,3],"EndTurn":null}',
        '{"WinGame":[1]}',
        '{"MoveTroop":[1,2,3,true]}',
        '{"MoveTroop":[2147483648,0,0,0]}',
        '{"EndTurn":null}',
        '"WinGame"',
        '{"ChatMessage":5}',
        '{"PlayerInfo":["name",{}]}',
        '{"SpawnCard":[{},0,0]}',
    ],
)
def test_client_decoder_rejects_malformed(data):
    with pytest.raises(MessageError):
        decode_client_message(data)


@pytest.mark.parametrize(
    "data",
    ['{"StartGame":1}', '{"SpawnCard":{}}', '"Unknown"', "[]", '{"EndGame":"yes"}'],
)
def test_server_decoder_rejects_malformed(data):
    with pytest.raises(MessageError):
        decode_server_message(data)


def test_message_error_is_a_value_error():
    with pytest.raises(ValueError):
        decode_server_message("{")