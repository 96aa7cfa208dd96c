"""Player settings, their storage on disk, and the waiting-room text."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from bitduels.cards import Card, card_from_name

logger = logging.getLogger(__name__)

BASE_WINDOW_WIDTH = 300
BASE_WINDOW_HEIGHT = 180
TILE_SIZE_PER_SCALE = 20
DEFAULT_DECK = ("skeleton", "reaper", "kraken", "spider", "crow")
WAITING_TEXT = "Waiting for Opponent"

_U8_MAX = 255
# The characters that count as whitespace among the ASCII range.
_ASCII_WHITESPACE = frozenset("\t\n\x0b\x0c\r ")

PathLike = Union[str, Path]


def sanitize_input(text: str) -> str:
    """Strip whitespace and every non-ASCII character from a text box value."""
    return "".join(c for c in text if c.isascii() and c not in _ASCII_WHITESPACE)


def _default_deck() -> list[Card]:
    return [card_from_name(name) for name in DEFAULT_DECK]


def _field(data: Any, key: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {data!r}")
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field {key!r}") from None


def _str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {value!r}")
    return value


def _bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be a boolean, got {value!r}")
    return value


def _u8(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U8_MAX:
        raise ValueError(f"{name} must be an integer in [0, {_U8_MAX}], got {value!r}")
    return value


@dataclass
class Settings:
    """What the player can configure, plus the deck they bring to a game."""

    username: str = "Player"
    server_addr: str = "127.0.0.1:1000"
    debug_mode: bool = False
    volume: int = 100
    window_scale: int = 4
    deck: list[Card] = field(default_factory=_default_deck)

    def window_size(self) -> tuple[int, int]:
        """Return the window's width and height in pixels."""
        return (
            BASE_WINDOW_WIDTH * self.window_scale,
            BASE_WINDOW_HEIGHT * self.window_scale,
        )

    def tile_size(self) -> int:
        """Return the side of one board tile in pixels."""
        return self.window_scale * TILE_SIZE_PER_SCALE

    def to_json(self) -> dict[str, Any]:
        """Return the stored form of the settings."""
        return {
            "username": self.username,
            "server_addr": self.server_addr,
            "debug_mode": self.debug_mode,
            "volume": self.volume,
            "window_scale": self.window_scale,
            "deck": [card.to_json() for card in self.deck],
        }

    @classmethod
    def from_json(cls, data: Any) -> Settings:
        """Build settings from their stored form; raise ValueError if it is malformed."""
        deck = _field(data, "deck")
        if not isinstance(deck, list):
            raise ValueError(f"deck must be a list, got {deck!r}")
        return cls(
            username=_str(_field(data, "username"), "username"),
            server_addr=_str(_field(data, "server_addr"), "server_addr"),
            debug_mode=_bool(_field(data, "debug_mode"), "debug_mode"),
            volume=_u8(_field(data, "volume"), "volume"),
            window_scale=_u8(_field(data, "window_scale"), "window_scale"),
            deck=[Card.from_json(card) for card in deck],
        )


def save_settings(settings: Settings, path: PathLike) -> None:
    """Write the settings to `path` as JSON; raises OSError if it cannot."""
    Path(path).write_text(json.dumps(settings.to_json()), encoding="utf-8")


def load_settings(path: PathLike) -> Settings:
    """Read the settings stored at `path`.

    If nothing valid is stored there, the defaults are written to `path` and
    returned; an OSError is raised if they cannot be written.
    """
    try:
        return Settings.from_json(json.loads(Path(path).read_text(encoding="utf-8")))
    except (OSError, ValueError) as exc:
        logger.info("using default settings: %s", exc)
    settings = Settings()
    save_settings(settings, path)
    return settings


@dataclass
class WaitingText:
    """The animated "Waiting for Opponent" line shown before a game starts."""

    period: float = 0.5
    state: int = 0
    elapsed: float = 0.0
    text: str = WAITING_TEXT + "..."

    def tick(self, elapsed: float) -> str:
        """Advance by `elapsed` seconds and return the text to show.

        Each time the period passes one more dot is shown, up to three, after
        which the count starts again from one.
        """
        if elapsed < 0:
            raise ValueError(f"elapsed time cannot be negative: {elapsed}")
        self.elapsed += elapsed
        if self.elapsed >= self.period:
            self.elapsed = self.elapsed % self.period if self.period > 0 else 0.0
            self.state += 1
            self.text = WAITING_TEXT + "." * self.state
            if self.state > 2:
                self.state = 0
        return self.text


def default_settings_path(directory: Optional[PathLike] = None) -> Path:
    """Return where the settings file lives inside `directory` (the working directory by default)."""
    return Path(directory or ".") / "settings.json"