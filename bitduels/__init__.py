"""Rules, wire protocol, match server and client-side state for a two-player card duel."""

__version__ = "0.1.0"