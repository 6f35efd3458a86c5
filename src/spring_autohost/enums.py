"""
spring_autohost.enums — Protocol and session enums
===================================================

Numeric codes reported by the game server for player and server
state. Codes outside the known members are kept as plain ints so
that newer servers do not break older clients.
"""

from enum import IntEnum
from typing import Union


class ServerState(IntEnum):
    """
    Lifecycle of the game server as observed on the autohost link.

    State transitions:
    NOT_RUNNING -> STARTED (on SERVER_STARTED)
    STARTED -> PLAYING (on SERVER_STARTPLAYING)
    PLAYING -> GAME_OVER (when finished players outnumber those in progress)
    Any state -> NOT_RUNNING (on SERVER_QUIT or close())
    """
    NOT_RUNNING = 0
    STARTED = 1
    PLAYING = 2
    GAME_OVER = 3


class DisconnectCause(IntEnum):
    """Connection status of a player; negative values mean still in game."""
    LOADING = -2
    CONNECTED = -1
    CONNECTION_LOST = 0
    LEFT = 1
    KICKED = 2


class ReadyState(IntEnum):
    """Ready status reported in PLAYER_READY."""
    NOT_READY = 0
    READY = 1
    UNKNOWN = 2


def coerce_disconnect_cause(code: int) -> Union[DisconnectCause, int]:
    """Map a reason code to DisconnectCause, keeping unknown codes verbatim."""
    try:
        return DisconnectCause(code)
    except ValueError:
        return code


def coerce_ready_state(code: int) -> Union[ReadyState, int]:
    """Map a ready-state code to ReadyState, keeping unknown codes verbatim."""
    try:
        return ReadyState(code)
    except ValueError:
        return code
