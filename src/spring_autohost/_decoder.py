# Area: Decoder
"""
spring_autohost._decoder — Autohost datagram decoder
=====================================================

Turns one raw datagram into the ordered list of commands it carries.

Decoding walks the buffer with a cursor, one command after the other.
It stops at the first unknown command code or at the first command
whose fixed fields are cut short; whatever was decoded before that
point is kept and the rest of the datagram is dropped. Commands
ending with a string field (or an opaque payload) own every
remaining byte, so they are always last in their datagram.
"""

from __future__ import annotations
import logging
import struct
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .commands import (
    COMMAND_CODES,
    DESTINATIONS,
    Command,
    GameLuaMsg,
    GameTeamStat,
    PlayerChat,
    PlayerDefeated,
    PlayerJoined,
    PlayerLeft,
    PlayerReady,
    ServerGameOver,
    ServerMessage,
    ServerQuit,
    ServerStarted,
    ServerStartPlaying,
    ServerWarning,
    TeamStatistics,
)
from .enums import coerce_disconnect_cause, coerce_ready_state
from .errors import DecodeError, DecodeIncompleteError, UnknownCommandCodeError

logger = logging.getLogger("spring_autohost.decoder")

# frame, 12 float counters, 7 unit counters
TEAM_STATS_STRUCT = struct.Struct("<I12f7I")

GAME_ID_SIZE = 16
STARTPLAYING_HEADER_SIZE = 4
LUAMSG_SKIPPED_BYTES = 3


class ByteCursor:
    """Read position over one datagram."""

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.pos = 0
        self.command_name: Optional[str] = None

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def byte(self) -> int:
        if self.at_end():
            raise DecodeIncompleteError(
                f"Unable to decode {self.command_name} command (incomplete command)",
                self.data, self.pos, self.command_name,
            )
        value = self.data[self.pos]
        self.pos += 1
        return value

    def take(self, size: int) -> bytes:
        if self.remaining() < size:
            raise DecodeIncompleteError(
                f"Unable to decode {self.command_name} command "
                f"(needed {size} bytes, {self.remaining()} left)",
                self.data, self.pos, self.command_name,
            )
        chunk = self.data[self.pos:self.pos + size]
        self.pos += size
        return chunk

    def skip(self, size: int) -> int:
        """Skip up to *size* bytes, returning how many were actually skipped."""
        skipped = min(size, self.remaining())
        self.pos += skipped
        return skipped

    def rest(self) -> bytes:
        chunk = self.data[self.pos:]
        self.pos = len(self.data)
        return chunk

    def string(self) -> str:
        """Consume the rest of the datagram as text."""
        chars = []
        for char_code in self.rest():
            if char_code > 31:
                chars.append(chr(char_code))
            else:
                chars.append("_")
                logger.info(
                    f"Control character #{char_code} encountered while parsing "
                    f"a string received from game server"
                )
        return "".join(chars)


# ── Per-command payload readers ─────────────────────────────────


def _read_start_playing(cursor: ByteCursor, players) -> ServerStartPlaying:
    skipped = cursor.skip(STARTPLAYING_HEADER_SIZE)
    if skipped < STARTPLAYING_HEADER_SIZE:
        # Older servers send no extended params
        return ServerStartPlaying()
    game_id = cursor.take(GAME_ID_SIZE).hex()
    return ServerStartPlaying(game_id=game_id, demo_name=cursor.string())


def _read_game_over(cursor: ByteCursor, players) -> ServerGameOver:
    msg_size = cursor.byte()
    player_nb = cursor.byte()
    teams = cursor.take(max(msg_size - 3, 0))
    return ServerGameOver(
        msg_size=msg_size,
        player_nb=player_nb,
        winning_ally_teams=tuple(teams),
    )


def _read_player_joined(cursor: ByteCursor, players) -> PlayerJoined:
    player_nb = cursor.byte()
    return PlayerJoined(player_nb=player_nb, player_name=cursor.string())


def _read_player_left(cursor: ByteCursor, players) -> PlayerLeft:
    player_nb = cursor.byte()
    reason = coerce_disconnect_cause(cursor.byte())
    return PlayerLeft(player_nb=player_nb, reason=reason)


def _read_player_ready(cursor: ByteCursor, players) -> PlayerReady:
    player_nb = cursor.byte()
    ready_state = coerce_ready_state(cursor.byte())
    return PlayerReady(player_nb=player_nb, ready_state=ready_state)


def _read_player_chat(cursor: ByteCursor, players) -> PlayerChat:
    player_nb = cursor.byte()
    destination = resolve_destination(cursor.byte(), players)
    return PlayerChat(player_nb=player_nb, destination=destination, text=cursor.string())


def _read_player_defeated(cursor: ByteCursor, players) -> PlayerDefeated:
    return PlayerDefeated(player_nb=cursor.byte())


def _read_lua_msg(cursor: ByteCursor, players) -> GameLuaMsg:
    # The server prefixes Lua messages with 3 stray bytes
    cursor.take(LUAMSG_SKIPPED_BYTES)
    player_nb = cursor.byte()
    script_low = cursor.byte()
    script_high = cursor.byte()
    mode = chr(cursor.byte())
    return GameLuaMsg(
        player_nb=player_nb,
        script=script_high * 256 + script_low,
        mode=mode,
        data=cursor.rest(),
    )


def _read_team_stat(cursor: ByteCursor, players) -> GameTeamStat:
    team_nb = cursor.byte()
    raw = cursor.take(TEAM_STATS_STRUCT.size)
    if not cursor.at_end():
        logger.warning(
            f"Ignoring {cursor.remaining()} trailing bytes after GAME_TEAMSTAT "
            f"for team {team_nb}"
        )
        cursor.rest()
    values = TEAM_STATS_STRUCT.unpack(raw)
    stats = TeamStatistics(**dict(zip(TeamStatistics.model_fields, values)))
    return GameTeamStat(team_nb=team_nb, stats=stats)


PayloadReader = Callable[[ByteCursor, Optional[Mapping]], Command]

READERS: Dict[str, PayloadReader] = {
    "SERVER_STARTED": lambda cursor, players: ServerStarted(),
    "SERVER_QUIT": lambda cursor, players: ServerQuit(),
    "SERVER_STARTPLAYING": _read_start_playing,
    "SERVER_GAMEOVER": _read_game_over,
    "SERVER_MESSAGE": lambda cursor, players: ServerMessage(text=cursor.string()),
    "SERVER_WARNING": lambda cursor, players: ServerWarning(text=cursor.string()),
    "PLAYER_JOINED": _read_player_joined,
    "PLAYER_LEFT": _read_player_left,
    "PLAYER_READY": _read_player_ready,
    "PLAYER_CHAT": _read_player_chat,
    "PLAYER_DEFEATED": _read_player_defeated,
    "GAME_LUAMSG": _read_lua_msg,
    "GAME_TEAMSTAT": _read_team_stat,
}


def resolve_destination(code: int, players: Optional[Mapping] = None):
    """
    Resolve a PLAYER_CHAT destination code.

    Args:
        code: Raw destination byte
        players: Current player table (player_nb -> Player), if known

    Returns:
        The channel name, the addressed player's name, or the raw code
    """
    if code in DESTINATIONS:
        return DESTINATIONS[code]
    if players and code in players:
        return players[code].name
    return code


def decode(
    data: bytes, players: Optional[Mapping] = None
) -> Tuple[List[Command], bool]:
    """
    Decode every command carried by one datagram.

    Args:
        data: Raw datagram
        players: Player table used to resolve private chat destinations

    Returns:
        (commands, consumed) where consumed is False when decoding
        stopped before the end of the datagram
    """
    cursor = ByteCursor(data)
    commands: List[Command] = []

    while not cursor.at_end():
        start = cursor.pos
        code = cursor.byte()
        try:
            name = COMMAND_CODES.get(code)
            if name is None:
                raise UnknownCommandCodeError(code, cursor.data, start)
            cursor.command_name = name
            commands.append(READERS[name](cursor, players))
        except DecodeError as e:
            logger.warning(f"{e} — dropping {len(e.discarded)} bytes")
            logger.debug(e.format_error_log())
            return commands, False
        finally:
            cursor.command_name = None

    return commands, True
