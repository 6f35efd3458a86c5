"""
spring_autohost.commands — Typed autohost commands
===================================================

One frozen model per command the game server can send on the
autohost link. The decoder produces these; subscribers receive them.

    >>> PlayerJoined(player_nb=3, player_name="Bob").fields()
    (3, 'Bob')

Command codes are fixed by the engine; there is no version byte on
the wire, so COMMAND_CODES is authoritative.
"""

from __future__ import annotations
from typing import Any, ClassVar, Dict, Literal, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import DisconnectCause, ReadyState


class BaseCommand(BaseModel):
    """Fields shared by every decoded command."""

    model_config = ConfigDict(frozen=True)

    code: ClassVar[int]
    name: str

    def fields(self) -> Tuple[Any, ...]:
        """Return the payload values in wire order (without the name)."""
        return tuple(
            getattr(self, field) for field in type(self).model_fields if field != "name"
        )

    def describe(self) -> str:
        return ",".join(str(v) for v in (self.name, *self.fields()))


# ============================================
# Server lifecycle
# ============================================

class ServerStarted(BaseCommand):
    code: ClassVar[int] = 0
    name: Literal["SERVER_STARTED"] = "SERVER_STARTED"


class ServerQuit(BaseCommand):
    code: ClassVar[int] = 1
    name: Literal["SERVER_QUIT"] = "SERVER_QUIT"


class ServerStartPlaying(BaseCommand):
    """Game started. game_id/demo_name are only sent by newer servers."""
    code: ClassVar[int] = 2
    name: Literal["SERVER_STARTPLAYING"] = "SERVER_STARTPLAYING"
    game_id: Optional[str] = None       # 32 lower-case hex digits
    demo_name: Optional[str] = None


class ServerGameOver(BaseCommand):
    """One player's view of the game outcome."""
    code: ClassVar[int] = 3
    name: Literal["SERVER_GAMEOVER"] = "SERVER_GAMEOVER"
    msg_size: int
    player_nb: int
    winning_ally_teams: Tuple[int, ...] = ()


class ServerMessage(BaseCommand):
    code: ClassVar[int] = 4
    name: Literal["SERVER_MESSAGE"] = "SERVER_MESSAGE"
    text: str


class ServerWarning(BaseCommand):
    code: ClassVar[int] = 5
    name: Literal["SERVER_WARNING"] = "SERVER_WARNING"
    text: str


# ============================================
# Player events
# ============================================

class PlayerJoined(BaseCommand):
    code: ClassVar[int] = 10
    name: Literal["PLAYER_JOINED"] = "PLAYER_JOINED"
    player_nb: int
    player_name: str


class PlayerLeft(BaseCommand):
    code: ClassVar[int] = 11
    name: Literal["PLAYER_LEFT"] = "PLAYER_LEFT"
    player_nb: int
    reason: Union[DisconnectCause, int]


class PlayerReady(BaseCommand):
    code: ClassVar[int] = 12
    name: Literal["PLAYER_READY"] = "PLAYER_READY"
    player_nb: int
    ready_state: Union[ReadyState, int]


class PlayerChat(BaseCommand):
    """Chat line. destination is "", "allies", "spectators", a player
    name, or the raw destination code when it matches nobody."""
    code: ClassVar[int] = 13
    name: Literal["PLAYER_CHAT"] = "PLAYER_CHAT"
    player_nb: int
    destination: Union[str, int]
    text: str


class PlayerDefeated(BaseCommand):
    code: ClassVar[int] = 14
    name: Literal["PLAYER_DEFEATED"] = "PLAYER_DEFEATED"
    player_nb: int


# ============================================
# Game data
# ============================================

class GameLuaMsg(BaseCommand):
    """Lua message relayed by the server; data is left opaque."""
    code: ClassVar[int] = 20
    name: Literal["GAME_LUAMSG"] = "GAME_LUAMSG"
    player_nb: int
    script: int
    mode: str = Field(min_length=1, max_length=1)
    data: bytes = b""


class TeamStatistics(BaseModel):
    """Engine TeamStatistics block (one u32, 12 floats, 7 u32)."""

    model_config = ConfigDict(frozen=True)

    frame: int
    metal_used: float
    energy_used: float
    metal_produced: float
    energy_produced: float
    metal_excess: float
    energy_excess: float
    metal_received: float
    energy_received: float
    metal_sent: float
    energy_sent: float
    damage_dealt: float
    damage_received: float
    units_produced: int
    units_died: int
    units_received: int
    units_sent: int
    units_captured: int
    units_out_captured: int
    units_killed: int


class GameTeamStat(BaseCommand):
    code: ClassVar[int] = 60
    name: Literal["GAME_TEAMSTAT"] = "GAME_TEAMSTAT"
    team_nb: int
    stats: TeamStatistics


Command = Union[
    ServerStarted,
    ServerQuit,
    ServerStartPlaying,
    ServerGameOver,
    ServerMessage,
    ServerWarning,
    PlayerJoined,
    PlayerLeft,
    PlayerReady,
    PlayerChat,
    PlayerDefeated,
    GameLuaMsg,
    GameTeamStat,
]

COMMAND_TYPES: Tuple[Type[BaseCommand], ...] = (
    ServerStarted,
    ServerQuit,
    ServerStartPlaying,
    ServerGameOver,
    ServerMessage,
    ServerWarning,
    PlayerJoined,
    PlayerLeft,
    PlayerReady,
    PlayerChat,
    PlayerDefeated,
    GameLuaMsg,
    GameTeamStat,
)

# code -> command name
COMMAND_CODES: Dict[int, str] = {
    cls.code: cls.model_fields["name"].default for cls in COMMAND_TYPES
}

COMMAND_NAMES = frozenset(COMMAND_CODES.values())

# PLAYER_CHAT destination code -> channel; other codes are player numbers
DESTINATIONS: Dict[int, str] = {
    125: "",
    126: "spectators",
    127: "allies",
    252: "allies",
    253: "spectators",
    254: "",
}
