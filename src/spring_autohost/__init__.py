"""
spring_autohost — Game server autohost interface
=================================================

Client side of the game engine's "autohost" UDP link: decodes the
binary command stream the server sends, keeps a live model of the
session and its players, and runs subscriber callbacks for each
command in priority order.

Quick Start:
    from spring_autohost import AutoHostInterface

    ah = AutoHostInterface(auto_host_port=8454)
    ah.add_callbacks({"SERVER_GAMEOVER": on_game_over}, priority=10)
    ah.open()
    ...
    ah.pump()          # once per readable datagram
    ah.close()

Subscribers
-----------
Pre-callbacks run before the session state is updated for a command,
callbacks run after it. The "_ALL_" subject (ALL_COMMANDS) receives
every command as a pre-callback. Each handler is called with the
decoded command model, e.g. PlayerChat(player_nb, destination, text).
"""

from .interface import AutoHostInterface
from .config import AutoHostConfig, load_config
from ._decoder import decode
from ._dispatch import ALL_COMMANDS, Priority
from ._logging_config import setup_logging
from ._state import Player
from .enums import DisconnectCause, ReadyState, ServerState
from .errors import (
    AutoHostError,
    ConfigError,
    DecodeError,
    DecodeIncompleteError,
    TransportError,
    UnknownCommandCodeError,
)
from .commands import (
    Command,
    COMMAND_CODES,
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
from .transport import Transport, UdpTransport

__all__ = [
    # Main classes
    "AutoHostInterface",
    "AutoHostConfig",
    "load_config",
    "setup_logging",
    "decode",
    "ALL_COMMANDS",
    "Priority",
    "Player",
    "Transport",
    "UdpTransport",
    # Enums
    "DisconnectCause",
    "ReadyState",
    "ServerState",
    # Errors
    "AutoHostError",
    "ConfigError",
    "DecodeError",
    "DecodeIncompleteError",
    "TransportError",
    "UnknownCommandCodeError",
    # Commands
    "Command",
    "COMMAND_CODES",
    "ServerStarted",
    "ServerQuit",
    "ServerStartPlaying",
    "ServerGameOver",
    "ServerMessage",
    "ServerWarning",
    "PlayerJoined",
    "PlayerLeft",
    "PlayerReady",
    "PlayerChat",
    "PlayerDefeated",
    "GameLuaMsg",
    "GameTeamStat",
    "TeamStatistics",
]
__version__ = "1.0.0"
