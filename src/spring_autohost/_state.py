# Area: State
"""
spring_autohost._state — Session and player state tracker
==========================================================

Rebuilds the game server's session from the command stream alone:
server lifecycle, game id, demo name and the player table keyed by
player number. One handler per state-affecting command; every other
command leaves the state untouched.

Commands come from an untrusted, possibly reordered stream, so
handlers never raise: inconsistencies are logged and skipped.
"""

from __future__ import annotations
import logging
import re
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel

from .commands import (
    BaseCommand,
    PlayerDefeated,
    PlayerJoined,
    PlayerLeft,
    PlayerReady,
    ServerGameOver,
    ServerMessage,
    ServerQuit,
    ServerStarted,
    ServerStartPlaying,
)
from .enums import DisconnectCause, ReadyState, ServerState

logger = logging.getLogger("spring_autohost.state")

# Connection handshake lines sent as SERVER_MESSAGE
CONNECTION_ATTEMPT_RE = re.compile(r"^Connection attempt from ([^ ]+)$")
VERSION_RE = re.compile(r"^ -> Version: (.*)$")
ADDRESS_RE = re.compile(r"^ -> Address: (.*)$")
CONNECTION_ESTABLISHED_RE = re.compile(r"^ -> Connection established \(given id (\d+)\)$")


class Player(BaseModel):
    """One player of the current session."""
    player_nb: int
    name: str
    disconnect_cause: Union[DisconnectCause, int] = DisconnectCause.CONNECTED
    ready: Union[ReadyState, int] = ReadyState.UNKNOWN
    lost: bool = False
    version: str = ""
    address: str = ""
    winning_ally_teams: Optional[Tuple[int, ...]] = None    # set once outcome known


class PendingConnection(BaseModel):
    """Player details gathered from handshake lines, before an id is given."""
    name: str = ""
    version: str = ""
    address: str = ""


class SessionState:
    """
    Session/player state for one autohost link.

    Attributes:
        state: Current server lifecycle state
        game_id: 32 hex digit game id, empty until SERVER_STARTPLAYING reports it
        demo_name: Demo file name, empty until reported
        players: player_nb -> Player
        pending_connection: Handshake details being accumulated
    """

    def __init__(self):
        self.state = ServerState.NOT_RUNNING
        self.game_id = ""
        self.demo_name = ""
        self.players: Dict[int, Player] = {}
        self.pending_connection = PendingConnection()
        self._handlers: Dict[str, Callable[[BaseCommand], bool]] = {
            "SERVER_STARTED": self.on_server_started,
            "SERVER_QUIT": self.on_server_quit,
            "SERVER_STARTPLAYING": self.on_server_start_playing,
            "SERVER_GAMEOVER": self.on_server_game_over,
            "SERVER_MESSAGE": self.on_server_message,
            "PLAYER_JOINED": self.on_player_joined,
            "PLAYER_LEFT": self.on_player_left,
            "PLAYER_READY": self.on_player_ready,
            "PLAYER_DEFEATED": self.on_player_defeated,
        }

    def handler_for(self, command_name: str) -> Optional[Callable[[BaseCommand], bool]]:
        """Return the built-in handler for a command name, or None."""
        return self._handlers.get(command_name)

    def reset(self) -> None:
        """Forget everything about the session."""
        self.state = ServerState.NOT_RUNNING
        self.game_id = ""
        self.demo_name = ""
        self.players = {}
        self.pending_connection = PendingConnection()

    # ── Server lifecycle ─────────────────────────────────────

    def on_server_started(self, command: ServerStarted) -> bool:
        self._set_state(ServerState.STARTED)
        self.game_id = ""
        self.demo_name = ""
        return True

    def on_server_quit(self, command: ServerQuit) -> bool:
        self._set_state(ServerState.NOT_RUNNING)
        self.players = {}
        return True

    def on_server_start_playing(self, command: ServerStartPlaying) -> bool:
        self._set_state(ServerState.PLAYING)
        if command.game_id is not None:
            self.game_id = command.game_id
        if command.demo_name is not None:
            self.demo_name = command.demo_name
        return True

    def on_server_game_over(self, command: ServerGameOver) -> bool:
        player = self.players.get(command.player_nb)
        if player is None:
            # Outcome is kept anyway so that it still counts as finished
            logger.warning(
                f"SERVER_GAMEOVER for unknown player number {command.player_nb}, "
                f"recording outcome anyway"
            )
            player = Player(player_nb=command.player_nb, name="")
            self.players[command.player_nb] = player
        elif player.winning_ally_teams is not None:
            logger.warning(
                f"Overwriting outcome of player #{command.player_nb} "
                f"({list(player.winning_ally_teams)} -> {list(command.winning_ally_teams)})"
            )
        player.winning_ally_teams = tuple(command.winning_ally_teams)
        self.check_game_over()
        return True

    def on_server_message(self, command: ServerMessage) -> bool:
        text = command.text
        pending = self.pending_connection

        match = CONNECTION_ATTEMPT_RE.match(text)
        if match:
            self.pending_connection = PendingConnection(name=match.group(1))
            return True

        match = VERSION_RE.match(text)
        if match:
            pending.version = match.group(1)
            return True

        match = ADDRESS_RE.match(text)
        if match:
            pending.address = match.group(1)
            return True

        match = CONNECTION_ESTABLISHED_RE.match(text)
        if match:
            self._establish_connection(int(match.group(1)))
        return True

    def _establish_connection(self, player_nb: int) -> None:
        pending = self.pending_connection
        player = self.players.get(player_nb)
        if player is None:
            self.players[player_nb] = Player(
                player_nb=player_nb,
                name=pending.name,
                disconnect_cause=DisconnectCause.LOADING,
                version=pending.version,
                address=pending.address,
            )
        elif player.name != pending.name:
            logger.warning(
                f"Received a SERVER_MESSAGE command saying player #{player_nb} was "
                f"{pending.name}, whereas PLAYER_JOINED said it was {player.name}"
            )
        else:
            player.version = pending.version
            player.address = pending.address
            player.disconnect_cause = DisconnectCause.LOADING
        self.pending_connection = PendingConnection()

    # ── Player events ────────────────────────────────────────

    def on_player_joined(self, command: PlayerJoined) -> bool:
        player = self.players.get(command.player_nb)
        if player is None:
            self.players[command.player_nb] = Player(
                player_nb=command.player_nb,
                name=command.player_name,
            )
        elif player.name != command.player_name:
            logger.warning(
                f"Received a PLAYER_JOINED command saying player #{command.player_nb} was "
                f"{command.player_name}, whereas SERVER_MESSAGE said it was {player.name}"
            )
        else:
            player.disconnect_cause = DisconnectCause.CONNECTED
        return True

    def on_player_left(self, command: PlayerLeft) -> bool:
        player = self._known_player(command)
        if player is not None:
            player.disconnect_cause = command.reason
            self.check_game_over()
        return True

    def on_player_ready(self, command: PlayerReady) -> bool:
        player = self._known_player(command)
        if player is not None and command.ready_state != ReadyState.UNKNOWN:
            player.ready = command.ready_state
        return True

    def on_player_defeated(self, command: PlayerDefeated) -> bool:
        player = self._known_player(command)
        if player is not None:
            player.lost = True
        return True

    def _known_player(self, command) -> Optional[Player]:
        player = self.players.get(command.player_nb)
        if player is None:
            logger.warning(
                f"Ignoring {command.name} message (unknown player number {command.player_nb})"
            )
        return player

    # ── Game over heuristic ──────────────────────────────────

    def check_game_over(self) -> None:
        """Declare the game over once finished players outnumber those still in game."""
        finished = 0
        in_progress = 0
        for player in self.players.values():
            if player.winning_ally_teams is not None:
                finished += 1
            elif player.disconnect_cause < 0:
                in_progress += 1
        if finished > in_progress:
            self._set_state(ServerState.GAME_OVER)

    def _set_state(self, new_state: ServerState) -> None:
        if new_state != self.state:
            logger.info(f"Server state: {self.state.name} → {new_state.name}")
        self.state = new_state

    # ── Snapshots ────────────────────────────────────────────

    def players_snapshot(self) -> Mapping[int, Player]:
        return MappingProxyType(
            {nb: player.model_copy(deep=True) for nb, player in self.players.items()}
        )

    def players_by_name(self) -> Mapping[str, Player]:
        return MappingProxyType(
            {player.name: player.model_copy(deep=True) for player in self.players.values()}
        )

    def player_by_name(self, name: str) -> Optional[Player]:
        for player in self.players.values():
            if player.name == name:
                return player.model_copy(deep=True)
        return None

    def dump_state(self) -> None:
        logger.debug("-------------------------- DUMPING STATE ----------------------------")
        logger.debug(f"State: {self.state.name}")
        logger.debug(f"Game id: {self.game_id!r}, demo: {self.demo_name!r}")
        logger.debug("Players:")
        for nb, p in self.players.items():
            logger.debug(
                f"  {nb}: name={p.name},ready={int(p.ready)},lost={int(p.lost)},"
                f"disconnectCause={int(p.disconnect_cause)},version={p.version}"
            )
        logger.debug("--------------------------- END OF DUMP -----------------------------")
