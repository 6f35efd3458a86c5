"""
spring_autohost.interface — Autohost interface
===============================================

AutoHostInterface is what host applications (autohost bots) create.
Each pump() call reads at most one datagram from the game server,
decodes it, updates the session state and runs subscribers, all
synchronously on the caller's thread.

Usage
-----
    from spring_autohost import AutoHostInterface

    def on_chat(command):
        print(command.player_nb, command.text)

    ah = AutoHostInterface(auto_host_port=8454)
    ah.add_callbacks({"PLAYER_CHAT": on_chat})
    ah.open()
    while running:
        wait_for_readable(...)
        ah.pump()
    ah.close()
"""

from __future__ import annotations
import inspect
import logging
from typing import Any, Callable, Iterable, Mapping, Optional

from ._decoder import decode
from ._dispatch import Dispatcher, PriorityToken
from ._state import Player, SessionState
from .config import AutoHostConfig
from .enums import ServerState
from .errors import TransportError
from .transport import Transport, UdpTransport

logger = logging.getLogger("spring_autohost.interface")


def _caller_module(depth: int = 2) -> str:
    """Module name of the code *depth* frames above this helper's caller."""
    frame = inspect.currentframe()
    try:
        for _ in range(depth):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            return "__main__"
        return frame.f_globals.get("__name__", "__main__")
    finally:
        del frame


class AutoHostInterface:
    """
    Callback-based client for the game server's autohost link.

    Args:
        config: Validated options (defaults used when omitted)
        transport: Datagram endpoint (a UdpTransport when omitted)
        **overrides: Individual config keys, e.g. auto_host_port=8452
    """

    def __init__(
        self,
        config: Optional[AutoHostConfig] = None,
        transport: Optional[Transport] = None,
        **overrides: Any,
    ):
        config = config or AutoHostConfig()
        if overrides:
            config = config.with_overrides(**overrides)
        self.config = config
        self.transport: Transport = transport if transport is not None else UdpTransport()
        self.session = SessionState()
        self.dispatcher = Dispatcher(
            self.session,
            warn_for_unhandled_messages=config.warn_for_unhandled_messages,
        )
        # Whether the last pump() call read a datagram
        self.received = False

    # ── Link lifecycle ───────────────────────────────────────

    @property
    def is_open(self) -> bool:
        return self.transport.is_open

    def open(self) -> bool:
        """Start listening on the autohost port. Returns False on failure."""
        host, port = self.config.host, self.config.auto_host_port
        logger.info(f"Listening on AutoHost port ({host}:{port})")
        if self.transport.is_open:
            logger.warning("Could not start listening on AutoHost port (already listening)!")
            return True
        try:
            self.transport.open(host, port)
        except TransportError as e:
            logger.critical(str(e))
            return False
        return True

    def close(self) -> None:
        """Stop listening and forget the session."""
        logger.info("Closing AutoHost interface")
        if not self.transport.is_open:
            logger.warning("Unable to close AutoHost interface (already closed)!")
        else:
            self.transport.close()
        self.session.reset()

    def __enter__(self) -> "AutoHostInterface":
        if not self.open():
            raise TransportError(
                f"Unable to listen on {self.config.host}:{self.config.auto_host_port}"
            )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # ── Receive / send ───────────────────────────────────────

    def pump(self) -> bool:
        """
        Receive and process at most one datagram.

        Returns:
            True if a datagram was received and every command decoded
            from it was handled successfully. Bytes the decoder had to
            drop are logged, not reported here.
        """
        self.received = False
        if not self.transport.is_open:
            logger.error("Unable to receive command (AutoHost interface not opened)")
            return False

        data = self.transport.receive(self.config.receive_buffer_size)
        if not data:
            logger.debug("Empty message received on AutoHost interface")
            return False

        self.received = True
        logger.debug(f'Received from game server: "{data!r}"')
        commands, _ = decode(data, self.session.players)
        return self.dispatcher.dispatch_all(commands)

    def send_chat_message(self, message: str) -> bool:
        """Send a chat line (or /command) to the game server, verbatim."""
        if not self.transport.is_open:
            logger.error("Unable to send chat message (AutoHost interface not opened)")
            return False
        if self.session.state == ServerState.NOT_RUNNING:
            logger.error("Unable to send chat message (server not connected)")
            return False
        sent = self.transport.send(message.encode("utf-8"))
        if sent:
            logger.debug(f'Sent on AutoHost interface: "{message}"')
        return sent

    # ── Accessors ────────────────────────────────────────────

    def get_state(self) -> ServerState:
        return self.session.state

    def get_game_id(self) -> str:
        return self.session.game_id

    def get_demo_name(self) -> str:
        return self.session.demo_name

    def get_players(self) -> Mapping[int, Player]:
        """Read-only copy of the player table, keyed by player number."""
        return self.session.players_snapshot()

    def get_players_by_names(self) -> Mapping[str, Player]:
        return self.session.players_by_name()

    def get_player(self, name: str) -> Optional[Player]:
        return self.session.player_by_name(name)

    def dump_state(self) -> None:
        self.session.dump_state()

    @staticmethod
    def get_version() -> str:
        from . import __version__
        return __version__

    # ── Subscriptions ────────────────────────────────────────

    def add_callbacks(
        self,
        callbacks: Mapping[str, Callable],
        max_calls: int = 0,
        priority: Optional[PriorityToken] = None,
    ) -> None:
        """
        Subscribe handlers run after the built-in state update.

        Args:
            callbacks: command name -> handler(command)
            max_calls: Calls before auto-removal (0 = unlimited)
            priority: Ordering token; defaults to the caller's module name
        """
        if priority is None:
            priority = _caller_module()
        for command_name, handler in callbacks.items():
            self.dispatcher.callbacks.add(command_name, priority, handler, max_calls)

    def remove_callbacks(
        self, command_names: Iterable[str], priority: Optional[PriorityToken] = None
    ) -> None:
        if priority is None:
            priority = _caller_module()
        self.dispatcher.callbacks.remove(command_names, priority)

    def add_pre_callbacks(
        self,
        pre_callbacks: Mapping[str, Callable],
        priority: Optional[PriorityToken] = None,
        max_calls: int = 0,
    ) -> None:
        """
        Subscribe handlers run before the built-in state update.
        Use the "_ALL_" subject to see every command.
        """
        if priority is None:
            priority = _caller_module()
        for command_name, handler in pre_callbacks.items():
            self.dispatcher.pre_callbacks.add(command_name, priority, handler, max_calls)

    def remove_pre_callbacks(
        self, command_names: Iterable[str], priority: Optional[PriorityToken] = None
    ) -> None:
        if priority is None:
            priority = _caller_module()
        self.dispatcher.pre_callbacks.remove(command_names, priority)
