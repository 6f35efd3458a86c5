# Area: Dispatch
"""
spring_autohost._dispatch — Callback dispatch engine
=====================================================

Routes each decoded command to its subscribers in a fixed order:

1. Wildcard pre-callbacks (subject "_ALL_"), by priority
2. Pre-callbacks for the command name, by priority
3. The built-in session handler for the command, if any
4. Callbacks for the command name, by priority

Priorities are numeric (ints or digit strings, ascending) or labels;
every numeric priority runs before any label, and labels keep their
registration order among themselves.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from ._state import SessionState
from .commands import BaseCommand

logger = logging.getLogger("spring_autohost.dispatch")

ALL_COMMANDS = "_ALL_"

Handler = Callable[[BaseCommand], Any]
PriorityToken = Union[int, str, "Priority"]


class Priority:
    """
    Sort key for subscribers of the same subject.

    Usage:
        sorted([Priority("z"), Priority(50), Priority("5")])
        # -> [Priority(5), Priority(50), Priority('z')]
    """

    __slots__ = ("token", "number")

    def __init__(self, token: PriorityToken):
        if isinstance(token, Priority):
            token, number = token.token, token.number
        elif isinstance(token, int) and not isinstance(token, bool):
            number = token
        elif isinstance(token, str) and token.isdigit() and token.isascii():
            number = int(token)
        else:
            number = None
        self.token = token
        self.number = number

    @property
    def is_numeric(self) -> bool:
        return self.number is not None

    def sort_key(self) -> Tuple[int, int]:
        if self.number is None:
            return (1, 0)
        return (0, self.number)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        # Identity of a subscription slot, not ordering equality
        if self.is_numeric and other.is_numeric:
            return self.number == other.number
        return self.token == other.token

    def __lt__(self, other: "Priority") -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __hash__(self) -> int:
        return hash(("n", self.number) if self.is_numeric else ("l", self.token))

    def __repr__(self) -> str:
        return f"Priority({self.token!r})"

    def __str__(self) -> str:
        return str(self.token)


@dataclass
class Subscription:
    """A subscriber and how many calls it has left (0 = unlimited)."""
    handler: Handler
    remaining_calls: int = 0


class SubscriptionRegistry:
    """
    subject -> {priority -> Subscription}.

    Replacing a (subject, priority) pair keeps its slot, so the
    replacement neither duplicates nor reorders subscribers.
    """

    def __init__(self, kind: str = "callback"):
        self.kind = kind
        self._subjects: Dict[str, Dict[Priority, Subscription]] = {}

    def add(
        self,
        subject: str,
        priority: PriorityToken,
        handler: Handler,
        max_calls: int = 0,
    ) -> None:
        if max_calls < 0:
            raise ValueError(f"max_calls must be >= 0, got {max_calls}")
        priority = Priority(priority)
        entries = self._subjects.setdefault(subject, {})
        if priority in entries:
            logger.warning(
                f'Replacing an existing {subject} {self.kind} for priority "{priority}"'
            )
        entries[priority] = Subscription(handler=handler, remaining_calls=max_calls)

    def remove(self, subjects: Iterable[str], priority: PriorityToken) -> None:
        priority = Priority(priority)
        if isinstance(subjects, str):
            subjects = [subjects]
        for subject in subjects:
            entries = self._subjects.get(subject)
            if entries is None:
                continue
            entries.pop(priority, None)
            if not entries:
                del self._subjects[subject]

    def ordered(self, subject: str) -> List[Tuple[Priority, Subscription]]:
        """Subscribers of a subject in invocation order."""
        entries = self._subjects.get(subject, {})
        return sorted(entries.items(), key=lambda item: item[0].sort_key())

    def consume(self, subject: str, priority: Priority) -> None:
        """Count one call against a limited subscription, retiring it at zero."""
        entries = self._subjects.get(subject)
        if not entries or priority not in entries:
            return
        subscription = entries[priority]
        if subscription.remaining_calls == 1:
            del entries[priority]
            if not entries:
                del self._subjects[subject]
        elif subscription.remaining_calls > 1:
            subscription.remaining_calls -= 1

    def get(self, subject: str, priority: PriorityToken) -> Optional[Subscription]:
        return self._subjects.get(subject, {}).get(Priority(priority))

    def subjects(self) -> List[str]:
        return list(self._subjects)

    def __contains__(self, subject: object) -> bool:
        return subject in self._subjects

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._subjects.values())


class Dispatcher:
    """
    Runs the subscriber pipeline for decoded commands.

    Usage:
        dispatcher = Dispatcher(SessionState())
        dispatcher.callbacks.add("PLAYER_CHAT", 10, on_chat)
        ok = dispatcher.dispatch_all(commands)
    """

    def __init__(self, state: SessionState, warn_for_unhandled_messages: bool = True):
        self.state = state
        self.warn_for_unhandled_messages = warn_for_unhandled_messages
        self.pre_callbacks = SubscriptionRegistry("pre-callback")
        self.callbacks = SubscriptionRegistry("callback")

    def dispatch(self, command: BaseCommand) -> bool:
        """
        Run every phase for one command.

        Returns:
            False if any handler reported failure or the command went
            unprocessed while unhandled-message warnings are enabled
        """
        name = command.name
        processed = False
        ok = True

        for subject in (ALL_COMMANDS, name):
            ran, phase_ok = self._run_phase(self.pre_callbacks, subject, command)
            processed = processed or ran
            ok = phase_ok and ok

        builtin = self.state.handler_for(name)
        if builtin is not None:
            processed = True
            ok = bool(builtin(command)) and ok

        ran, phase_ok = self._run_phase(self.callbacks, name, command)
        processed = processed or ran
        ok = phase_ok and ok

        if not processed and self.warn_for_unhandled_messages:
            logger.warning(f'Unexpected/unhandled command received: "{command.describe()}"')
            ok = False

        return ok

    def _run_phase(self, registry: SubscriptionRegistry, subject: str,
                   command: BaseCommand) -> Tuple[bool, bool]:
        """Invoke one subject's subscribers. Returns (any_ran, all_ok)."""
        ran = False
        ok = True
        for priority, _ in registry.ordered(subject):
            # Earlier handlers may have removed or replaced this slot
            subscription = registry.get(subject, priority)
            if subscription is None:
                continue
            ran = True
            registry.consume(subject, priority)
            ok = self._invoke(subscription.handler, command, registry.kind, priority) and ok
        return ran, ok

    def dispatch_all(self, commands: Iterable[BaseCommand]) -> bool:
        """Dispatch every command; never stops early on failure."""
        ok = True
        for command in commands:
            logger.debug(f' --> decoded as: "{command.describe()}"')
            ok = self.dispatch(command) and ok
        return ok

    def _invoke(self, handler: Handler, command: BaseCommand,
                kind: str, priority: Priority) -> bool:
        try:
            result = handler(command)
        except Exception:
            logger.exception(
                f'{command.name} {kind} for priority "{priority}" raised'
            )
            return False
        return result is None or bool(result)
