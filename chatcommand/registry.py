"""Command registry and dispatcher.

The CommandRegistry is the dispatch table of a chat bot: commands are
registered once at startup, then every incoming message is resolved to
a command by trigger and executed with its argument string.

Dispatch rules:
    - Lookup is an exact, case-sensitive match against each command's
      triggers, scanning in registration order. When several commands
      share a trigger the earliest registered one wins.
    - A command without a description is invisible to lookup and is
      never executed.
    - The argument string is stripped of ASCII control characters and
      spaces, then split on ASCII whitespace runs. Unicode spaces such as
      U+00A0 are ordinary argument characters. An empty string still
      counts as one (empty) token. Too few tokens means the call is
      dropped silently.
    - A handler that raises is logged and re-raised as ExecutionError.

Membership is guarded by a lock so bots delivering events from several
threads can dispatch and register concurrently. Handlers run outside
the lock; a handler that never returns blocks only its own caller.
"""

import inspect
import re
import threading
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, Union

import structlog

from .base import CommandDescription, SupportsCommand
from .config import DEFAULT_LOG_CHANNEL
from .exceptions import ExecutionError
from .invocation import parse_invocation

_WHITESPACE = re.compile(r"\s+", re.ASCII)

# Stripped from both ends of an argument string: NUL through space
_TRIM_CHARS = "".join(chr(c) for c in range(0x21))

CommandOrIterable = Union[SupportsCommand, Iterable[SupportsCommand]]


def _flatten(items: Iterable[CommandOrIterable]) -> Iterator[SupportsCommand]:
    """Yield commands from a mix of commands and iterables of commands."""
    for item in items:
        if hasattr(item, "get_description"):
            yield item
        else:
            yield from item


def count_arguments(args: str) -> int:
    """Number of whitespace-separated tokens in an already stripped string.

    Only ASCII whitespace separates tokens. ``""`` counts as one token,
    matching a plain regex split.
    """
    return len(_WHITESPACE.split(args))


class CommandRegistry:
    """Registered commands plus the find/execute routine over them.

    Args:
        log_channel: Name of the structlog logger receiving the
            "Executing <name>" and "Could not execute <name>" entries.
        prefix: Default prefix used by handle() and handle_async().
    """

    def __init__(self, log_channel: str = DEFAULT_LOG_CHANNEL, prefix: str = ""):
        self.log_channel = log_channel
        self.prefix = prefix
        self._logger = structlog.get_logger(log_channel)
        # dict keys act as an insertion-ordered set
        self._commands: Dict[SupportsCommand, None] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config) -> "CommandRegistry":
        """Create a registry using the configured log channel and prefix."""
        return cls(log_channel=config.log_channel, prefix=config.command_prefix)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def register_commands(self, *commands: CommandOrIterable) -> None:
        """Register commands.

        Each argument is either a command or an iterable of commands
        (a set, list, ...). Registering a command twice is a no-op.
        """
        with self._lock:
            for command in _flatten(commands):
                if command in self._commands:
                    continue
                self._warn_on_conflict(command)
                self._commands[command] = None

    def register_command(self, command: SupportsCommand) -> None:
        """Register a single command."""
        self.register_commands(command)

    def unregister_commands(self, *commands: CommandOrIterable) -> None:
        """Unregister commands; unknown commands are ignored."""
        with self._lock:
            for command in _flatten(commands):
                self._commands.pop(command, None)

    def unregister_command(self, command: SupportsCommand) -> None:
        """Unregister a single command."""
        self.unregister_commands(command)

    def get_commands(self) -> frozenset:
        """Snapshot of all registered commands."""
        with self._lock:
            return frozenset(self._commands)

    def _snapshot(self) -> Tuple[SupportsCommand, ...]:
        with self._lock:
            return tuple(self._commands)

    def __len__(self) -> int:
        with self._lock:
            return len(self._commands)

    def __contains__(self, command: object) -> bool:
        with self._lock:
            return command in self._commands

    def __iter__(self) -> Iterator[SupportsCommand]:
        return iter(self._snapshot())

    def _warn_on_conflict(self, command: SupportsCommand) -> None:
        description = command.get_description()
        if description is None:
            return
        for other in self._commands:
            other_description = other.get_description()
            if other_description is None:
                continue
            shared = set(description.triggers) & set(other_description.triggers)
            if shared:
                self._logger.warning(
                    "command_trigger_conflict",
                    command=description.name,
                    existing=other_description.name,
                    triggers=sorted(shared),
                )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_command(self, trigger: str) -> Optional[SupportsCommand]:
        """Find the first registered command answering to ``trigger``.

        Returns:
            The command, or None if no described command has the trigger.
        """
        for command in self._snapshot():
            description = command.get_description()
            if description is not None and trigger in description.triggers:
                return command
        return None

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _prepare(
        self, command: SupportsCommand, args: str
    ) -> Optional[Tuple[CommandDescription, str]]:
        """Apply the description and argument-count checks.

        Returns (description, stripped_args), or None when the command
        must not run.
        """
        description = command.get_description()
        if description is None:
            return None
        args = args.strip(_TRIM_CHARS)
        if description.args > count_arguments(args):
            return None
        return description, args

    def _execution_failed(
        self, description: CommandDescription, exc: Exception
    ) -> ExecutionError:
        self._logger.error(
            f"Could not execute {description.name}",
            command=description.name,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return ExecutionError(
            f"Could not execute {description.name}",
            command_name=description.name,
            cause=exc,
        )

    def execute(self, command: SupportsCommand, message: Any, args: str) -> None:
        """Execute ``command`` for ``message`` with the raw ``args`` string.

        Does nothing when the command has no description or when fewer
        argument tokens were given than the description requires.

        Raises:
            ExecutionError: The handler raised; the original exception
                is chained as the cause.
        """
        prepared = self._prepare(command, args)
        if prepared is None:
            return
        description, args = prepared

        self._logger.info(f"Executing {description.name}", command=description.name)
        try:
            result = command.execute(message, args)
            if inspect.iscoroutine(result):
                result.close()
                raise TypeError(
                    f"{description.name} has an async handler; use execute_async()"
                )
        except Exception as e:
            raise self._execution_failed(description, e) from e

    def find_and_execute(self, trigger: str, message: Any, args: str) -> None:
        """Look up ``trigger`` and execute the command if one is found.

        Raises:
            ExecutionError: Propagated unchanged from execute().
        """
        command = self.find_command(trigger)
        if command is None:
            return
        self.execute(command, message, args)

    def handle(self, message: Any, content: str, prefix: Optional[str] = None) -> bool:
        """Parse a raw chat line and dispatch it.

        Args:
            message: Message passed through to the handler.
            content: Text of the message, e.g. ``"!ban someone spam"``.
            prefix: Overrides the registry's default prefix.

        Returns:
            True if a command answered to the trigger, even when the
            argument check then skipped it.
        """
        invocation = parse_invocation(content, self.prefix if prefix is None else prefix)
        if invocation is None:
            return False
        command = self.find_command(invocation.trigger)
        if command is None:
            return False
        self.execute(command, message, invocation.args)
        return True

    # ------------------------------------------------------------------
    # asyncio variants
    # ------------------------------------------------------------------

    async def execute_async(self, command: SupportsCommand, message: Any, args: str) -> None:
        """Like execute(), but awaits handlers that return an awaitable."""
        prepared = self._prepare(command, args)
        if prepared is None:
            return
        description, args = prepared

        self._logger.info(f"Executing {description.name}", command=description.name)
        try:
            result = command.execute(message, args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            raise self._execution_failed(description, e) from e

    async def find_and_execute_async(self, trigger: str, message: Any, args: str) -> None:
        command = self.find_command(trigger)
        if command is None:
            return
        await self.execute_async(command, message, args)

    async def handle_async(
        self, message: Any, content: str, prefix: Optional[str] = None
    ) -> bool:
        invocation = parse_invocation(content, self.prefix if prefix is None else prefix)
        if invocation is None:
            return False
        command = self.find_command(invocation.trigger)
        if command is None:
            return False
        await self.execute_async(command, message, invocation.args)
        return True
