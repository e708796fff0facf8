"""Command contract consumed by the CommandRegistry.

A command is anything exposing ``get_description()`` and
``execute(message, args)``. The Command base class supplies the first
from a class-level ``description`` attribute, which the ``describe``
decorator fills in. Plain functions are wrapped by FunctionCommand,
usually through the ``command`` decorator.

Key classes:
    CommandDescription: Immutable name/triggers/argument-count record.
    SupportsCommand: Protocol accepted by the registry.
    Command: ABC implemented by concrete commands.
    FunctionCommand: Adapter turning a callable into a Command.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Tuple


@dataclass(frozen=True)
class CommandDescription:
    """Describes how a command is triggered.

    Attributes:
        name: Display name, used in log entries.
        triggers: Literal tokens that invoke the command (case-sensitive).
        args: Minimum number of whitespace-separated argument tokens.
        help_text: Optional one-line usage text for help listings.
    """

    name: str
    triggers: Tuple[str, ...]
    args: int = 0
    help_text: str = ""

    def __post_init__(self):
        # Accept any iterable of triggers but store an immutable tuple
        if isinstance(self.triggers, str):
            triggers = (self.triggers,)
        else:
            triggers = tuple(self.triggers)
        object.__setattr__(self, "triggers", triggers)

        if not self.name:
            raise ValueError("Command name must not be empty")
        if not triggers:
            raise ValueError(f"Command {self.name!r} needs at least one trigger")
        if self.args < 0:
            raise ValueError(
                f"Command {self.name!r} cannot require {self.args} arguments"
            )


class SupportsCommand(Protocol):
    """Anything the registry can dispatch to, Command subclass or not."""

    def get_description(self) -> Optional[CommandDescription]: ...

    def execute(self, message: Any, args: str) -> Any: ...


class Command(ABC):
    """Base class for commands dispatched by a CommandRegistry.

    Subclasses implement execute() and either set the ``description``
    class attribute (see describe()) or override get_description().
    A command without a description is never executed.
    """

    description: Optional[CommandDescription] = None

    def get_description(self) -> Optional[CommandDescription]:
        return self.description

    @abstractmethod
    def execute(self, message: Any, args: str) -> Any:
        """Run the command.

        Args:
            message: The chat message that triggered the command.
            args: The argument string, stripped of surrounding whitespace.
        """
        ...

    def __repr__(self) -> str:
        desc = self.get_description()
        name = desc.name if desc else None
        return f"<{type(self).__name__} name={name!r}>"


def describe(name: str, *triggers: str, args: int = 0, help_text: str = ""):
    """Class decorator attaching a CommandDescription to a Command.

    With no explicit triggers the command name is used as its only
    trigger.

    Example::

        @describe("ping", "ping", "p")
        class Ping(Command):
            def execute(self, message, args):
                message.reply("pong")
    """
    description = CommandDescription(
        name=name,
        triggers=triggers or (name,),
        args=args,
        help_text=help_text,
    )

    def decorator(cls):
        cls.description = description
        return cls

    return decorator


class FunctionCommand(Command):
    """Wraps a plain callable ``handler(message, args)`` as a Command.

    The handler may be a regular function or a coroutine function; in
    the latter case only the async registry operations await it.
    """

    def __init__(
        self,
        description: Optional[CommandDescription],
        handler: Callable[[Any, str], Any],
    ):
        self.description = description
        self.handler = handler

    def execute(self, message: Any, args: str) -> Any:
        return self.handler(message, args)

    def __repr__(self) -> str:
        handler_name = getattr(self.handler, "__qualname__", repr(self.handler))
        name = self.description.name if self.description else None
        return f"<FunctionCommand name={name!r} handler={handler_name}>"


def command(name: str, *triggers: str, args: int = 0, help_text: str = ""):
    """Decorator turning a function into a FunctionCommand.

    The decorated name is bound to the FunctionCommand, ready to be
    passed to CommandRegistry.register_command().
    """
    description = CommandDescription(
        name=name,
        triggers=triggers or (name,),
        args=args,
        help_text=help_text,
    )

    def decorator(func: Callable[[Any, str], Any]) -> FunctionCommand:
        return FunctionCommand(description, func)

    return decorator
