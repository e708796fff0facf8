"""Command dispatch table for chat bots.

Register Command objects with a CommandRegistry, then hand it each
incoming message: the registry resolves the trigger, checks the
argument count and runs the command, logging the call and wrapping
handler failures in ExecutionError.
"""

from .base import (
    Command,
    CommandDescription,
    FunctionCommand,
    SupportsCommand,
    command,
    describe,
)
from .exceptions import ChatCommandError, ConfigurationError, ErrorCategory, ExecutionError
from .invocation import Invocation, parse_invocation
from .registry import CommandRegistry

__version__ = "1.0.0"

__all__ = [
    "Command",
    "CommandDescription",
    "CommandRegistry",
    "FunctionCommand",
    "SupportsCommand",
    "command",
    "describe",
    "Invocation",
    "parse_invocation",
    "ChatCommandError",
    "ConfigurationError",
    "ErrorCategory",
    "ExecutionError",
    "__version__",
]
