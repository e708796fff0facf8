"""Custom exception hierarchy for chatcommand.

Every error raised by the package derives from ChatCommandError, so a
hosting bot can catch the whole family in its event loop while still
handling execution failures and configuration problems separately.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCategory(str, Enum):
    """Classification of errors for retry decisions."""
    TRANSIENT = "transient"          # Worth retrying (network hiccup inside a handler)
    PERMANENT = "permanent"          # Not worth retrying (bad input, handler bug)
    INFRASTRUCTURE = "infrastructure"  # Config or environment issues


class ChatCommandError(Exception):
    """Base exception for all chatcommand errors.

    Attributes:
        message: Human-readable error description.
        category: Error classification for retry/escalation decisions.
        module: Originating module name (e.g. "dispatch").
        context: Arbitrary key-value pairs for structured logging.
    """

    def __init__(
        self,
        message: str = "",
        *,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.category = category
        self.module = module
        self.context = context
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        """Whether this error is worth retrying."""
        return self.category == ErrorCategory.TRANSIENT

    def __str__(self) -> str:
        parts = [self.message or self.__class__.__name__]
        if self.module:
            parts.append(f"[module={self.module}]")
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"({ctx})")
        return " ".join(parts)

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return (
            f"{cls}({self.message!r}, category={self.category.value!r}, "
            f"module={self.module!r})"
        )


class ExecutionError(ChatCommandError):
    """A command handler raised while being executed.

    The original fault is chained as ``__cause__`` and also kept on
    ``cause`` so callers can inspect it without walking the chain.

    Attributes:
        command_name: Name of the command whose handler failed.
        cause: The exception raised by the handler.
    """

    def __init__(
        self,
        message: str = "",
        *,
        command_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
        category: ErrorCategory = ErrorCategory.PERMANENT,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.command_name = command_name
        self.cause = cause
        super().__init__(
            message, category=category, module=module or "dispatch", **context
        )


class ConfigurationError(ChatCommandError):
    """Invalid or missing configuration.

    Defaults to INFRASTRUCTURE because config issues are environmental
    and won't resolve by retrying.
    """

    def __init__(
        self,
        message: str = "",
        *,
        setting_name: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.INFRASTRUCTURE,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.setting_name = setting_name
        super().__init__(
            message, category=category, module=module or "config", **context
        )
