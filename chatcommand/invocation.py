"""Splits a raw chat line into a trigger and its argument string."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Invocation:
    """A parsed command line.

    Attributes:
        trigger: First token after the prefix, case preserved.
        args: Everything after the trigger, left as-is for the registry
            to strip and count.
    """
    trigger: str
    args: str


def parse_invocation(content: str, prefix: str = "") -> Optional[Invocation]:
    """Parse ``content`` as ``<prefix><trigger> [args...]``.

    Returns None when the line does not start with ``prefix`` or has no
    trigger token after it.
    """
    text = content.lstrip()
    if prefix:
        if not text.startswith(prefix):
            return None
        text = text[len(prefix):]

    # A prefix followed by whitespace ("! ping") is not an invocation
    parts = text.split(maxsplit=1) if text and not text[0].isspace() else []
    if not parts:
        return None

    trigger = parts[0]
    args = parts[1] if len(parts) > 1 else ""
    return Invocation(trigger=trigger, args=args)
