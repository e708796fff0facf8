"""Logging configuration for chatcommand.

Provides subsystem-level log file routing, secret sanitization,
and structlog + stdlib integration.

Subsystem hierarchy (stdlib dotted names, structlog wraps them):
    root                → ConsoleHandler (terminal)
      └─ chatcommand    → RotatingFileHandler → chatcommand.log (combined)
           ├─ chatcommand.dispatch → RFH → dispatch.log
           └─ chatcommand.config   → RFH → config.log

A registry configured with a custom log channel outside the
``chatcommand`` prefix still reaches the console through the root logger.
"""

import logging
import logging.handlers
import re
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

# Subsystem names — each gets its own RotatingFileHandler
SUBSYSTEMS = ("dispatch", "config")

# stdlib logger name prefix for hierarchy-based propagation
LOGGER_PREFIX = "chatcommand"

# ---------------------------------------------------------------------------
# Secret sanitization
# ---------------------------------------------------------------------------

_SECRET_PATTERNS = [
    # Discord bot tokens (base64 user id . timestamp . hmac)
    re.compile(r"[MNO][A-Za-z\d_-]{23,27}\.[A-Za-z\d_-]{6}\.[A-Za-z\d_-]{27,}"),
    # Slack bot/user tokens
    re.compile(r"xox[abposr]-[A-Za-z0-9-]{10,}"),
    # Telegram bot tokens (<bot id>:<35 char secret>)
    re.compile(r"\b\d{8,10}:[A-Za-z0-9_-]{35}\b"),
    # Bearer token values in headers
    re.compile(r"Bearer\s+[a-zA-Z0-9_./-]{20,}"),
]

_REDACTED = "***REDACTED***"


def _scrub_value(value: str) -> str:
    """Scrub secrets from a single string value."""
    for pattern in _SECRET_PATTERNS:
        value = pattern.sub(_REDACTED, value)
    return value


def sanitize_secrets(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor that scrubs chat-platform tokens.

    Walks all string values in the event dict (one level into lists,
    tuples and dicts) and replaces matches with a redacted placeholder.
    Command arguments are logged verbatim elsewhere, so a user pasting
    a token into chat must not end up with it in the log files.
    """
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = _scrub_value(value)
        elif isinstance(value, (list, tuple)):
            event_dict[key] = type(value)(
                _scrub_value(v) if isinstance(v, str) else v
                for v in value
            )
        elif isinstance(value, dict):
            event_dict[key] = {
                k: _scrub_value(v) if isinstance(v, str) else v
                for k, v in value.items()
            }
    return event_dict


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def resolve_level(name: Any) -> Optional[int]:
    """Map a level name such as "debug" to its number, None if unknown."""
    if not isinstance(name, str):
        return None
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else None


def _reset_logger(name: str, level: int) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = True
    return logger


def setup_logging(config=None) -> None:
    """Route chatcommand log entries to the console and rotating files.

    The root logger writes to stdout. ``chatcommand`` collects every
    entry in chatcommand.log and each subsystem also gets its own file.
    Without a config, defaults are used and structlog loggers are not
    cached, so a later call with the real config still takes effect.
    Unknown level names fall back to the root level.
    """
    if config is not None:
        log_dir = config.log_dir
        root_level = resolve_level(config.logging_level) or logging.INFO
        subsystem_levels = config.logging_subsystem_levels
        rotation = {
            "maxBytes": config.logging_max_file_size_mb * 1024 * 1024,
            "backupCount": config.logging_backup_count,
        }
    else:
        log_dir = Path(__file__).parent.parent / "logs"
        root_level = logging.INFO
        subsystem_levels = {}
        rotation = {"maxBytes": 10 * 1024 * 1024, "backupCount": 5}

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        print(
            f"WARNING: Cannot create log directory {log_dir}: {exc}. "
            "Falling back to console-only logging.",
            file=sys.stderr,
        )
        log_dir = None

    file_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
    )

    def attach_file(logger: logging.Logger, filename: str, level: int) -> None:
        if log_dir is None:
            return
        handler = logging.handlers.RotatingFileHandler(
            log_dir / filename, encoding="utf-8", **rotation
        )
        handler.setLevel(level)
        handler.setFormatter(file_formatter)
        logger.addHandler(handler)

    root_logger = _reset_logger("", logging.DEBUG)  # Handlers filter by level
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(root_level)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    )
    root_logger.addHandler(console_handler)

    attach_file(_reset_logger(LOGGER_PREFIX, logging.DEBUG), f"{LOGGER_PREFIX}.log", root_level)

    for subsystem in SUBSYSTEMS:
        sub_level = resolve_level(subsystem_levels.get(subsystem)) or root_level
        sub_logger = _reset_logger(f"{LOGGER_PREFIX}.{subsystem}", sub_level)
        attach_file(sub_logger, f"{subsystem}.log", sub_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            sanitize_secrets,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=config is not None,
    )
