import logging

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo structlog/stdlib configuration done by setup_logging()."""
    root = logging.getLogger()
    root_level = root.level
    yield
    structlog.reset_defaults()
    root.setLevel(root_level)
    # Leave pytest's own capture handlers alone
    for handler in list(root.handlers):
        if not type(handler).__module__.startswith("_pytest"):
            root.removeHandler(handler)
            handler.close()
    for name in ("chatcommand", "chatcommand.dispatch", "chatcommand.config"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("CHATCOMMAND_PREFIX", raising=False)
    monkeypatch.delenv("CHATCOMMAND_LOG_LEVEL", raising=False)
