"""Shared pytest setup for the engine: test env file and caplog-friendly structlog."""

from pathlib import Path

import pytest
import structlog
from dotenv import load_dotenv

TEST_ENV_FILE = Path(__file__).resolve().parent.parent / ".env.tests"


def _configure_structlog_for_caplog() -> None:
    """Hand event dicts to stdlib logging unrendered so tests can read record.msg keys."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


load_dotenv(TEST_ENV_FILE)
_configure_structlog_for_caplog()


@pytest.fixture(autouse=True)
def _isolated_log_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def log_events(caplog):
    """Return a callable listing the structlog event names captured so far."""

    def _events(level: int | None = None) -> list[str]:
        return [
            r.msg["event"]
            for r in caplog.records
            if isinstance(r.msg, dict) and (level is None or r.levelno == level)
        ]

    return _events
