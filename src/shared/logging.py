"""
Logging for the wager engine and its scripts.

Engine modules log through ``structlog.get_logger()``; this module decides
where those events go. Events pass through stdlib logging, so pytest's
caplog and any host application's handlers see them too.

Environment variables (explicit arguments to setup_logging win):
- LOG_FORMAT: "json" for one JSON object per line, "console" or unset for
  human-readable output.
- LOG_LEVEL: "DEBUG", "INFO" (default), "WARNING", "ERROR", or "CRITICAL".
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterator, MutableMapping
    from typing import Any

    from wager.logic.state import GameSnapshot

LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

LOG_FORMATS = ("json", "console")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _loggable(value: object) -> object:
    # money stays exact: "12.50" and "2/3", never a float
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (Decimal, Fraction)):
        return str(value)
    return value


def _render_domain_values(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Turn enums, Decimal amounts and Fraction points into JSON-safe values, one level deep."""
    for key, value in event_dict.items():
        if isinstance(value, dict):
            event_dict[key] = {k: _loggable(v) for k, v in value.items()}
        else:
            event_dict[key] = _loggable(value)
    return event_dict


def _json_output_from_env() -> bool:
    value = os.environ.get("LOG_FORMAT", "").lower()
    if value and value not in LOG_FORMATS:
        raise ValueError(f"Invalid LOG_FORMAT={value!r}. Must be 'json', 'console', or unset.")
    return value == "json"


def _level_from_env() -> int:
    value = os.environ.get("LOG_LEVEL", "INFO").upper()
    if value not in LOG_LEVELS:
        raise ValueError(f"Invalid LOG_LEVEL={value!r}. Must be one of {', '.join(LOG_LEVELS)}.")
    return getattr(logging, value)


def _handler_formatter(*, json_output: bool, colors: bool) -> logging.Formatter:
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=colors)
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def _open_log_file(log_dir: Path | str) -> Path:
    dir_path = Path(log_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path / f"{datetime.now(tz=UTC).strftime(LOG_FILE_TIMESTAMP_FORMAT)}.log"


def setup_logging(
    log_dir: Path | str | None = None,
    level: int | None = None,
    *,
    json_output: bool | None = None,
) -> Path | None:
    """
    Route engine events to stdout and, optionally, a log file.

    Args:
        log_dir: Directory for a timestamped log file; no file when None.
        level: Root log level; LOG_LEVEL when None.
        json_output: Render JSON lines instead of console text; LOG_FORMAT when None.

    Returns:
        Path of the log file, or None when only stdout is configured.

    Calling it again replaces the previous handlers.
    """
    if json_output is None:
        json_output = _json_output_from_env()
    if level is None:
        level = _level_from_env()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _render_domain_values,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(_handler_formatter(json_output=json_output, colors=sys.stdout.isatty()))
    root_logger.addHandler(console)

    if log_dir is None:
        return None

    file_path = _open_log_file(log_dir)
    file_handler = logging.FileHandler(file_path)
    file_handler.setFormatter(_handler_formatter(json_output=json_output, colors=False))
    root_logger.addHandler(file_handler)
    return file_path


@contextmanager
def snapshot_context(snapshot: GameSnapshot) -> Iterator[None]:
    """Tag every event logged inside the block with the game being computed."""
    with structlog.contextvars.bound_contextvars(
        game_type=snapshot.settings.type,
        phase=snapshot.phase,
        players=len(snapshot.players),
    ):
        yield
