"""Structured logging configuration with structlog.

Format, level and optional log directory come from ScorecardSettings
(SCORECARD_LOG_FORMAT, SCORECARD_LOG_LEVEL, SCORECARD_LOG_DIR).
"json" output is meant for log aggregation, "console" for humans.
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from shared.settings import LogFormat

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from typing import Any

    from shared.settings import ScorecardSettings

LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def _serialize_enums(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Replace Enum instances with their .value for readable log output."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def _is_test() -> bool:
    return "pytest" in sys.modules


def _build_formatter(*, json_mode: bool, colors: bool = False) -> logging.Formatter:
    renderer = structlog.processors.JSONRenderer() if json_mode else structlog.dev.ConsoleRenderer(colors=colors)
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def setup_logging(settings: ScorecardSettings) -> Path | None:
    """Configure structlog with stdout and optional file output.

    When settings.log_dir is set, creates a datetime-stamped log file inside
    that directory and returns its path. Returns None otherwise.
    """
    json_mode = settings.log_format == LogFormat.JSON

    # format_exc_info runs in ProcessorFormatter, not here, so tracebacks
    # are rendered once per handler.
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _serialize_enums,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level))
    root_logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(_build_formatter(json_mode=json_mode, colors=sys.stdout.isatty()))
    root_logger.addHandler(stdout_handler)

    if settings.log_dir is None or _is_test():
        return None

    dir_path = Path(settings.log_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(tz=UTC).strftime(LOG_FILE_TIMESTAMP_FORMAT)
    file_path = dir_path / f"{timestamp}.log"
    file_handler = logging.FileHandler(file_path)
    file_handler.setFormatter(_build_formatter(json_mode=json_mode, colors=False))
    root_logger.addHandler(file_handler)
    return file_path
