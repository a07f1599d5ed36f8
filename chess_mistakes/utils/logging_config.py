# chess_mistakes/utils/logging_config.py
"""
Configures application-wide structured logging using structlog.

Library code only ever calls `structlog.get_logger(__name__)`; the CLI calls
`setup_logging` once, before the first analysis.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from structlog.types import Processor

# Loggers of dependencies that are noisy at DEBUG level.
_QUIET_LOGGERS = ("chess.pgn", "concurrent.futures")


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _formatter(pre_chain: List[Processor], renderer: Processor) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(foreign_pre_chain=pre_chain, processor=renderer)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    json_console: bool = False,
) -> None:
    """
    Routes structlog through the standard library root logger.

    Console output goes to stderr (stdout is left for reports piped by the
    caller) and uses the coloured development renderer unless `json_console`
    is set. `log_file`, when given, receives one JSON object per event.
    Games are tagged with `game_index` through the contextvars processor.
    """
    shared = _shared_processors()
    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    console_renderer: Processor = (
        structlog.processors.JSONRenderer() if json_console
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(_formatter(shared, console_renderer))
    handlers: List[logging.Handler] = [console_handler]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(_formatter(shared, structlog.processors.JSONRenderer()))
        handlers.append(file_handler)

    level = log_level.upper()
    logging.basicConfig(handlers=handlers, level=level, force=True)
    if level == "DEBUG":
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.INFO)
