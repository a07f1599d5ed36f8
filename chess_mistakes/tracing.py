# chess_mistakes/tracing.py

"""
tracing
~~~~~~~

This module provides components for per-game traceability and
context-aware logging.
"""

import functools
from contextlib import contextmanager
from typing import Any, Callable, Iterator

import structlog

logger = structlog.get_logger(__name__)


@contextmanager
def game_context(game_index: int) -> Iterator[None]:
    """Binds the game index to every log event emitted inside the block."""
    with structlog.contextvars.bound_contextvars(game_index=game_index):
        yield


def trace_stage(func: Callable) -> Callable:
    """A decorator to add structured tracing to a run stage."""
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        stage_name = func.__qualname__
        logger.debug("Entering run stage.", stage=stage_name)
        result = func(*args, **kwargs)
        logger.debug("Exiting run stage.", stage=stage_name)
        return result
    return wrapper
