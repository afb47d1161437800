"""Logging utilities for cartpy.

cartpy logs through loguru and stays silent until asked: the ``cartpy``
logger is disabled at import time. ``enable_logging()`` switches it on and
adds one handler; the returned ``LoggingHandle`` takes both back, either via
``disable()`` or at the end of a ``with`` block.

Levels used by the package:

- ``INFO``: one summary line per trained tree (rows, leaves, depth).
- ``DEBUG``: the question chosen at every split.
- ``TRACE``: every leaf emitted while growing the tree.
"""

from __future__ import annotations

import sys
from typing import Literal

from loguru import logger

PACKAGE_NAME = __name__.split(".")[0]

logger.disable(PACKAGE_NAME)

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_FORMATS = {
    "short": "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | {message}",
    "full": (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - {message}"
    ),
}


class LoggingHandle:
    """The handler added by :func:`enable_logging`.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     DecisionTree(headers).train(rows)
    """

    def __init__(self, handler_id: int) -> None:
        self.handler_id: int | None = handler_id

    def disable(self) -> None:
        """Remove the handler and silence cartpy again; a second call does nothing."""
        if self.handler_id is None:
            return
        logger.remove(self.handler_id)
        self.handler_id = None
        logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(self, *exc_info) -> None:
        self.disable()


def enable_logging(*, level: LogLevel = "INFO", log_format: str = "short", sink=sys.stderr) -> LoggingHandle:
    """Route cartpy records at ``level`` and above to ``sink``.

    Args:
        level (LogLevel): ``"DEBUG"`` shows every split decision, ``"TRACE"``
            also shows every leaf.
        log_format (str): ``"short"`` (time, level, message) or ``"full"``
            (adds module, function and line).
        sink: Any loguru sink. Defaults to ``sys.stderr``.
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sink,
        level=level,
        format=_FORMATS[log_format],
        filter=PACKAGE_NAME,
    )
    return LoggingHandle(handler_id)
