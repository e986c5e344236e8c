"""Logging helpers for the launcher.

All loggers are children of the ``srcboot`` logger so that the launched program's own logging
configuration is left alone.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional, Union

from .env import get_srcboot_log_level

_ROOT_LOGGER_NAME = "srcboot"
_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
_handler: Optional[logging.Handler] = None


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``srcboot`` namespace.

    Parameters
    ----------
    name : str
        Component name, e.g. ``"Compiler"``.

    Returns
    -------
    logging.Logger
        The logger named ``srcboot.<name>``.
    """
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")


def configure_logging(
    level: Union[int, str, None] = None, stream: Optional[IO[str]] = None
) -> logging.Logger:
    """Attach a single stream handler to the ``srcboot`` logger.

    Calling this again replaces the previously installed handler instead of stacking a new one.

    Parameters
    ----------
    level : Union[int, str, None]
        Logging level. Defaults to the ``SRCBOOT_LOG_LEVEL`` environment variable.
    stream : Optional[IO[str]]
        Stream for the handler. Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        The configured ``srcboot`` root logger.
    """
    global _handler

    if level is None:
        level = get_srcboot_log_level()
    if isinstance(level, str):
        level = level.upper()

    root = logging.getLogger(_ROOT_LOGGER_NAME)
    if _handler is not None:
        root.removeHandler(_handler)
    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(_handler)
    root.setLevel(level)
    root.propagate = False
    return root
