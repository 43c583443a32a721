"""Logging helpers.

All loggers live under the ``qstep`` namespace and share a single stderr
handler so that library code never prints directly::

    >>> from qstep.log import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("applying gate")
"""

import logging
import sys
from typing import Dict, Optional, Union

_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
_DEFAULT_LEVEL = logging.WARNING

_loggers: Dict[str, logging.Logger] = {}


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the cached ``qstep`` logger for ``name`` (usually ``__name__``)."""
    if name is None:
        name = "qstep"
    logger_name = name if name == "qstep" or name.startswith("qstep.") else f"qstep.{name}"
    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: Union[int, str]) -> None:
    """Set the level of every ``qstep`` logger, existing and future."""
    global _DEFAULT_LEVEL
    level = _coerce_level(level)
    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
    _DEFAULT_LEVEL = level
