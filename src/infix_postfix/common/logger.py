"""Shared logger for the infix/postfix calculator."""
import logging
import sys
from typing import Union


LOG_FORMAT: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger: logging.Logger = logging.getLogger("infix_postfix")

if not logger.handlers:
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(logging.INFO)
    # Do not duplicate records through the root logger
    logger.propagate = False


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Set the level of the shared logger.

    :param level: Logging level name (e.g. "DEBUG") or numeric value
    :raises ValueError: If the level name is unknown
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        level = numeric
    logger.setLevel(level)
