"""
Logging configuration for the marketplace backend.

All modules log through children of the ``marketplace`` logger, which owns a
single stdout handler. The level comes from ``LOG_LEVEL``.
"""
import logging
import sys

from marketplace.utils.settings import LOG_LEVEL

ROOT_LOGGER_NAME = "marketplace"

logger = logging.getLogger(ROOT_LOGGER_NAME)
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

# avoid duplicate lines through the root logger (uvicorn configures it)
logger.propagate = False


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Return a logger under the ``marketplace`` namespace.

    Module names that already start with ``marketplace`` are used as is, so
    ``get_logger(__name__)`` works everywhere in the package.
    """
    if not name:
        return logger
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
