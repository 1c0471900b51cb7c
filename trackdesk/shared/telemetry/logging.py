"""Logging setup: one stdout handler, DEBUG in debug mode, INFO otherwise."""

import logging
import sys

from trackdesk.core.config import get_settings

_LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

# Libraries that log every request; partition streams would flood the output.
_NOISY_LOGGERS = ("httpx", "httpcore", "google.auth.transport.requests")


def setup_logging() -> None:
    """Configure the root logger from settings.

    Safe to call more than once (e.g. create_app in tests): basicConfig with
    force=True replaces the previous handler instead of stacking another.
    """
    level = logging.DEBUG if get_settings().debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=_LOG_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return the module logger for name (usually __name__)."""
    return logging.getLogger(name)
