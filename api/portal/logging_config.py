"""
Logging setup for the portal.

Every module logs through ``logging.getLogger("portal.<module>")``; this module
installs a single stream handler on the ``portal`` logger so uvicorn's own
handlers are left alone.
"""

import logging
import sys

from . import config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("portal")


def setup_logging(level: str | None = None) -> logging.Logger:
    lvl = getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO)
    logger.setLevel(lvl)
    if not any(getattr(h, "_portal", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._portal = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"portal.{name}")
