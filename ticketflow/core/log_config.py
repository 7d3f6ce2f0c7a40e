"""Logging setup for the ticketflow package.

Call ``setup_logging()`` once at startup; modules log through
``logging.getLogger(__name__)``.
"""

import logging
import sys

from ticketflow.core.config import settings

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_CONFIGURED = False


def _resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    name = (level or settings.log_level).strip().upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: str | int | None = None) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger("ticketflow")
    logger.setLevel(_resolve_level(level))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True
