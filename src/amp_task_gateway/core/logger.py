"""Logger - Logging setup for the gateway.

Modules log through ``logging.getLogger(__name__)``; this module only wires
the package logger to a rich handler. The API key is never logged.
"""

from __future__ import annotations

import logging

from rich.logging import RichHandler

PACKAGE_LOGGER = "amp_task_gateway"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a rich handler to the package logger.

    Calling this more than once replaces the previous handler rather than
    stacking duplicates.

    Args:
        level: Level name (``"DEBUG"``) or number.

    Returns:
        The package logger.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(rich_tracebacks=True, show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
