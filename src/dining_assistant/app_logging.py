"""Logging configuration helpers."""

import logging

_FORMAT = "%(levelname)s: %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Attach one stream handler to the package logger; later calls only set the level."""
    logger = logging.getLogger("dining_assistant")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
