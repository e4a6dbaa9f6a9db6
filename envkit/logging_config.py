"""Logging setup shared by the app, the CLI and library use."""
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

_handler = None


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the ``envkit`` logger.

    Safe to call repeatedly; later calls only change the level.
    """
    global _handler
    logger = logging.getLogger("envkit")
    level = logging.getLevelName(str(log_level).upper())
    logger.setLevel(level if isinstance(level, int) else logging.INFO)

    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)
    return logger
