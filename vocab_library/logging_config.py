from __future__ import annotations
import logging

LOGGER_NAME = 'vocab_library'
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(module)s: %(message)s'


def setup_logging(log_level: str = 'INFO') -> logging.Logger:
    """Attach a console handler to the package logger; safe to call repeatedly."""
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    logger.addHandler(handler)
    return logger
