"""
Logging setup for the API process.

All modules log through ``logging.getLogger(__name__)``; the handlers live on
the ``wavy`` package logger so uvicorn's own loggers are left untouched.
"""

import logging

from .config import Settings


class LoggingConfig:
    """Logging configuration and setup."""

    _configured = False

    @staticmethod
    def setup_logging(settings: Settings) -> logging.Logger:
        """Set up the ``wavy`` logger based on settings."""
        logger = logging.getLogger('wavy')
        if LoggingConfig._configured:
            return logger

        logger.setLevel(getattr(logging, settings.LOG_LEVEL))
        logger.handlers.clear()

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if settings.LOG_FILE:
            try:
                file_handler = logging.FileHandler(settings.LOG_FILE, encoding='utf-8')
                file_handler.setFormatter(formatter)
                logger.addHandler(file_handler)
            except OSError as e:
                logger.warning(f"Could not set up file logging: {e}")

        LoggingConfig._configured = True
        return logger
