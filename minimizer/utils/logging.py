"""Logging configuration and utilities."""

import logging
import sys
from pathlib import Path
from typing import Optional

APP_LOGGER_NAME = "minimizer"

class CustomFormatter(logging.Formatter):
    def __init__(self):
        super().__init__()
        # Format for DEBUG, WARNING, and ERROR
        self.detailed_fmt = '%(asctime)s [%(name)s:%(lineno)d] %(levelname)s: %(message)s'
        self.detailed_formatter = logging.Formatter(self.detailed_fmt, datefmt='%H:%M:%S')

        # Simpler format for INFO
        self.info_fmt = '%(asctime)s %(message)s'
        self.info_formatter = logging.Formatter(self.info_fmt, datefmt='%H:%M:%S')

    def format(self, record):
        if record.levelno == logging.INFO:
            return self.info_formatter.format(record)
        return self.detailed_formatter.format(record)

def configure_logging(development: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure logging to stderr and, optionally, a log file."""
    formatter = CustomFormatter()

    handlers = []
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    # Root logger only reports warnings from libraries
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)
    root_logger.handlers.clear()
    for handler in handlers:
        root_logger.addHandler(handler)

    # Configure app-specific logger
    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(logging.DEBUG if development else logging.INFO)
    app_logger.propagate = False
    app_logger.handlers.clear()
    for handler in handlers:
        app_logger.addHandler(handler)

    # Capture warnings
    logging.captureWarnings(True)
    warnings_logger = logging.getLogger('py.warnings')
    warnings_logger.handlers.clear()
    for handler in handlers:
        warnings_logger.addHandler(handler)

def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    # If the name starts with '__main__', replace it with 'minimizer.main'
    if name == '__main__':
        return logging.getLogger(f'{APP_LOGGER_NAME}.main')
    # Otherwise prepend 'minimizer.' if it's not already there
    if name != APP_LOGGER_NAME and not name.startswith(f'{APP_LOGGER_NAME}.'):
        name = f'{APP_LOGGER_NAME}.{name}'
    return logging.getLogger(name)
