"""
Logging setup for the Adaptus backend.

Configures the root logger with file and console handlers. Modules log
through their own ``logging.getLogger(<module path>)`` loggers.
"""
import logging
import os

from config import settings

FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """
    Configure the root logger unless it already has handlers.

    Args:
        level: Log level name, defaults to settings.LOG_LEVEL
        log_file: File path for the file handler, defaults to settings.LOG_FILE
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel((level or settings.LOG_LEVEL).upper())
    formatter = logging.Formatter(FORMAT)

    path = log_file or settings.LOG_FILE
    if path:
        log_dir = os.path.dirname(os.path.abspath(path))
        os.makedirs(log_dir, exist_ok=True)
        # File handler with UTF-8 encoding
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)
