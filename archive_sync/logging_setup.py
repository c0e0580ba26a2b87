"""
Logging setup for the archive-sync command line.

Library modules only create module-level loggers; handlers are installed
here, once per process, by the entry point.
"""

import logging
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from core.models.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_installed_handlers: List[logging.Handler] = []


def configure_logging(
    config: Optional[LoggingConfig] = None,
    console: Optional[Console] = None
) -> logging.Logger:
    """
    Route log records to the console and, if configured, a rolling log file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        config: Logging settings, defaults to LoggingConfig()
        console: Rich console for the console handler (stderr by default)

    Returns:
        The configured root logger
    """
    config = config or LoggingConfig()
    root_logger = logging.getLogger()

    for handler in _installed_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True
    )
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt=LOG_DATE_FORMAT))
    _installed_handlers.append(console_handler)

    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.log_file,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        _installed_handlers.append(file_handler)

    for handler in _installed_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(config.level)
    return root_logger
