"""
Central logging setup for RentLine.

Console-only structured logging by default; with file logging enabled all
records go through a queue to a console handler and a rotating file handler.
"""

import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler

from .context import TransactionIdFilter
from .formatter import build_formatter

APP_LOGGER = "rentline_backend"

EXTERNAL_LOGGER_LEVELS = {
    "urllib3": logging.WARNING,
    "sqlalchemy": logging.WARNING,
    "uvicorn": logging.INFO,
    "fastapi": logging.INFO,
    "asyncmy": logging.INFO,
}


class LoggingConfig:
    """Owns the handlers and queue listener for the process."""

    def __init__(self):
        self._listener: QueueListener | None = None
        self._is_configured = False

    @property
    def is_configured(self) -> bool:
        return self._is_configured

    def _console_handler(self, level: int, use_json_format: bool) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(build_formatter(use_json_format, colored=True))
        return handler

    def _file_handler(
        self,
        level: int,
        use_json_format: bool,
        log_file_path: str,
        max_bytes: int,
        backup_count: int,
    ) -> logging.Handler:
        directory = os.path.dirname(log_file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handler = RotatingFileHandler(
            log_file_path, maxBytes=max_bytes, backupCount=backup_count
        )
        handler.setLevel(level)
        handler.setFormatter(build_formatter(use_json_format))
        return handler

    def setup(
        self,
        log_to_file: bool = True,
        log_level: str = "INFO",
        log_file_path: str = "logs/app.log",
        use_json_format: bool = True,
        max_bytes: int = 50 * 1024 * 1024,
        backup_count: int = 5,
    ) -> logging.Logger:
        """
        Configure application logging once per process.

        Args:
            log_to_file: Whether to add a rotating file handler behind a queue
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_file_path: Path to the log file
            use_json_format: Whether to use JSON formatting
            max_bytes: Maximum file size before rotation
            backup_count: Number of backup files to keep

        Returns:
            The application logger
        """
        if self._is_configured:
            return get_logger()

        level = getattr(logging, log_level.upper())
        transaction_filter = TransactionIdFilter()
        console_handler = self._console_handler(level, use_json_format)

        if log_to_file:
            file_handler = self._file_handler(
                level, use_json_format, log_file_path, max_bytes, backup_count
            )
            log_queue: queue.Queue = queue.Queue()
            self._listener = QueueListener(
                log_queue, console_handler, file_handler, respect_handler_level=True
            )
            self._listener.start()
            root_handler: logging.Handler = QueueHandler(log_queue)
            root_handler.setLevel(level)
        else:
            root_handler = console_handler

        # Filter before enqueueing so the context vars are read on the caller side
        root_handler.addFilter(transaction_filter)

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(root_handler)
        root_logger.setLevel(level)

        for logger_name, ext_level in EXTERNAL_LOGGER_LEVELS.items():
            logging.getLogger(logger_name).setLevel(ext_level)
        logging.captureWarnings(True)

        self._is_configured = True
        return get_logger()

    def shutdown(self) -> None:
        """Stop the queue listener, flushing pending records."""
        if self._listener:
            self._listener.stop()
            self._listener = None
        self._is_configured = False


# Global logging configuration instance
_logging_config = LoggingConfig()


def setup_logging(
    log_to_file: bool | None = None,
    log_level: str | None = None,
    log_file_path: str | None = None,
    use_json_format: bool | None = None,
    max_bytes: int | None = None,
    backup_count: int | None = None,
) -> logging.Logger:
    """Set up logging, falling back to the loaded settings for unset options."""
    from ...config import settings

    return _logging_config.setup(
        log_to_file=settings.log_to_file if log_to_file is None else log_to_file,
        log_level=log_level or settings.log_level,
        log_file_path=log_file_path or settings.log_file_path,
        use_json_format=(
            settings.log_format.lower() == "json"
            if use_json_format is None
            else use_json_format
        ),
        max_bytes=max_bytes or settings.log_max_bytes,
        backup_count=backup_count or settings.log_backup_count,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger namespaced under the application logger."""
    if name:
        if name.startswith(APP_LOGGER):
            return logging.getLogger(name)
        return logging.getLogger(f"{APP_LOGGER}.{name}")
    return logging.getLogger(APP_LOGGER)


def shutdown_logging() -> None:
    """Shutdown logging gracefully."""
    _logging_config.shutdown()
