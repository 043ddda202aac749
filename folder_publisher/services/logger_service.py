"""
Logger Service for the Folder Queue Publisher application.

One LoggerService is created at startup and handed to the watcher, the file
processor, the file manager and the queue sink, so every message about a
scan, a publish or a move goes through the same named logger.
"""

import logging
from pathlib import Path
from typing import Optional


DEFAULT_LOGGER_NAME = "folder_queue_publisher"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class LoggerService:
    """
    Named logger writing to the console and, optionally, to a log file.

    Per-file scan details are logged at DEBUG, published and moved files at
    INFO, skipped files and overwritten targets at WARNING, and failed reads,
    sends and moves at ERROR together with the exception that caused them.
    """

    def __init__(self, log_file_path: Optional[str] = None, logger_name: str = DEFAULT_LOGGER_NAME,
                 level: int = logging.INFO):
        """
        Initialize the LoggerService.

        Args:
            log_file_path: Optional log file (the --log-file option); its folder is created if needed
            logger_name: Name for the logger instance
            level: Minimum level emitted; logging.DEBUG shows every scanned file
        """
        self.logger_name = logger_name
        self.log_file_path = log_file_path
        self.level = level
        self._logger = None
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Attach fresh handlers, replacing those of an earlier instance with the same name."""
        self._logger = logging.getLogger(self.logger_name)
        self._logger.setLevel(self.level)
        self._logger.handlers.clear()

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        self._add_handler(logging.StreamHandler(), formatter)

        if self.log_file_path:
            Path(self.log_file_path).parent.mkdir(parents=True, exist_ok=True)
            self._add_handler(logging.FileHandler(self.log_file_path), formatter)

    def _add_handler(self, handler: logging.Handler, formatter: logging.Formatter) -> None:
        handler.setLevel(self.level)
        handler.setFormatter(formatter)
        self._logger.addHandler(handler)

    def log_debug(self, message: str) -> None:
        """Log scan and dispatch details."""
        if self._logger:
            self._logger.debug(message)

    def log_info(self, message: str) -> None:
        """Log progress such as a connection opened or a file published."""
        if self._logger:
            self._logger.info(message)

    def log_warning(self, message: str) -> None:
        """Log a recoverable condition, e.g. a skipped file or a replaced target."""
        if self._logger:
            self._logger.warning(message)

    def log_error(self, message: str, exception: Optional[Exception] = None) -> None:
        """
        Log a failure, appending the exception type and text when given.

        Args:
            message: What could not be done, e.g. "Unable to send message"
            exception: Optional exception, rendered as "<message>: <Type>: <text>"
        """
        if not self._logger:
            return
        if exception:
            message = f"{message}: {type(exception).__name__}: {exception}"
        self._logger.error(message)

    def get_logger(self) -> logging.Logger:
        """Return the underlying logging.Logger."""
        return self._logger

    @classmethod
    def setup_logger(cls, log_file_path: Optional[str] = None, logger_name: str = DEFAULT_LOGGER_NAME,
                     level: int = logging.INFO) -> 'LoggerService':
        """Create the application's LoggerService (used by the app at startup)."""
        return cls(log_file_path=log_file_path, logger_name=logger_name, level=level)
