"""
minishell Logger Module

Logging for the command evaluator and its collaborators:
- Subsystem-specific loggers (evaluator, executor, redirection, ...)
- Structured context attached to each record
- Console output on the error stream, optional file output

Standard output is the data channel of every command the shell runs, so
the console handler never writes there.
"""

import logging
import os
import sys
import threading
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Optional, Any


class LogLevel(IntEnum):
    """Log level enumeration with numeric values for comparison."""
    DEBUG = 10
    INFO = 20
    NOTICE = 25
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


logging.addLevelName(LogLevel.NOTICE, 'NOTICE')


class LogFormatter(logging.Formatter):
    """
    Log formatter for minishell.

    Produces lines of the form::

        [2024-01-01 12:00:00.000] DEBUG    [executor] (pid=42) spawned child {verb=ls}
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'NOTICE': '\033[34m',     # Blue
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and self._supports_color()

    @staticmethod
    def _supports_color() -> bool:
        """Check if the error stream is a terminal."""
        if not hasattr(sys.stderr, 'isatty'):
            return False
        return sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        timestamp = datetime.fromtimestamp(record.created).strftime(
            '%Y-%m-%d %H:%M:%S.%f'
        )[:-3]

        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level_display = f"{self.COLORS[level]}{level:8s}{self.RESET}"
        else:
            level_display = f"{level:8s}"

        components = [f"[{timestamp}]", level_display]

        if hasattr(record, 'subsystem'):
            components.append(f"[{record.subsystem}]")

        if getattr(record, 'pid', None) is not None:
            components.append(f"(pid={record.pid})")

        components.append(str(record.getMessage()))

        if getattr(record, 'context', None):
            context_str = " ".join(f"{k}={v}" for k, v in record.context.items())
            components.append(f"{{{context_str}}}")

        message = " ".join(components)

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


class Logger:
    """
    Subsystem logger.

    One instance exists per subsystem name; each wraps the standard
    library logger ``minishell.<subsystem>`` and attaches the subsystem,
    an optional pid and a context dict to every record.

    Example:
        >>> log = Logger('executor')
        >>> log.debug("spawned child", pid=1234, context={'verb': 'ls'})
    """

    _instances: dict[str, 'Logger'] = {}
    _lock = threading.Lock()
    _initialized = False
    _handlers: list[logging.Handler] = []

    def __new__(cls, subsystem: str = 'shell') -> 'Logger':
        """Get or create a logger for a subsystem."""
        with cls._lock:
            if subsystem not in cls._instances:
                instance = super().__new__(cls)
                instance._subsystem = subsystem
                instance._logger = logging.getLogger(f'minishell.{subsystem}')
                cls._instances[subsystem] = instance
            return cls._instances[subsystem]

    @property
    def subsystem(self) -> str:
        return self._subsystem

    @classmethod
    def initialize(
        cls,
        level: int = LogLevel.WARNING,
        log_file: Optional[str] = None,
        use_colors: bool = True
    ) -> None:
        """
        Install the console handler (and optional file handler) on the
        ``minishell`` root logger.

        Calling it again is a no-op until ``shutdown()`` is called.

        Args:
            level: Minimum log level to emit
            log_file: Optional file path for log output
            use_colors: Whether to use ANSI colors in console output
        """
        with cls._lock:
            if cls._initialized:
                return

            root_logger = logging.getLogger('minishell')
            root_logger.setLevel(level)
            root_logger.propagate = False

            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(level)
            console_handler.setFormatter(LogFormatter(use_colors=use_colors))
            root_logger.addHandler(console_handler)
            cls._handlers.append(console_handler)

            if log_file:
                file_path = Path(log_file)
                file_path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_file)
                file_handler.setLevel(level)
                file_handler.setFormatter(LogFormatter(use_colors=False))
                root_logger.addHandler(file_handler)
                cls._handlers.append(file_handler)

            cls._initialized = True

    @classmethod
    def shutdown(cls) -> None:
        """Remove and close the handlers installed by ``initialize()``."""
        with cls._lock:
            root_logger = logging.getLogger('minishell')
            for handler in cls._handlers:
                root_logger.removeHandler(handler)
                handler.close()
            cls._handlers.clear()
            cls._initialized = False

    def _log(
        self,
        level: int,
        message: str,
        pid: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        extra = {
            'subsystem': self._subsystem,
            'pid': pid,
            'context': context or {},
        }
        self._logger.log(level, message, extra=extra)

    def debug(
        self,
        message: str,
        pid: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        """Log a debug message."""
        self._log(LogLevel.DEBUG, message, pid, context)

    def info(
        self,
        message: str,
        pid: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        """Log an info message."""
        self._log(LogLevel.INFO, message, pid, context)

    def notice(
        self,
        message: str,
        pid: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        """Log a notice message."""
        self._log(LogLevel.NOTICE, message, pid, context)

    def warning(
        self,
        message: str,
        pid: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        """Log a warning message."""
        self._log(LogLevel.WARNING, message, pid, context)

    def error(
        self,
        message: str,
        pid: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        """Log an error message."""
        self._log(LogLevel.ERROR, message, pid, context)

    def critical(
        self,
        message: str,
        pid: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        """Log a critical message."""
        self._log(LogLevel.CRITICAL, message, pid, context)

    def exception(
        self,
        message: str,
        exc: Optional[BaseException] = None,
        pid: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        """Log an exception with stack trace."""
        self._logger.error(
            message,
            exc_info=exc if exc is not None else True,
            extra={
                'subsystem': self._subsystem,
                'pid': pid if pid is not None else os.getpid(),
                'context': context or {},
            }
        )


def get_logger(subsystem: str) -> Logger:
    """
    Get a logger for the specified subsystem.

    Args:
        subsystem: Name of the subsystem (e.g., 'evaluator', 'executor')

    Returns:
        Logger instance for the subsystem
    """
    return Logger(subsystem)
