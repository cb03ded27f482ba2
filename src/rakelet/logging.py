"""Logging infrastructure for rakelet.

Provides the Logger interface that the build engine and CLI write diagnostics to.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod


class LogLevel(enum.Enum):
    """Log verbosity levels for rakelet diagnostic messages.

    Lower numeric values represent higher severity / less verbosity.
    """
    FATAL = 0  # Only unrecoverable errors (bad build file, unknown task)
    ERROR = 1  # Fatal errors plus action failures
    WARN = 2   # Errors plus warnings about suspicious declarations
    INFO = 3   # Warnings plus commands being run (default)
    DEBUG = 4  # Info plus rule synthesis and config resolution details
    TRACE = 5  # Debug plus per-task invocation tracing

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Look up a level by case-insensitive name.

        Raises:
            ValueError: If the name is not a known level
        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            valid = ", ".join(level.name.lower() for level in cls)
            raise ValueError(f"Invalid log level '{name}' (expected one of: {valid})")


class Logger(ABC):
    """Abstract leveled logger."""

    @abstractmethod
    def log(self, level: LogLevel = LogLevel.INFO, *args, **kwargs) -> None:
        ...

    @abstractmethod
    def push_level(self, level: LogLevel) -> None:
        ...

    @abstractmethod
    def pop_level(self) -> LogLevel:
        ...

    def fatal(self, *args, **kwargs) -> None:
        self.log(LogLevel.FATAL, *args, **kwargs)

    def error(self, *args, **kwargs) -> None:
        self.log(LogLevel.ERROR, *args, **kwargs)

    def warn(self, *args, **kwargs) -> None:
        self.log(LogLevel.WARN, *args, **kwargs)

    def info(self, *args, **kwargs) -> None:
        self.log(LogLevel.INFO, *args, **kwargs)

    def debug(self, *args, **kwargs) -> None:
        self.log(LogLevel.DEBUG, *args, **kwargs)

    def trace(self, *args, **kwargs) -> None:
        self.log(LogLevel.TRACE, *args, **kwargs)

    def command(self, text: str) -> None:
        """Echo a command about to be run, as literal text."""
        self.info(text, markup=False, highlight=False)
