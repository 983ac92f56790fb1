"""Severity levels used for routing.

Levels are ordered by decreasing severity: ``PANIC`` has the lowest value
and ``TRACE`` the highest, so "at or above error severity" is written as
``level <= Level.ERROR``.

The stdlib ``logging`` package orders levels the other way round; use
``Level.from_stdlib`` and ``Level.to_stdlib`` to cross between the two.
"""

import logging
from enum import IntEnum

TRACE = 5
PANIC = 60

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(PANIC, "PANIC")


class Level(IntEnum):
    """Routing severity level."""

    PANIC = 0
    FATAL = 1
    ERROR = 2
    WARNING = 3
    INFO = 4
    DEBUG = 5
    TRACE = 6

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_error_grade(self) -> bool:
        """True for ERROR and anything more severe."""
        return self <= Level.ERROR

    @classmethod
    def from_stdlib(cls, levelno: int) -> "Level":
        """Map a stdlib ``logging`` level number to a routing level.

        Args:
            levelno: Numeric stdlib level (e.g. ``logging.ERROR``).

        Returns:
            The routing level covering that number.
        """
        if levelno > logging.CRITICAL:
            return cls.PANIC
        if levelno >= logging.CRITICAL:
            return cls.FATAL
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARNING
        if levelno >= logging.INFO:
            return cls.INFO
        if levelno >= logging.DEBUG:
            return cls.DEBUG
        return cls.TRACE

    def to_stdlib(self) -> int:
        """Return the stdlib level number for this routing level."""
        return _STDLIB_LEVELS[self]

    @classmethod
    def parse(cls, name: str) -> "Level":
        """Parse a level name.

        Accepts any member name case-insensitively, plus the aliases
        ``warn`` and ``critical``.

        Raises:
            ValueError: If the name is not a known level.
        """
        key = name.strip().upper()
        key = _ALIASES.get(key, key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"not a valid log level: {name!r}") from None


_ALIASES = {"WARN": "WARNING", "CRITICAL": "FATAL"}

_STDLIB_LEVELS = {
    Level.PANIC: PANIC,
    Level.FATAL: logging.CRITICAL,
    Level.ERROR: logging.ERROR,
    Level.WARNING: logging.WARNING,
    Level.INFO: logging.INFO,
    Level.DEBUG: logging.DEBUG,
    Level.TRACE: TRACE,
}

ALL_LEVELS = list(Level)
