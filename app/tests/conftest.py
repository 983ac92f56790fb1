"""Shared fixtures for routelog tests."""

import logging
import threading
from typing import List

import pytest
import structlog

from routelog.logging import default
from routelog.logging.hook import HookHandler
from routelog.logging.levels import Level
from routelog.logging.record import Record


class RecordingWriter:
    """Writer that keeps every chunk written to it."""

    def __init__(self):
        self.writes: List[bytes] = []
        self._lock = threading.Lock()

    def write(self, data: bytes) -> int:
        with self._lock:
            self.writes.append(data)
        return len(data)

    @property
    def lines(self) -> List[str]:
        return [w.decode("utf-8").rstrip("\n") for w in self.writes]


class RecordingFormatter:
    """Formatter that keeps the records it formats and renders the message."""

    def __init__(self, name: str = "fmt"):
        self.name = name
        self.records: List[Record] = []

    def format(self, record: Record) -> bytes:
        self.records.append(record)
        return f"{self.name}:{record.message}\n".encode("utf-8")


@pytest.fixture
def writer_factory():
    """Create recording writers."""
    return RecordingWriter


@pytest.fixture
def recording_formatter():
    return RecordingFormatter()


@pytest.fixture
def make_record():
    """Build records for firing directly at a hook."""

    def _make(level=Level.INFO, message="event", context=None, **fields):
        return Record(level=level, message=message, fields=dict(fields), context=context)

    return _make


@pytest.fixture
def isolated_logger(request):
    """A non-propagating stdlib logger that is cleaned up after the test."""
    logger = logging.getLogger(f"routelog.tests.{request.node.name}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


@pytest.fixture(autouse=True)
def restore_logging_state():
    """Undo changes made to the root logger, structlog and the default hook."""
    root = logging.getLogger()
    level = root.level
    previous_hook = default.get_hook()
    yield
    for handler in list(root.handlers):
        if isinstance(handler, HookHandler):
            root.removeHandler(handler)
    root.setLevel(level)
    default.set_hook(previous_hook)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
