"""Level to writer routing table.

A ``WriterTable`` maps each level to one writer, with an optional default
writer for levels that have none. Multiple levels may share a writer, but
one level never has more than one.

Build a table with one of the builders:

    WriterTable.from_writer(sys_stderr_writer)
    WriterTable.from_writer_map({Level.ERROR: errors, Level.INFO: info})
    WriterTable.from_rotate_file_map(new_rotate_file_map("logs/app.log"))

``WriterTable.new(output)`` accepts any of the three and raises
``ConfigurationError`` for anything else. When using a writer or writer
map, the caller is responsible for closing the writers.
"""

import threading
from typing import Any, Dict, List, Mapping, Optional

from routelog.logging import diagnostics
from routelog.logging.caller import Caller
from routelog.logging.errors import ConfigurationError
from routelog.logging.formatters import FILE_FORMATTER, Formatter
from routelog.logging.levels import Level
from routelog.logging.record import Record
from routelog.logging.writers import RotateFileMap, Writer

WriterMap = Dict[Level, Writer]


class WriterTable:
    """Thread-safe level to writer routing table with its own formatter.

    Attributes:
        _writers: Level to writer bindings.
        _levels: Levels that have a binding, in insertion order.
        _default_writer: Writer for levels without a binding.
        _formatter: Formatter used when writing through this table.
        _lock: Guards all of the above and the write path.
    """

    def __init__(self, formatter: Optional[Formatter] = None):
        self._lock = threading.Lock()
        self._writers: WriterMap = {}
        self._levels: List[Level] = []
        self._default_writer: Optional[Writer] = None
        self._has_default_writer = False
        self._formatter: Formatter = FILE_FORMATTER
        self.set_formatter(formatter)

    @classmethod
    def from_writer(cls, writer: Writer, formatter: Optional[Formatter] = None):
        """Build a table whose only destination is the default ``writer``."""
        table = cls(formatter)
        table.set_default_writer(writer)
        return table

    @classmethod
    def from_writer_map(cls, writers: Mapping[Level, Writer], formatter: Optional[Formatter] = None):
        """Build a table with one binding per entry of ``writers``."""
        table = cls(formatter)
        for level, writer in writers.items():
            table._bind(level, writer)
        return table

    @classmethod
    def from_rotate_file_map(cls, files: RotateFileMap, formatter: Optional[Formatter] = None):
        """Build a table writing each level to its rotating file."""
        return cls.from_writer_map(files, formatter)

    @classmethod
    def new(cls, output: Any, formatter: Optional[Formatter] = None):
        """Build a table from a writer, a writer map or a rotating file map.

        Raises:
            ConfigurationError: If ``output`` is none of these.
        """
        if isinstance(output, RotateFileMap):
            return cls.from_rotate_file_map(output, formatter)
        if isinstance(output, Mapping):
            return cls.from_writer_map(output, formatter)
        if callable(getattr(output, "write", None)):
            return cls.from_writer(output, formatter)
        raise ConfigurationError(f"unsupported level map type: {type(output).__name__}")

    def _bind(self, level: Level, writer: Writer) -> None:
        if not isinstance(level, Level):
            raise ConfigurationError(f"unsupported level key type: {type(level).__name__}")
        with self._lock:
            if level not in self._writers:
                self._levels.append(level)
            self._writers[level] = writer

    def set_writer(self, level: Level, writer: Writer) -> None:
        """Bind ``level`` to ``writer``, replacing any previous binding."""
        self._bind(level, writer)

    def set_formatter(self, formatter: Optional[Formatter]) -> None:
        """Set the formatter, falling back to the plain file formatter on None."""
        with self._lock:
            self._formatter = formatter if formatter is not None else FILE_FORMATTER

    def get_formatter(self) -> Formatter:
        with self._lock:
            return self._formatter

    def set_default_writer(self, writer: Writer) -> None:
        """Set the writer for levels that don't have any defined writer."""
        with self._lock:
            self._default_writer = writer
            self._has_default_writer = True

    @property
    def active_levels(self) -> List[Level]:
        with self._lock:
            return list(self._levels)

    def route(self, level: Level) -> Optional[Writer]:
        """Return the writer for ``level``, the default writer, or None."""
        with self._lock:
            return self._route(level)

    def _route(self, level: Level) -> Optional[Writer]:
        writer = self._writers.get(level)
        if writer is None and self._has_default_writer:
            writer = self._default_writer
        return writer

    def _has_routes(self) -> bool:
        return bool(self._writers) or self._has_default_writer

    def _write(self, record: Record, caller: Caller) -> None:
        """Format and write ``record``. Must be called with ``_lock`` held."""
        writer = self._route(record.level)
        if writer is None:
            return

        if record.level.is_error_grade:
            frame = caller.frame()
            if frame is not None:
                record.fields["func"] = frame.function
                record.fields["line"] = frame.line

        # use our formatter instead of the host's
        try:
            msg = self._formatter.format(record)
        except Exception as e:
            diagnostics.logger.error("format_failed", error=str(e), record_level=str(record.level))
            raise
        writer.write(msg)
