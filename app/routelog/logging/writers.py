"""Output destinations for routed records.

A destination is any append-only byte sink with ``write(bytes) -> int``.
This module provides the ones routing tables are usually built from:

    - Discard: swallows everything
    - MultiWriter: duplicates each write to several sinks
    - StdoutWriter: writes to the process stdout
    - RotateFile: time-rotated file with retention and a stable symlink
    - RotateFileMap: one RotateFile per level

Usage:
    from routelog.logging.writers import new_rotate_file_map

    files = new_rotate_file_map("logs/app.log")
    hook = RouteHook.from_rotate_file_map(files)
    ...
    files.close()
"""

import os
import re
import sys
import threading
from datetime import datetime, timedelta
from typing import BinaryIO, Callable, Dict, Optional, Protocol

from routelog.logging.levels import ALL_LEVELS, Level

DEFAULT_MAX_AGE = timedelta(days=7)
DEFAULT_ROTATION = timedelta(days=1)

# Suffix appended to the base path of a rotating file.
ROTATE_PATTERN = "%Y%m%d%H%M"
_ROTATE_SUFFIX_RE = r"\.\d{12}"


class Writer(Protocol):
    """Append-only byte sink."""

    def write(self, data: bytes) -> int: ...


class Discard:
    """A writer on which all writes succeed without doing anything."""

    def write(self, data: bytes) -> int:
        return len(data)


DISCARD = Discard()


class StdoutWriter:
    """Write bytes to the current ``sys.stdout``.

    Looked up on every write so that redirected or captured stdout is
    honoured.
    """

    def write(self, data: bytes) -> int:
        stream = sys.stdout
        buffer = getattr(stream, "buffer", None)
        if buffer is not None:
            stream.flush()
            written = buffer.write(data)
            buffer.flush()
            return written
        stream.write(data.decode("utf-8", errors="replace"))
        return len(data)


class MultiWriter:
    """Duplicate writes to every writer, in order.

    Stops at the first failing writer and raises its error.
    """

    def __init__(self, *writers: Writer):
        self.writers = list(writers)

    def write(self, data: bytes) -> int:
        for writer in self.writers:
            writer.write(data)
        return len(data)


class RotateFile:
    """A file that switches to a new backing file every rotation period.

    Backing files are named ``{path}.{%Y%m%d%H%M}`` where the timestamp is
    the start of the current rotation period. ``path`` itself is kept as a
    symlink to the most recent backing file. On each rotation, backing files
    whose modification time is older than ``max_age`` are removed.

    Thread-safe: rotation and writes are serialized by an internal lock.

    Args:
        path: Base path of the log file.
        max_age: Retention window for backing files.
        rotation: Length of a rotation period.
        clock: Returns the current local time; override in tests.
    """

    def __init__(
        self,
        path: str,
        max_age: timedelta = DEFAULT_MAX_AGE,
        rotation: timedelta = DEFAULT_ROTATION,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if rotation.total_seconds() <= 0:
            raise ValueError("rotation period must be positive")
        self.path = os.fspath(path)
        self.max_age = max_age
        self.rotation = rotation
        self._clock = clock or datetime.now
        self._lock = threading.Lock()
        self._stream: Optional[BinaryIO] = None
        self._filename: Optional[str] = None
        self._has_stdout = False
        self._stdout = StdoutWriter()
        self._pattern = re.compile(re.escape(os.path.basename(self.path)) + _ROTATE_SUFFIX_RE + "$")

        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    @property
    def filename(self) -> Optional[str]:
        """Backing file currently written to, None before the first write."""
        with self._lock:
            return self._filename

    def set_stdout(self) -> None:
        """Also copy every write to stdout."""
        with self._lock:
            self._has_stdout = True

    def current_filename(self, now: Optional[datetime] = None) -> str:
        """Return the backing file name for the period containing ``now``."""
        now = now or self._clock()
        period = self.rotation.total_seconds()
        start = (now.timestamp() // period) * period
        stamp = datetime.fromtimestamp(start, tz=now.tzinfo).strftime(ROTATE_PATTERN)
        return f"{self.path}.{stamp}"

    def write(self, data: bytes) -> int:
        with self._lock:
            now = self._clock()
            filename = self.current_filename(now)
            if filename != self._filename:
                self._rotate(filename, now)
            written = self._stream.write(data)
            self._stream.flush()
            if self._has_stdout:
                self._stdout.write(data)
            return written

    def close(self) -> None:
        with self._lock:
            if self._stream is not None:
                self._stream.close()
                self._stream = None
            self._filename = None

    def _rotate(self, filename: str, now: datetime) -> None:
        if self._stream is not None:
            self._stream.close()
        self._stream = open(filename, "ab")
        self._filename = filename
        self._link(filename)
        self._purge(now)

    def _link(self, filename: str) -> None:
        tmp_link = f"{self.path}_symlink"
        if os.path.lexists(tmp_link):
            os.remove(tmp_link)
        os.symlink(os.path.basename(filename), tmp_link)
        os.replace(tmp_link, self.path)

    def _purge(self, now: datetime) -> None:
        cutoff = (now - self.max_age).timestamp()
        directory = os.path.dirname(self.path) or "."
        for entry in os.scandir(directory):
            if not self._pattern.match(entry.name) or entry.is_symlink():
                continue
            if entry.path == self._filename:
                continue
            if entry.stat().st_mtime < cutoff:
                os.remove(entry.path)


def new_rotate_file(
    path: str,
    max_age: timedelta = DEFAULT_MAX_AGE,
    rotation: timedelta = DEFAULT_ROTATION,
) -> RotateFile:
    """Create a rotating file with a 7 day retention and daily rotation by default."""
    return RotateFile(path, max_age=max_age, rotation=rotation)


class RotateFileMap(Dict[Level, RotateFile]):
    """Mapping of level to rotating file."""

    def set_stdout(self) -> None:
        for f in self.values():
            f.set_stdout()

    def close(self) -> None:
        """Close every file, raising the first error after trying them all."""
        error: Optional[BaseException] = None
        for f in self.values():
            try:
                f.close()
            except OSError as e:
                if error is None:
                    error = e
        if error is not None:
            raise error


def new_rotate_file_map(
    path: str,
    max_age: timedelta = DEFAULT_MAX_AGE,
    rotation: timedelta = DEFAULT_ROTATION,
) -> RotateFileMap:
    """Create one rotating file per level at ``{path}.{level}``."""
    files = RotateFileMap()
    for level in ALL_LEVELS:
        files[level] = new_rotate_file(f"{path}.{level}", max_age=max_age, rotation=rotation)
    return files
