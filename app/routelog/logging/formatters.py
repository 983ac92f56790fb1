"""Formatters that turn records into bytes.

Formatters wrap structlog renderers: the record is converted to an event
dict, passed through a small processor chain and rendered to one line.

Built-ins:
    - DEV_FORMATTER: colorized console output for development
    - FILE_FORMATTER: plain logfmt output, readable in log files
    - JSON_FORMATTER: one JSON object per line

Usage:
    from routelog.logging.formatters import StructlogFormatter

    formatter = StructlogFormatter(structlog.processors.JSONRenderer(sort_keys=True))
    table.set_formatter(formatter)

Dependencies:
    - structlog processors and renderers
"""

from typing import Any, Callable, Iterable, Optional, Protocol

import structlog

from routelog.logging.record import Record

Processor = Callable[[Any, str, dict], Any]


class Formatter(Protocol):
    """Turns a record into the bytes written to a destination."""

    def format(self, record: Record) -> bytes: ...


class StructlogFormatter:
    """Format records with a structlog processor chain.

    The event dict handed to the chain holds ``timestamp``, ``level``,
    ``logger``, ``event`` and the record fields. Exception info is rendered
    by ``structlog.processors.format_exc_info`` before any extra processors
    run. The renderer's output is encoded as UTF-8 and newline-terminated.

    Args:
        renderer: Final structlog processor returning ``str`` or ``bytes``.
        processors: Extra processors run before the renderer.
        timestamp_fmt: ``strftime`` format for the timestamp, or ``"iso"``.
    """

    def __init__(
        self,
        renderer: Processor,
        processors: Optional[Iterable[Processor]] = None,
        timestamp_fmt: str = "iso",
    ):
        self.renderer = renderer
        self.processors = [structlog.processors.format_exc_info, *(processors or [])]
        self.timestamp_fmt = timestamp_fmt

    def _timestamp(self, record: Record) -> str:
        if self.timestamp_fmt == "iso":
            return record.time.isoformat()
        return record.time.strftime(self.timestamp_fmt)

    def event_dict(self, record: Record) -> dict:
        """Build the event dict for ``record``."""
        # record keys win over fields of the same name
        event_dict: dict = dict(record.fields)
        event_dict["timestamp"] = self._timestamp(record)
        event_dict["level"] = str(record.level)
        if record.logger_name:
            event_dict["logger"] = record.logger_name
        event_dict["event"] = record.message
        if record.exc_info:
            event_dict["exc_info"] = record.exc_info
        return event_dict

    def format(self, record: Record) -> bytes:
        method_name = str(record.level)
        event_dict = self.event_dict(record)
        for processor in self.processors:
            event_dict = processor(None, method_name, event_dict)
        rendered = self.renderer(None, method_name, event_dict)
        if isinstance(rendered, str):
            rendered = rendered.encode("utf-8")
        return rendered + b"\n"


# We are logging to file, strip colors to make the output more readable.
FILE_FORMATTER = StructlogFormatter(
    structlog.processors.LogfmtRenderer(
        key_order=["timestamp", "level", "event"], drop_missing=True
    )
)

DEV_FORMATTER = StructlogFormatter(
    structlog.dev.ConsoleRenderer(colors=True),
    timestamp_fmt="%Y-%m-%d %H:%M:%S",
)

JSON_FORMATTER = StructlogFormatter(structlog.processors.JSONRenderer(sort_keys=True))


def pick_formatter(is_dev: bool) -> Formatter:
    """Return the colorized formatter for development, the file one otherwise."""
    if is_dev:
        return DEV_FORMATTER
    return FILE_FORMATTER
