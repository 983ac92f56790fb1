"""Process-wide default dispatch engine.

Convenience entry points for applications that only need one engine. The
default engine discards everything and uses the development formatter
until it is replaced with ``set_hook`` (``configure_logging`` does that).

Usage:
    from routelog.logging import default

    default.set_default_writer(StdoutWriter())
    default.apply()
    logger = default.register("billing")
"""

import logging
import threading
from typing import Optional

from routelog.logging.formatters import DEV_FORMATTER, Formatter
from routelog.logging.hook import ModuleLogger, RouteHook
from routelog.logging.table import WriterTable
from routelog.logging.writers import DISCARD, Writer

_hook = RouteHook.from_writer(DISCARD, DEV_FORMATTER)
_lock = threading.Lock()


def set_hook(hook: RouteHook) -> None:
    """Replace the default engine."""
    global _hook
    with _lock:
        _hook = hook


def get_hook() -> RouteHook:
    with _lock:
        return _hook


def register(module: str, table: Optional[WriterTable] = None) -> ModuleLogger:
    return get_hook().register(module, table)


def apply(logger: Optional[logging.Logger] = None) -> None:
    get_hook().apply(logger)


def set_formatter(formatter: Optional[Formatter]) -> None:
    get_hook().set_formatter(formatter)


def get_formatter() -> Formatter:
    return get_hook().get_formatter()


def set_default_writer(writer: Writer) -> None:
    get_hook().set_default_writer(writer)
