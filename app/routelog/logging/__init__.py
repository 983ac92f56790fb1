"""Routed logging infrastructure.

This package routes stdlib (and structlog) log records to per-level
destinations, with per-module routing tables selected by a context tag on
the logging call. Error-grade records are enriched with the calling
function and line.

Public API:
    - configure_logging(): Build and install the routing engine from settings
    - get_logger(): Get a logger, optionally routed through a module
    - RouteHook: Dispatch engine (routing table + module registry)
    - WriterTable: Level to writer routing table
    - ModuleLogger: Logger handle carrying a module tag
    - bind_module(): Context manager routing a block to a module
    - Level: Routing severity levels

Callers:
    - SkipCaller, PredicateCaller, FuncCaller: caller resolution strategies

Formatters:
    - DEV_FORMATTER, FILE_FORMATTER, JSON_FORMATTER, pick_formatter()

Writers:
    - StdoutWriter, MultiWriter, Discard
    - RotateFile, RotateFileMap, new_rotate_file(), new_rotate_file_map()

Example:
    from routelog.logging import configure_logging, WriterTable, Level

    # At application startup
    hook = configure_logging()

    # Give a module its own destinations
    billing = WriterTable.from_writer_map({Level.ERROR: billing_errors})
    billing.set_default_writer(billing_all)
    logger = hook.register("billing", billing)

    logger.error("charge_failed")
"""

from routelog.logging.caller import (
    ADAPTER_CALL_SKIP,
    DEFAULT_CALLER_SKIP,
    LOGGER_CALL_SKIP,
    Caller,
    Frame,
    FuncCaller,
    PredicateCaller,
    SkipCaller,
    get_frame,
    package_name,
)
from routelog.logging.context import (
    CTX_KEY_NAME,
    bind_module,
    get_bound_module,
    module_context,
)
from routelog.logging.errors import ConfigurationError, RouteLogError
from routelog.logging.formatters import (
    DEV_FORMATTER,
    FILE_FORMATTER,
    JSON_FORMATTER,
    Formatter,
    StructlogFormatter,
    pick_formatter,
)
from routelog.logging.hook import (
    HookHandler,
    ModuleLogger,
    RouteHook,
    add_hook,
    new_route_hook,
)
from routelog.logging.levels import ALL_LEVELS, Level
from routelog.logging.record import Record
from routelog.logging.setup import build_hook, configure_logging, get_logger
from routelog.logging.table import WriterMap, WriterTable
from routelog.logging.writers import (
    DISCARD,
    Discard,
    MultiWriter,
    RotateFile,
    RotateFileMap,
    StdoutWriter,
    Writer,
    new_rotate_file,
    new_rotate_file_map,
)

__all__ = [
    # Setup
    "configure_logging",
    "build_hook",
    "get_logger",
    # Dispatch
    "RouteHook",
    "HookHandler",
    "ModuleLogger",
    "add_hook",
    "new_route_hook",
    "WriterTable",
    "WriterMap",
    "Record",
    # Levels
    "Level",
    "ALL_LEVELS",
    # Context
    "CTX_KEY_NAME",
    "bind_module",
    "get_bound_module",
    "module_context",
    # Callers
    "Caller",
    "Frame",
    "SkipCaller",
    "PredicateCaller",
    "FuncCaller",
    "get_frame",
    "package_name",
    "DEFAULT_CALLER_SKIP",
    "LOGGER_CALL_SKIP",
    "ADAPTER_CALL_SKIP",
    # Formatters
    "Formatter",
    "StructlogFormatter",
    "DEV_FORMATTER",
    "FILE_FORMATTER",
    "JSON_FORMATTER",
    "pick_formatter",
    # Writers
    "Writer",
    "Discard",
    "DISCARD",
    "StdoutWriter",
    "MultiWriter",
    "RotateFile",
    "RotateFileMap",
    "new_rotate_file",
    "new_rotate_file_map",
    # Errors
    "RouteLogError",
    "ConfigurationError",
]
