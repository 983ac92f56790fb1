"""Dispatch engine routing log records per module and level.

A ``RouteHook`` is a ``WriterTable`` that also owns a registry of module
routes. Each record fired through it is written through the table
registered for the record's module tag, or through the hook's own table
when the tag is absent or unknown.

Usage:
    import logging
    from routelog.logging import Level, RouteHook, WriterTable

    hook = RouteHook.from_writer(open("app.log", "ab"))
    hook.apply(logging.getLogger())

    billing = WriterTable.from_writer_map({Level.ERROR: billing_errors})
    billing.set_default_writer(billing_all)
    logger = hook.register("billing", billing)

    logger.error("charge_failed", extra={"order_id": 42})  # -> billing_errors
    logger.info("charge_ok")                                # -> billing_all

Locking:
    The hook lock guards the module registry and the logger binding; each
    table lock guards that table's writers, formatter and write path. The
    hook lock is never taken while a table lock is held.
"""

import logging
import threading
from typing import Any, Dict, List, Mapping, MutableMapping, Optional

from routelog.logging import diagnostics
from routelog.logging.caller import DEFAULT_CALLER_SKIP, Caller, SkipCaller
from routelog.logging.context import CTX_KEY_NAME, RECORD_CONTEXT_ATTR, module_context
from routelog.logging.formatters import Formatter
from routelog.logging.levels import ALL_LEVELS, TRACE, Level
from routelog.logging.record import Record
from routelog.logging.table import WriterTable


class HookHandler(logging.Handler):
    """Adapter plugging a hook into stdlib logging.

    Every record is converted to a ``Record`` and fired; records whose
    level the hook did not ask for are ignored. Failures are reported
    through ``Handler.handleError`` so that ``logging.raiseExceptions``
    decides whether they surface.
    """

    def __init__(self, hook: "RouteHook"):
        super().__init__(level=logging.NOTSET)
        self.hook = hook
        self._levels = frozenset(hook.levels())

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = Record.from_log_record(record)
            if entry.level in self._levels:
                self.hook.fire(entry)
        except Exception:
            self.handleError(record)


def add_hook(logger: logging.Logger, hook: "RouteHook") -> HookHandler:
    """Register ``hook`` with ``logger`` and return its handler."""
    handler = hook.handler
    logger.addHandler(handler)
    return handler


class ModuleLogger(logging.LoggerAdapter):
    """Logger handle whose calls carry a module context tag.

    Fields bound with ``bind`` and any ``extra=`` given to a call become
    record fields; the context mapping is attached separately and never
    rendered.

    Example:
        logger = hook.register("billing")
        logger.bind(order_id=42).warning("charge_retry")
    """

    def __init__(
        self,
        logger: logging.Logger,
        context: Mapping[str, Any],
        fields: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(logger, {"context": context, "fields": dict(fields or {})})

    @property
    def context(self) -> Mapping[str, Any]:
        return self.extra["context"]

    @property
    def module(self) -> Optional[str]:
        return self.context.get(CTX_KEY_NAME)

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]):
        extra = {**self.extra["fields"], **(kwargs.get("extra") or {})}
        extra[RECORD_CONTEXT_ATTR] = self.extra["context"]
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **fields: Any) -> "ModuleLogger":
        """Return a handle that adds ``fields`` to every record."""
        return ModuleLogger(self.logger, self.context, {**self.extra["fields"], **fields})

    def with_context(self, **values: Any) -> "ModuleLogger":
        """Return a handle whose context also carries ``values``."""
        context = dict(self.context)
        module = context.pop(CTX_KEY_NAME)
        return ModuleLogger(
            self.logger, module_context(module, **{**context, **values}), self.extra["fields"]
        )

    def trace(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(TRACE, msg, *args, **kwargs)


class RouteHook(WriterTable):
    """Routing table plus a registry of per-module tables.

    Attributes:
        _hooks: Module name to table; tables are shared, not copied.
        _logger: Logger the hook was applied to, if any.
        _logger_applied: Whether ``apply`` has been called.
        _caller: Strategy used to find the caller of error-grade records.
        _hook_lock: Guards the attributes above.
    """

    def __init__(self, formatter: Optional[Formatter] = None):
        super().__init__(formatter)
        self._hook_lock = threading.Lock()
        self._hooks: Dict[str, WriterTable] = {}
        self._logger: Optional[logging.Logger] = None
        self._logger_applied = False
        self._caller: Caller = SkipCaller(DEFAULT_CALLER_SKIP)
        self.handler = HookHandler(self)

    def levels(self) -> List[Level]:
        """Every level: filtering happens in ``fire``."""
        return list(ALL_LEVELS)

    def apply(self, logger: Optional[logging.Logger] = None) -> None:
        """Attach the hook to ``logger`` (the root logger by default).

        Applying again binds the hook to the new logger; handles registered
        afterwards are created from it.
        """
        if logger is None:
            logger = logging.getLogger()
        with self._hook_lock:
            add_hook(logger, self)
            self._logger = logger
            self._logger_applied = True

    @property
    def logger(self) -> Optional[logging.Logger]:
        with self._hook_lock:
            return self._logger

    def register(self, module: str, table: Optional[WriterTable] = None) -> ModuleLogger:
        """Route records tagged with ``module`` through ``table``.

        Args:
            module: Module name. Registering a name again replaces its table.
            table: Table to route through; the hook itself when None.

        Returns:
            A logger handle whose records carry the module tag. It wraps the
            applied logger, or the root logger if the hook is not applied.
        """
        if table is None:
            table = self

        with self._hook_lock:
            self._hooks[module] = table
            if self._logger_applied:
                logger = self._logger
            else:
                logger = logging.getLogger()

        return ModuleLogger(logger, module_context(module))

    def get_route(self, module: str) -> Optional[WriterTable]:
        """Return the table registered for ``module``, if any."""
        with self._hook_lock:
            return self._hooks.get(module)

    def set_caller(self, caller: Caller) -> None:
        with self._hook_lock:
            self._caller = caller

    def get_caller(self) -> Caller:
        with self._hook_lock:
            return self._caller

    def find_route(self, context: Optional[Mapping[str, Any]]) -> WriterTable:
        """Return the table for the module tagged in ``context``.

        Falls back to the hook itself when there is no context, no tag, no
        registration for the tag, a context that is not a mapping or a tag
        that is not a string. Only one hop is resolved: a registered hook's
        own registry is not consulted.
        """
        if context is None:
            return self
        if not isinstance(context, Mapping):
            diagnostics.logger.warning(
                "unsupported_context_type", context_type=type(context).__name__
            )
            return self

        module = context.get(CTX_KEY_NAME)
        if module is None:
            return self
        if not isinstance(module, str):
            diagnostics.logger.warning(
                "unsupported_context_value_type", value_type=type(module).__name__
            )
            return self

        with self._hook_lock:
            return self._hooks.get(module, self)

    def fire(self, record: Record) -> None:
        """Write ``record`` through the table its module routes to.

        Unrouted levels are dropped silently. Formatting and write errors
        propagate; nothing is written when formatting fails.
        """
        table = self.find_route(record.context)
        caller = self.get_caller()

        with table._lock:
            if table._has_routes():
                table._write(record, caller)


def new_route_hook(output: Any, formatter: Optional[Formatter] = None) -> RouteHook:
    """Build a hook from a writer, a writer map or a rotating file map.

    Raises:
        ConfigurationError: If ``output`` is none of these.
    """
    return RouteHook.new(output, formatter)
