"""Records handed to the dispatch engine.

A ``Record`` is built once per emitted ``logging.LogRecord``. It separates
the structured fields of the call from the context used for route lookup,
whether the call came from a plain stdlib logger, a ``ModuleLogger`` handle
or a structlog logger bridged into stdlib logging.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import structlog

from routelog.logging.context import CTX_KEY_NAME, RECORD_CONTEXT_ATTR
from routelog.logging.levels import Level

# Attributes every LogRecord carries; anything else came from ``extra=``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


@dataclass
class Record:
    """A single log record as seen by the dispatch engine.

    Attributes:
        level: Routing severity.
        message: Rendered log message (the structlog ``event``).
        fields: Structured key/value data. Caller info is added here.
        context: Mapping carrying the module tag, or None.
        time: Creation time of the record.
        logger_name: Name of the emitting logger.
        exc_info: Exception info tuple, if any.
    """

    level: Level
    message: str
    fields: Dict[str, Any] = field(default_factory=dict)
    context: Optional[Mapping[str, Any]] = None
    time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    logger_name: str = ""
    exc_info: Any = None

    @classmethod
    def from_log_record(cls, record: logging.LogRecord) -> "Record":
        """Convert a stdlib ``LogRecord``.

        Fields come from ``extra=`` attributes and, for records produced by
        structlog's ``ProcessorFormatter.wrap_for_formatter``, from the
        event dict carried in ``record.msg``. A module tag found in the
        fields is moved to the context; without an explicit context the
        structlog context vars of the emitting thread are used.
        """
        fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }

        if isinstance(record.msg, dict):
            event_dict = dict(record.msg)
            message = str(event_dict.pop("event", ""))
            fields.update(event_dict)
        else:
            message = record.getMessage()

        context = getattr(record, RECORD_CONTEXT_ATTR, None)
        tag = fields.pop(CTX_KEY_NAME, None)
        if context is None and tag is not None:
            context = {CTX_KEY_NAME: tag}
        if context is None:
            context = structlog.contextvars.get_contextvars() or None

        return cls(
            level=Level.from_stdlib(record.levelno),
            message=message,
            fields=fields,
            context=context,
            time=datetime.fromtimestamp(record.created, tz=timezone.utc),
            logger_name=record.name,
            exc_info=record.exc_info,
        )
