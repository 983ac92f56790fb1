"""Side channel for problems found while dispatching records.

Dispatch failures cannot be logged through the routed loggers themselves
without re-entering the hook, so they go to a structlog logger that prints
straight to stderr.
"""

import sys

import structlog


class _CurrentStderr:
    """Write to whatever ``sys.stderr`` is at the time of the write.

    Honours stderr redirected or captured after import.
    """

    def write(self, data: str) -> int:
        return sys.stderr.write(data)

    def flush(self) -> None:
        sys.stderr.flush()


logger = structlog.wrap_logger(
    structlog.PrintLogger(_CurrentStderr()),
    wrapper_class=structlog.BoundLogger,
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"]),
    ],
    cache_logger_on_first_use=False,
    logger_name="routelog.diagnostics",
)
