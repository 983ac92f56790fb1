"""Module tag binding for routed logging.

A log call is routed to a module's table when it carries a context tag
under ``CTX_KEY_NAME``. The tag can reach the dispatch engine three ways:

    - a ``ModuleLogger`` handle returned by ``RouteHook.register``
    - a structlog logger bound with ``moduleName=...``
    - a ``bind_module`` block, for any logger used inside it

Usage:
    from routelog.logging import bind_module

    with bind_module("billing"):
        logging.getLogger(__name__).error("charge_failed")

Dependencies:
    - structlog.contextvars
"""

from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, Generator, Mapping, Optional

import structlog

CTX_KEY_NAME = "moduleName"

# LogRecord attribute carrying a handle's context mapping; never a field.
RECORD_CONTEXT_ATTR = "_routelog_context"


def module_context(module: str, **values: Any) -> Mapping[str, Any]:
    """Build an immutable context mapping tagged with ``module``.

    Args:
        module: Module name used for route lookup.
        **values: Extra key/value pairs carried alongside the tag.

    Returns:
        A read-only mapping.
    """
    return MappingProxyType({**values, CTX_KEY_NAME: module})


@contextmanager
def bind_module(module: str) -> Generator[None, None, None]:
    """Route every log call made within the block to ``module``.

    The tag is bound to structlog's context vars, so it follows the
    current thread or asyncio task and is restored on exit.

    Args:
        module: Registered module name.

    Example:
        with bind_module("billing"):
            logger.error("charge_failed", order_id=order.id)
    """
    tokens = structlog.contextvars.bind_contextvars(**{CTX_KEY_NAME: module})
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)


def get_bound_module() -> Optional[str]:
    """Return the module bound by an enclosing ``bind_module`` block, if any."""
    return structlog.contextvars.get_contextvars().get(CTX_KEY_NAME)
