"""Routed logging setup from configuration.

Builds the process-wide dispatch engine from ``LoggingSettings``, attaches
it to the root logger and bridges structlog into stdlib logging so that
structlog loggers are routed as well.

Usage:
    from routelog.logging import configure_logging, get_logger

    # At application startup
    hook = configure_logging()

    # Register a module with its own files
    hook.register("billing", WriterTable.from_rotate_file_map(billing_files))
    logger = get_logger(__name__, module="billing")
    logger.error("charge_failed")

Dependencies:
    - routelog.configuration.LoggingSettings
"""

import logging
from typing import TYPE_CHECKING, Optional, Union

import structlog

from routelog.logging import default
from routelog.logging.caller import SkipCaller
from routelog.logging.context import module_context
from routelog.logging.formatters import JSON_FORMATTER, Formatter, pick_formatter
from routelog.logging.hook import ModuleLogger, RouteHook
from routelog.logging.levels import Level
from routelog.logging.writers import StdoutWriter, new_rotate_file, new_rotate_file_map

if TYPE_CHECKING:
    from routelog.configuration import LoggingSettings


def _build_formatter(settings: "LoggingSettings", is_dev: bool) -> Formatter:
    if not is_dev and settings.LOG_FORMAT == "json":
        return JSON_FORMATTER
    return pick_formatter(is_dev)


def build_hook(settings: "LoggingSettings", is_dev: Optional[bool] = None) -> RouteHook:
    """Build a dispatch engine from settings without installing it.

    Output goes to stdout unless ``LOG_PATH`` is set, in which case it goes
    to a rotating file there, or to one rotating file per level with
    ``LOG_SPLIT_LEVELS``.
    """
    dev_mode = is_dev if is_dev is not None else settings.LOG_DEV
    formatter = _build_formatter(settings, dev_mode)

    if not settings.LOG_PATH:
        hook = RouteHook.from_writer(StdoutWriter(), formatter)
    elif settings.LOG_SPLIT_LEVELS:
        files = new_rotate_file_map(settings.LOG_PATH, settings.max_age, settings.rotation)
        if settings.LOG_STDOUT:
            files.set_stdout()
        hook = RouteHook.from_rotate_file_map(files, formatter)
    else:
        f = new_rotate_file(settings.LOG_PATH, settings.max_age, settings.rotation)
        if settings.LOG_STDOUT:
            f.set_stdout()
        hook = RouteHook.from_writer(f, formatter)

    hook.set_caller(SkipCaller(settings.LOG_CALLER_SKIP))
    return hook


def configure_logging(
    settings: Optional["LoggingSettings"] = None,
    log_level: Optional[str] = None,
    is_dev: Optional[bool] = None,
) -> RouteHook:
    """Configure routed logging for the process.

    Configures:
    - A dispatch engine built from settings, installed as the default engine
    - The engine attached to the root logger at the configured level
    - structlog bridged into stdlib logging, with context vars merged

    Args:
        settings: Settings to use. Defaults to the routelog settings singleton.
        log_level: Optional override for the root level (DEBUG, INFO, ...).
        is_dev: Optional override for the colorized development formatter.

    Returns:
        The installed dispatch engine.

    Example:
        # At application startup
        hook = configure_logging()

        # With overrides for testing
        hook = configure_logging(log_level="DEBUG", is_dev=False)
    """
    if settings is None:
        from routelog.configuration import settings as default_settings

        settings = default_settings

    level = Level.parse(log_level or settings.LOG_LEVEL)

    previous = default.get_hook()
    root = logging.getLogger()
    root.removeHandler(previous.handler)

    hook = build_hook(settings, is_dev)
    default.set_hook(hook)
    hook.apply(root)
    root.setLevel(level.to_stdlib())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    return hook


def get_logger(
    name: Optional[str] = None, module: Optional[str] = None
) -> Union[logging.Logger, ModuleLogger]:
    """Get a stdlib logger, or a module handle when ``module`` is given.

    Args:
        name: Logger name (typically __name__ in calling module).
        module: Module to route through; registered with the default engine
            using its own table if not registered yet.

    Example:
        logger = get_logger(__name__)
        billing = get_logger(__name__, module="billing")
    """
    logger = logging.getLogger(name)
    if module is None:
        return logger

    hook = default.get_hook()
    if hook.get_route(module) is None:
        hook.register(module)
    return ModuleLogger(logger, module_context(module))
