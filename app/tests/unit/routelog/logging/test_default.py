"""Unit tests for routelog.logging.default module."""

import pytest

from routelog.logging import default
from routelog.logging.formatters import DEV_FORMATTER, FILE_FORMATTER
from routelog.logging.hook import ModuleLogger, RouteHook
from routelog.logging.levels import Level
from routelog.logging.writers import Discard


@pytest.mark.unit
class TestDefaultHook:
    """Test suite for the process-wide default engine."""

    def test_initial_engine_discards_with_dev_formatter(self):
        hook = default.get_hook()

        assert isinstance(hook, RouteHook)
        assert isinstance(hook.route(Level.ERROR), Discard)
        assert default.get_formatter() is DEV_FORMATTER

    def test_set_hook_replaces_engine(self):
        hook = RouteHook()

        default.set_hook(hook)

        assert default.get_hook() is hook

    def test_delegates_to_current_engine(self, writer_factory, recording_formatter, isolated_logger):
        default.set_hook(RouteHook())
        writer = writer_factory()

        default.set_default_writer(writer)
        default.set_formatter(recording_formatter)
        default.apply(isolated_logger)
        handle = default.register("billing")

        isolated_logger.info("hello")

        assert isinstance(handle, ModuleLogger)
        assert handle.logger is isolated_logger
        assert default.get_hook().get_route("billing") is default.get_hook()
        assert writer.lines == ["fmt:hello"]

    def test_set_formatter_none_restores_file_formatter(self):
        default.set_hook(RouteHook.from_writer(Discard(), DEV_FORMATTER))

        default.set_formatter(None)

        assert default.get_formatter() is FILE_FORMATTER
