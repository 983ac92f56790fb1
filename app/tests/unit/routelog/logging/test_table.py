"""Unit tests for routelog.logging.table module.

Tests cover:
- Builders for each output variant
- route() resolution with and without a default writer
- Formatter get/set
- Construction errors
"""

import pytest

from routelog.logging.errors import ConfigurationError
from routelog.logging.formatters import FILE_FORMATTER, JSON_FORMATTER
from routelog.logging.levels import ALL_LEVELS, Level
from routelog.logging.table import WriterTable
from routelog.logging.writers import RotateFileMap, new_rotate_file


@pytest.mark.unit
class TestBuilders:
    """Test suite for WriterTable construction."""

    def test_from_writer_sets_only_default(self, writer_factory):
        writer = writer_factory()
        table = WriterTable.from_writer(writer)

        assert table.active_levels == []
        for level in ALL_LEVELS:
            assert table.route(level) is writer

    def test_from_writer_map_binds_each_level(self, writer_factory):
        errors, info = writer_factory(), writer_factory()
        table = WriterTable.from_writer_map({Level.ERROR: errors, Level.INFO: info})

        assert table.active_levels == [Level.ERROR, Level.INFO]
        assert table.route(Level.ERROR) is errors
        assert table.route(Level.INFO) is info

    def test_one_writer_may_serve_many_levels(self, writer_factory):
        shared = writer_factory()
        table = WriterTable.from_writer_map({Level.ERROR: shared, Level.FATAL: shared})

        assert table.route(Level.ERROR) is table.route(Level.FATAL) is shared

    def test_from_rotate_file_map(self, tmp_path):
        files = RotateFileMap({Level.ERROR: new_rotate_file(str(tmp_path / "app.log.error"))})
        table = WriterTable.from_rotate_file_map(files)

        assert table.active_levels == [Level.ERROR]
        assert table.route(Level.ERROR) is files[Level.ERROR]

    def test_new_dispatches_on_output(self, writer_factory, tmp_path):
        writer = writer_factory()
        files = RotateFileMap({Level.INFO: new_rotate_file(str(tmp_path / "app.log.info"))})

        assert WriterTable.new(writer).route(Level.DEBUG) is writer
        assert WriterTable.new({Level.WARNING: writer}).route(Level.WARNING) is writer
        assert WriterTable.new(files).route(Level.INFO) is files[Level.INFO]

    @pytest.mark.parametrize("output", [42, "logs/app.log", None, [1, 2]])
    def test_new_rejects_unsupported_output(self, output):
        with pytest.raises(ConfigurationError, match="unsupported level map type"):
            WriterTable.new(output)

    def test_configuration_error_is_type_error(self):
        with pytest.raises(TypeError):
            WriterTable.new(3.5)

    def test_writer_map_rejects_non_level_keys(self, writer_factory):
        with pytest.raises(ConfigurationError, match="unsupported level key type"):
            WriterTable.from_writer_map({"error": writer_factory()})


@pytest.mark.unit
class TestRoute:
    """Test suite for WriterTable.route."""

    def test_falls_back_to_default_writer(self, writer_factory):
        errors, fallback = writer_factory(), writer_factory()
        table = WriterTable.from_writer_map({Level.ERROR: errors})
        table.set_default_writer(fallback)

        assert table.route(Level.ERROR) is errors
        for level in ALL_LEVELS:
            if level is not Level.ERROR:
                assert table.route(level) is fallback

    def test_no_default_writer_returns_none(self, writer_factory):
        table = WriterTable.from_writer_map({Level.ERROR: writer_factory()})

        for level in ALL_LEVELS:
            if level is not Level.ERROR:
                assert table.route(level) is None

    def test_empty_table_routes_nothing(self):
        table = WriterTable()

        assert all(table.route(level) is None for level in ALL_LEVELS)

    def test_set_writer_replaces_binding(self, writer_factory):
        first, second = writer_factory(), writer_factory()
        table = WriterTable.from_writer_map({Level.INFO: first})

        table.set_writer(Level.INFO, second)

        assert table.route(Level.INFO) is second
        assert table.active_levels == [Level.INFO]

    def test_set_default_writer_replaces_previous(self, writer_factory):
        first, second = writer_factory(), writer_factory()
        table = WriterTable.from_writer(first)

        table.set_default_writer(second)

        assert table.route(Level.INFO) is second


@pytest.mark.unit
class TestFormatter:
    """Test suite for formatter accessors."""

    def test_default_formatter_is_file_formatter(self):
        assert WriterTable().get_formatter() is FILE_FORMATTER

    def test_set_formatter(self):
        table = WriterTable()
        table.set_formatter(JSON_FORMATTER)

        assert table.get_formatter() is JSON_FORMATTER

    def test_set_formatter_none_restores_file_formatter(self):
        table = WriterTable(JSON_FORMATTER)
        table.set_formatter(None)

        assert table.get_formatter() is FILE_FORMATTER
