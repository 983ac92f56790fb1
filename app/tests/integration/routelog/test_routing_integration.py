"""Integration tests for routed logging to rotating files.

Covers the full path from a logger call through the dispatch engine to
per-module, per-level files on disk.
"""

import logging

import pytest
import structlog

from routelog.configuration import LoggingSettings
from routelog.logging import (
    ALL_LEVELS,
    CTX_KEY_NAME,
    WriterTable,
    bind_module,
    configure_logging,
    get_logger,
    new_rotate_file_map,
)


@pytest.fixture
def log_dir(tmp_path):
    return tmp_path / "logs"


@pytest.fixture
def hook(log_dir):
    settings = LoggingSettings(
        _env_file=None,
        LOG_PATH=str(log_dir / "app.log"),
        LOG_SPLIT_LEVELS=True,
        LOG_LEVEL="DEBUG",
    )
    hook = configure_logging(settings, is_dev=False)
    yield hook
    for level in ALL_LEVELS:
        hook.route(level).close()


@pytest.fixture
def billing_files(log_dir):
    files = new_rotate_file_map(str(log_dir / "billing.log"))
    yield files
    files.close()


def read(path):
    return path.read_text() if path.exists() else ""


@pytest.mark.integration
class TestRoutingToFiles:
    """End-to-end routing through rotating files."""

    def test_module_records_go_to_module_files(self, hook, billing_files, log_dir):
        hook.register("billing", WriterTable.from_rotate_file_map(billing_files))
        billing = get_logger("shop.billing", module="billing")
        app = get_logger("shop.web")

        billing.error("charge_failed", extra={"order_id": 42})
        billing.info("charge_ok")
        app.warning("slow_request")

        errors = read(log_dir / "billing.log.error")
        assert "event=charge_failed" in errors
        assert "order_id=42" in errors
        assert "func=" in errors
        assert "test_module_records_go_to_module_files" in errors
        assert "event=charge_ok" in read(log_dir / "billing.log.info")
        assert "event=slow_request" in read(log_dir / "app.log.warning")
        assert "charge" not in read(log_dir / "app.log.error")
        assert "charge" not in read(log_dir / "app.log.info")
        assert CTX_KEY_NAME not in errors

    def test_unregistered_module_falls_back(self, hook, log_dir):
        hook.register("billing")

        get_logger("shop.audit", module="audit").info("audited")

        assert "event=audited" in read(log_dir / "app.log.info")

    def test_bind_module_with_plain_logger(self, hook, billing_files, log_dir):
        hook.register("billing", WriterTable.from_rotate_file_map(billing_files))
        logger = logging.getLogger("shop.worker")

        with bind_module("billing"):
            logger.info("inside")
        logger.info("outside")

        assert "event=inside" in read(log_dir / "billing.log.info")
        assert "event=outside" in read(log_dir / "app.log.info")
        assert "outside" not in read(log_dir / "billing.log.info")

    def test_structlog_bound_module(self, hook, billing_files, log_dir):
        hook.register("billing", WriterTable.from_rotate_file_map(billing_files))
        log = structlog.get_logger("shop.api")

        log.bind(**{CTX_KEY_NAME: "billing"}).warning("refund_pending", refund_id="r-9")
        log.warning("unrelated")

        warnings = read(log_dir / "billing.log.warning")
        assert "event=refund_pending" in warnings
        assert "refund_id=r-9" in warnings
        assert "unrelated" not in warnings
        assert "event=unrelated" in read(log_dir / "app.log.warning")

    def test_symlink_points_at_current_file(self, hook, log_dir):
        get_logger("shop.web").info("hello")

        link = log_dir / "app.log.info"
        assert link.is_symlink()
        assert (log_dir / link.readlink()).read_text() == link.read_text()
