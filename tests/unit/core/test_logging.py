"""Tests for the structured logger and logging configuration."""

import logging

import pytest

from vmservice_mdns.core import logging_config
from vmservice_mdns.core.logging_config import configure_logging
from vmservice_mdns.core.logging_utils import (
    TRACE,
    StructuredLogger,
    ensure_structured_logger,
    get_module_logger,
)


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    configured = logging_config._configured
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    logging_config._configured = configured


class TestStructuredLogger:

    def test_module_logger_is_namespaced(self):
        logger = get_module_logger("Advertiser")

        assert logger.name == "vmservice_mdns.Advertiser"
        assert logger.component == "Advertiser"

    def test_messages_are_prefixed_with_component(self, caplog):
        caplog.set_level(logging.INFO)
        logger = get_module_logger("Transport")

        logger.info("Responding as %s", "my_app")

        assert caplog.records[-1].getMessage() == "[Transport] Responding as my_app"

    def test_trace_level(self, trace_caplog):
        logger = get_module_logger("Eligibility")

        logger.trace("Checking %s", "bot")

        record = trace_caplog.records[-1]
        assert record.levelno == TRACE
        assert record.levelname == "TRACE"

    def test_bad_format_args_do_not_raise(self, caplog):
        caplog.set_level(logging.INFO)
        logger = get_module_logger("Test")

        logger.info("no placeholders", "extra")

        assert "args=extra" in caplog.records[-1].getMessage()

    def test_child_extends_component(self):
        child = get_module_logger("Browser").getChild("resolve")

        assert child.component == "Browser.resolve"


class TestEnsureStructuredLogger:

    def test_passes_structured_logger_through(self):
        logger = get_module_logger("A")

        assert ensure_structured_logger(logger) is logger

    def test_wraps_plain_logger(self):
        wrapped = ensure_structured_logger(logging.getLogger("plain"), component="Plain")

        assert isinstance(wrapped, StructuredLogger)
        assert wrapped.component == "Plain"

    def test_none_uses_fallback_name(self):
        wrapped = ensure_structured_logger(None, fallback_name="Fallback")

        assert wrapped.name == "vmservice_mdns.Fallback"


class TestConfigureLogging:

    def test_trace_level_by_name(self, restore_root_logging):
        configure_logging("trace", force=True)

        assert restore_root_logging.level == TRACE

    def test_unknown_level_rejected(self, restore_root_logging):
        with pytest.raises(ValueError):
            configure_logging("chatty", force=True)

    def test_file_handler_created(self, restore_root_logging, tmp_path):
        log_file = tmp_path / "logs" / "vmservice_mdns.log"

        configure_logging("info", force=True, console=False, log_file=log_file)
        get_module_logger("Test").info("hello")
        for handler in restore_root_logging.handlers:
            handler.flush()

        assert "[Test] hello" in log_file.read_text(encoding="utf-8")

    def test_suppressed_loggers_raised_to_warning(self, restore_root_logging):
        configure_logging("debug", force=True, suppressed_loggers=["zeroconf"])

        assert logging.getLogger("zeroconf").level == logging.WARNING
