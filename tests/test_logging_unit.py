"""Unit tests for structured logging."""

import json
import logging

import pytest

from obsidian_news.logging_config import (
    StructuredFormatter,
    create_execution_logger,
    setup_structured_logging,
)


def capture(logger_name: str) -> tuple[logging.Logger, list[logging.LogRecord]]:
    records: list[logging.LogRecord] = []

    class ListHandler(logging.Handler):
        def emit(self, record):
            records.append(record)

    logger = logging.getLogger(logger_name)
    logger.addHandler(ListHandler())
    logger.setLevel(logging.DEBUG)
    return logger, records


class TestStructuredLogging:
    def test_context_fields_are_serialized(self):
        _, records = capture("obsidian_news.test_component")
        logger = create_execution_logger("test_component", "exec_1")

        logger.info(
            "Processed feed", feed_url="https://a.example/feed", items_count=3
        )

        entry = json.loads(StructuredFormatter().format(records[-1]))
        assert entry["message"] == "Processed feed"
        assert entry["execution_id"] == "exec_1"
        assert entry["component"] == "test_component"
        assert entry["feed_url"] == "https://a.example/feed"
        assert entry["context"] == {"items_count": 3}

    def test_metrics_are_promoted(self):
        _, records = capture("obsidian_news.metrics_component")
        logger = create_execution_logger("metrics_component", "exec_2")

        logger.log_metrics({"posts_published": 1, "errors": []})

        entry = json.loads(StructuredFormatter().format(records[-1]))
        assert entry["metrics"] == {"posts_published": 1, "errors": []}

    def test_generated_execution_id(self):
        logger = create_execution_logger("anything")
        assert logger.execution_id.startswith("exec_")

    def test_execution_end_reports_duration(self):
        _, records = capture("obsidian_news.timed")
        logger = create_execution_logger("timed", "exec_3")

        logger.log_execution_start()
        logger.log_execution_end(success=True, status="published")

        entry = json.loads(StructuredFormatter().format(records[-1]))
        assert entry["status"] == "published"
        assert entry["context"]["execution_success"] is True
        assert entry["context"]["execution_duration_seconds"] >= 0

    def test_candidate_decision(self):
        _, records = capture("obsidian_news.selection")
        logger = create_execution_logger("selection", "exec_4")

        logger.log_candidate("New Chip Unveiled", "selected")

        entry = json.loads(StructuredFormatter().format(records[-1]))
        assert entry["level"] == "INFO"
        assert entry["message"] == "Candidate selected: New Chip Unveiled"
        assert entry["item_title"] == "New Chip Unveiled"
        assert entry["context"] == {"decision": "selected"}


@pytest.fixture
def root_logger():
    """Restore the root logger's handlers and level after the test."""
    logger = logging.getLogger()
    saved_handlers = logger.handlers[:]
    saved_level = logger.level
    yield logger
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    for handler in saved_handlers:
        logger.addHandler(handler)
    logger.setLevel(saved_level)


class TestSetupStructuredLogging:
    def test_configures_levels_and_json_handler(self, root_logger):
        setup_structured_logging("debug")

        assert logging.getLogger("obsidian_news").level == logging.DEBUG
        assert logging.getLogger("botocore").level == logging.WARNING
        assert isinstance(root_logger.handlers[-1].formatter, StructuredFormatter)

    def test_unknown_level_falls_back_to_info(self, root_logger):
        setup_structured_logging("chatty")

        assert root_logger.level == logging.INFO
