"""Tests for logging setup and structured events."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from cleansight.config import LoggingConfig
from cleansight.logging_utils import JsonlFormatter, get_logger, log_event, setup_logging


def test_get_logger_is_namespaced():
    assert get_logger().name == "cleansight"
    assert get_logger("pipeline").name == "cleansight.pipeline"


def test_file_logging_writes_jsonl_and_errors(tmp_path: Path):
    cfg = LoggingConfig(level="INFO", console=False, file=True)
    logger = setup_logging(cfg, log_dir=tmp_path)
    child = get_logger("pipeline")

    log_event(child, "Content processed successfully", event="success", url="https://example.com", format="text")
    log_event(child, "Error processing URL", level=logging.ERROR, event="internal_error", url="https://example.com")

    for handler in logger.handlers:
        handler.flush()
        handler.close()
    logger.handlers = []
    logger.propagate = True

    combined = [json.loads(line) for line in (tmp_path / cfg.filename).read_text(encoding="utf-8").splitlines()]
    errors = [json.loads(line) for line in (tmp_path / cfg.error_filename).read_text(encoding="utf-8").splitlines()]

    assert [entry["event"] for entry in combined] == ["success", "internal_error"]
    assert combined[0]["url"] == "https://example.com"
    assert combined[0]["format"] == "text"
    assert combined[0]["logger"] == "cleansight.pipeline"
    assert [entry["event"] for entry in errors] == ["internal_error"]


def test_log_event_ignores_reserved_fields(caplog):
    logger = logging.getLogger("test_logging_reserved")

    with caplog.at_level(logging.INFO, logger="test_logging_reserved"):
        log_event(logger, "hello", event="x", name="shadow", args="shadow", filename="shadow")

    record = caplog.records[-1]
    assert record.name == "test_logging_reserved"
    assert record.getMessage() == "hello"
    assert record.event == "x"


def test_log_event_accepts_no_logger():
    log_event(None, "nothing happens", event="noop")


def test_jsonl_formatter_includes_stack_for_exceptions():
    formatter = JsonlFormatter()
    try:
        raise ValueError("bad")
    except ValueError:
        record = logging.getLogger("test_jsonl").makeRecord(
            "test_jsonl", logging.ERROR, __file__, 1, "failed", (), exc_info=sys.exc_info()
        )

    payload = json.loads(formatter.format(record))

    assert payload["level"] == "ERROR"
    assert payload["message"] == "failed"
    assert "ValueError: bad" in payload["stack"]
