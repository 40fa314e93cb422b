"""Structured Logging — JSON formatter output and setup idempotence."""

import json
import logging

from app.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra):
    record = logging.LogRecord(
        "app.services.retrieval_pipeline", logging.WARNING, __file__, 1,
        "Cache unavailable, bypassing", None, None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_lookup_extras():
    out = json.loads(JSONFormatter().format(
        _record(record_key="pikachu", tier="cache", policy="degrade"),
    ))
    assert out["level"] == "WARNING"
    assert out["logger"] == "app.services.retrieval_pipeline"
    assert out["record_key"] == "pikachu"
    assert out["tier"] == "cache"
    assert out["policy"] == "degrade"


def test_json_formatter_omits_absent_extras():
    out = json.loads(JSONFormatter().format(_record()))
    assert "record_key" not in out
    assert "attempt" not in out


def test_setup_logging_replaces_its_own_handler():
    setup_logging("DEBUG", "json")
    after_first = len(logging.root.handlers)
    setup_logging("INFO", "text")
    assert len(logging.root.handlers) == after_first
    assert logging.root.level == logging.INFO
