import json
import logging

from subsvc.logging_setup import make_logger


def _record(logger, message, fields=None):
    extra = {"fields": fields} if fields is not None else None
    return logger.makeRecord(logger.name, logging.INFO, __file__, 10, message, (), None, extra=extra)


def test_production_level_is_info():
    assert make_logger("production").level == logging.INFO


def test_development_level_is_debug():
    assert make_logger("development").level == logging.DEBUG


def test_environment_decides_when_not_given(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    assert make_logger().level == logging.INFO


def test_unset_environment_means_development(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    assert make_logger(None).level == logging.DEBUG


def test_production_output_is_json_with_fields():
    logger = make_logger("production")
    text = logger.handlers[0].format(_record(logger, "Connecting to database", {"dsn": "sqlite://"}))
    entry = json.loads(text)
    assert entry["msg"] == "Connecting to database"
    assert entry["dsn"] == "sqlite://"
    assert entry["level"] == "info"


def test_development_output_contains_message_and_fields():
    logger = make_logger("development")
    text = logger.handlers[0].format(_record(logger, "hello there", {"key": "value"}))
    columns = text.split("\t")
    assert "hello there" in columns
    assert "INFO" in columns
    assert json.loads(columns[-1]) == {"key": "value"}


def test_repeated_setup_keeps_one_handler():
    make_logger("development")
    logger = make_logger("production")
    assert len(logger.handlers) == 1