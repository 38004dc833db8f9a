"""Tests for settings and log record context."""

import logging

from wphub.config import Settings
from wphub.observability import RequestIdFilter


def test_callback_url_joins_origin_and_path():
    settings = Settings(_env_file=None, app_origin="https://dash.example.test/", connect_callback_path="connect-success")
    assert settings.callback_url == "https://dash.example.test/connect-success"


def test_is_production():
    assert Settings(_env_file=None, environment="Production").is_production is True
    assert Settings(_env_file=None, environment="development").is_production is False


def test_request_id_filter_fills_defaults():
    record = logging.LogRecord("wphub.test", logging.INFO, __file__, 1, "hello", None, None)

    assert RequestIdFilter().filter(record) is True
    assert record.request_id == "-"
    assert record.trace_id == "-"
    assert record.span_id == "-"
