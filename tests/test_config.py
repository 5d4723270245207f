import json
import logging
from decimal import Decimal

import pytest

from core.config import DEFAULT_API_BASE_URL, Settings, load_settings
from core.exceptions import ConfigurationError
from core.logging import JsonFormatter, get_logger, setup_logging


def test_defaults():
    s = Settings(_env_file=None)
    assert s.API_BASE_URL == DEFAULT_API_BASE_URL
    assert s.MIN_DOWN_PAYMENT_PCT == Decimal("0.10")
    assert (s.MIN_TERM_MONTHS, s.MAX_TERM_MONTHS) == (60, 300)
    assert s.CANCEL_POLICY == "save"
    assert s.LANGUAGE == "es"


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("MYHOME_REQUEST_TIMEOUT", "5")
    monkeypatch.setenv("MYHOME_LOG_LEVEL", "debug")
    monkeypatch.setenv("LANGUAGE", "en_US:en")
    s = load_settings(_env_file=None)
    assert s.REQUEST_TIMEOUT == 5
    assert s.LOG_LEVEL == "DEBUG"
    assert s.LANGUAGE == "es"


@pytest.mark.parametrize(
    "overrides",
    [
        {"CANCEL_POLICY": "ignore"},
        {"MIN_TERM_MONTHS": 400},
        {"MIN_DOWN_PAYMENT_PCT": "1.5"},
        {"REQUEST_TIMEOUT": 0},
        {"API_BASE_URL": "ftp://example.com"},
    ],
)
def test_invalid_values_raise_configuration_error(overrides):
    with pytest.raises(ConfigurationError):
        load_settings(_env_file=None, **overrides)


def test_json_formatter():
    record = logging.LogRecord("core.wizard", logging.INFO, __file__, 1, "step %d", (2,), None)
    data = json.loads(JsonFormatter().format(record))
    assert data["message"] == "step 2"
    assert data["logger"] == "core.wizard"
    assert data["level"] == "INFO"


def test_setup_logging_is_idempotent():
    root = logging.getLogger()
    setup_logging("DEBUG", "json")
    setup_logging("WARNING")
    ours = [h for h in root.handlers if getattr(h, "_myhome", False)]
    assert len(ours) == 1
    assert logging.getLogger("urllib3").level == logging.WARNING
    assert logging.getLogger("core").level == logging.WARNING
    root.removeHandler(ours[0])
    logging.getLogger("core").setLevel(logging.NOTSET)


def test_get_logger_follows_app_level():
    setup_logging("DEBUG")
    assert get_logger("myhome.app").getEffectiveLevel() == logging.DEBUG
    setup_logging("WARNING")
    assert get_logger("core.wizard").getEffectiveLevel() == logging.WARNING
    assert get_logger("urllib3").getEffectiveLevel() == logging.WARNING
    root = logging.getLogger()
    for handler in [h for h in root.handlers if getattr(h, "_myhome", False)]:
        root.removeHandler(handler)
    for name in ("core", "myhome"):
        logging.getLogger(name).setLevel(logging.NOTSET)
