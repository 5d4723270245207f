import logging
import random
import string
from decimal import Decimal

import pytest

from core.utils import format_currency, format_date, format_percent, parse_decimal, parse_enum, parse_int
from myhome.models import Currency, SimulationStatus, SubsidyType


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("SAVED", SimulationStatus.SAVED),
        (" saved ", SimulationStatus.SAVED),
        ("converted_to_application", SimulationStatus.CONVERTED_TO_APPLICATION),
        (SimulationStatus.EXPIRED, SimulationStatus.EXPIRED),
        ("ARCHIVED", SimulationStatus.DRAFT),
        (None, SimulationStatus.DRAFT),
        ("", SimulationStatus.DRAFT),
    ],
)
def test_parse_enum(raw, expected):
    assert parse_enum(raw, SimulationStatus, SimulationStatus.DRAFT) is expected


def test_parse_enum_logs_unknown_values(caplog):
    with caplog.at_level(logging.WARNING, logger="core.utils"):
        assert parse_enum("EUR", Currency, Currency.PEN) is Currency.PEN
    assert "EUR" in caplog.text


def test_parse_enum_is_total_over_strings():
    rng = random.Random(1234)
    alphabet = string.printable + "ñáéíóú_ "
    members = set(SubsidyType)
    for _ in range(500):
        raw = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 24)))
        assert parse_enum(raw, SubsidyType, SubsidyType.BONO_VERDE) in members


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("7.5", Decimal("7.5")),
        (" 12 ", Decimal("12")),
        ("8.25%", Decimal("8.25")),
        (".5", Decimal(".5")),
        ("-3", Decimal("-3")),
        (10, Decimal("10")),
        ("", None),
        ("abc", None),
        (None, None),
        (float("nan"), None),
    ],
)
def test_parse_decimal(raw, expected):
    assert parse_decimal(raw) == expected


@pytest.mark.parametrize("raw,expected", [("240", 240), ("120.9", 120), ("x", None), ("", None), (60, 60)])
def test_parse_int(raw, expected):
    assert parse_int(raw) == expected


def test_formatters():
    assert format_currency(Decimal("1234.5")) == "S/ 1,234.50"
    assert format_currency(10, "USD") == "US$ 10.00"
    assert format_percent(9.876) == "9.88%"
    assert format_percent(None) == "-"
    assert format_date("2025-03-01T10:00:00Z") == "01/03/2025"
    assert format_date("") == "-"
    assert format_date("pronto") == "pronto"
