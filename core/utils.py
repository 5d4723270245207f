"""Assorted utility helpers."""
from __future__ import annotations

import logging
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Type, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+))")
_LEADING_INT = re.compile(r"^\s*([-+]?\d+)")


def parse_enum(raw, enum_cls: Type[E], fallback: E) -> E:
    """Map a backend string onto ``enum_cls``.

    Matching is case-insensitive against both member names and values after
    trimming whitespace. Missing or unknown values never raise: ``fallback``
    is returned and a warning is logged so drifting payloads stay visible.
    """
    if isinstance(raw, enum_cls):
        return raw
    if raw is None:
        logger.warning("Missing %s value, using %s", enum_cls.__name__, fallback.name)
        return fallback
    normalized = str(raw).strip().upper()
    for member in enum_cls:
        if member.name.upper() == normalized or str(member.value).upper() == normalized:
            return member
    logger.warning("Unknown %s value %r, using %s", enum_cls.__name__, raw, fallback.name)
    return fallback


def parse_decimal(raw) -> Optional[Decimal]:
    """Read the leading number of ``raw``; ``None`` when there is none.

    Form fields hold free text, so ``"7.5 %"`` reads as ``7.5`` and
    ``"abc"`` as ``None``. Non-finite numbers are treated as missing.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else None
    if isinstance(raw, (int, float)):
        value = Decimal(str(raw))
        return value if value.is_finite() else None
    match = _LEADING_NUMBER.match(str(raw))
    if not match:
        return None
    try:
        return Decimal(match.group(1))
    except InvalidOperation:
        return None


def parse_int(raw) -> Optional[int]:
    """Read the leading integer of ``raw`` (``"120.5"`` reads as ``120``)."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, (float, Decimal)):
        value = parse_decimal(raw)
        return int(value) if value is not None else None
    match = _LEADING_INT.match(str(raw))
    return int(match.group(1)) if match else None


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_currency(amount, currency: str = "PEN") -> str:
    value = parse_decimal(amount) or Decimal("0")
    symbol = "S/" if currency == "PEN" else "US$"
    return f"{symbol} {to_cents(value):,.2f}"


def format_percent(value, digits: int = 2) -> str:
    number = parse_decimal(value)
    if number is None:
        return "-"
    return f"{number:.{digits}f}%"


def format_date(raw) -> str:
    """Render an ISO date or datetime as ``dd/mm/yyyy``; other text passes through."""
    if raw is None or raw == "":
        return "-"
    if isinstance(raw, (date, datetime)):
        return raw.strftime("%d/%m/%Y")
    text = str(raw)
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).strftime("%d/%m/%Y")
    except ValueError:
        return text
