from __future__ import annotations

from decimal import Decimal
from enum import IntEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from core.i18n import t
from core.utils import format_currency, parse_decimal, parse_int
from myhome.calculators import DerivedTotals, down_payment_shortfall, minimum_down_payment
from myhome.models import EligibilitySnapshot, RateRange
from myhome.presets import MAX_TERM_MONTHS, MIN_DOWN_PAYMENT_PCT, MIN_TERM_MONTHS


class Step(IntEnum):
    CLIENT_PROPERTY = 1
    INITIAL_PAYMENT = 2
    RATE_INSTITUTION = 3
    TERM_GRACE = 4
    RESULTS = 5


class StepCheck(BaseModel):
    step: Step
    passed: bool
    code: str = "OK"
    message: str = ""
    context: Dict[str, Any] = Field(default_factory=dict)


def _ok(step: Step, **context) -> StepCheck:
    return StepCheck(step=step, passed=True, context=context)


def _fail(step: Step, code: str, lang: str, **context) -> StepCheck:
    return StepCheck(
        step=step,
        passed=False,
        code=code,
        message=t(code.lower(), lang, **context),
        context=context,
    )


def check_client_property(
    customer_id: str,
    property_id: str,
    snapshot: Optional[EligibilitySnapshot],
    lang: str = "es",
) -> StepCheck:
    step = Step.CLIENT_PROPERTY
    if not customer_id:
        return _fail(step, "CUSTOMER_REQUIRED", lang)
    if not property_id:
        return _fail(step, "PROPERTY_REQUIRED", lang)
    if (
        snapshot is None
        or (snapshot.customer_id and snapshot.customer_id != customer_id)
        or (snapshot.property_id and snapshot.property_id != property_id)
    ):
        return _fail(step, "ELIGIBILITY_MISSING", lang)
    if not snapshot.mivivienda.eligible:
        return _fail(step, "MIVIVIENDA_INELIGIBLE", lang, reasons=snapshot.mivivienda.failure_reasons)
    return _ok(step)


def check_initial_payment(
    totals: DerivedTotals,
    min_pct: Decimal = MIN_DOWN_PAYMENT_PCT,
    lang: str = "es",
) -> StepCheck:
    step = Step.INITIAL_PAYMENT
    minimum = minimum_down_payment(totals.property_price, min_pct)
    if totals.total_initial_payment >= minimum:
        return _ok(step, minimum=minimum)
    shortfall = down_payment_shortfall(totals, min_pct)
    return _fail(
        step,
        "DOWN_PAYMENT_BELOW_MIN",
        lang,
        pct=f"{(min_pct * 100).normalize():f}",
        minimum=minimum,
        shortfall=format_currency(shortfall),
        shortfall_amount=shortfall,
    )


def check_rate_institution(
    interest_rate: str,
    institution_id: str,
    rate_range: Optional[RateRange],
    lang: str = "es",
) -> StepCheck:
    step = Step.RATE_INSTITUTION
    rate = parse_decimal(interest_rate)
    if rate is None or rate <= 0:
        return _fail(step, "RATE_REQUIRED", lang)
    if not institution_id:
        return _fail(step, "INSTITUTION_REQUIRED", lang)
    if rate_range is None:
        return _fail(step, "RATE_RANGE_MISSING", lang)
    if not rate_range.contains(rate):
        return _fail(
            step,
            "RATE_OUT_OF_RANGE",
            lang,
            rate=rate,
            min_rate=rate_range.min_rate,
            max_rate=rate_range.max_rate,
        )
    return _ok(step, rate=rate)


def check_term_grace(
    term_in_months: str,
    min_term: int = MIN_TERM_MONTHS,
    max_term: int = MAX_TERM_MONTHS,
    lang: str = "es",
) -> StepCheck:
    step = Step.TERM_GRACE
    term = parse_int(term_in_months)
    if term is None or not min_term <= term <= max_term:
        return _fail(
            step,
            "TERM_OUT_OF_RANGE",
            lang,
            term=term,
            min_term=min_term,
            max_term=max_term,
            min_years=f"{min_term / 12:g}",
            max_years=f"{max_term / 12:g}",
        )
    return _ok(step, term=term)
