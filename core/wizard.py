"""Loan simulation wizard: form state, guarded steps and backend coordination.

The controller is UI-agnostic. Streamlit pages call its operations and drain
``notices`` to show toasts; every backend failure is turned into a notice so
nothing below the pages raises on a bad response.
"""
from __future__ import annotations

import itertools
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from core.config import Settings
from core.exceptions import GatewayError
from core.i18n import t
from core.rules import (
    Step,
    StepCheck,
    check_client_property,
    check_initial_payment,
    check_rate_institution,
    check_term_grace,
)
from core.utils import format_percent, parse_decimal, parse_int
from myhome.calculators import DerivedTotals, compute_totals
from myhome.models import (
    CreateSimulationRequest,
    Customer,
    EligibilitySnapshot,
    FinancialInstitution,
    GracePeriod,
    GraceType,
    InstitutionRate,
    InterestRate,
    LoanParameters,
    LoanProgram,
    LoanSimulation,
    Money,
    Property,
    RateRange,
    RateType,
    SubsidyType,
)
from myhome.presets import (
    DEFAULT_GRACE_MONTHS,
    DEFAULT_GRACE_TYPE,
    DEFAULT_PROGRAM_NAME,
    DEFAULT_RATE_TYPE,
    PROGRAM_NAME_MARKER,
)

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")

SIMULATIONS_PAGE = "simulations"

# Fields the form may change through ``update_field``. Selections and the
# rate go through their cascading operations.
EDITABLE_FIELDS = {
    "customer_id",
    "property_id",
    "user_contribution",
    "interest_rate",
    "rate_type",
    "discount_rate",
    "institution_id",
    "term_in_months",
    "grace_period_months",
    "grace_type",
}


class WizardState(BaseModel):
    customer_id: str = ""
    property_id: str = ""
    user_contribution: str = ""
    selected_bonos: Dict[SubsidyType, bool] = Field(default_factory=dict)
    interest_rate: str = ""
    rate_type: RateType = RateType(DEFAULT_RATE_TYPE)
    discount_rate: str = ""
    institution_id: str = ""
    term_in_months: str = ""
    grace_period_months: str = DEFAULT_GRACE_MONTHS
    grace_type: GraceType = GraceType(DEFAULT_GRACE_TYPE)


class Notice(BaseModel):
    level: Literal["error", "warning", "success", "info"]
    key: str
    message: str
    description: str = ""


@dataclass(frozen=True)
class EligibilityTicket:
    customer_id: str
    property_id: str
    sequence: int


@dataclass(frozen=True)
class RateTicket:
    program_id: str
    rate: Decimal
    sequence: int


def filter_customers(customers: List[Customer], query: str) -> List[Customer]:
    q = (query or "").strip().lower()
    if not q:
        return list(customers)
    return [
        c
        for c in customers
        if q in c.display_name.lower() or q in c.email.lower() or q in c.phone_number or q in c.id.lower()
    ]


def filter_properties(properties: List[Property], query: str, eco_only: bool = False) -> List[Property]:
    q = (query or "").strip().lower()
    result = []
    for p in properties:
        if eco_only and not p.eco_certified:
            continue
        haystack = " ".join(
            [p.id, p.property_code, p.property_type.value, p.address, f"{p.price_amount}"]
        ).lower()
        if q and q not in haystack:
            continue
        result.append(p)
    return result


def resolve_program(
    programs: List[LoanProgram],
    preferred: str = DEFAULT_PROGRAM_NAME,
    marker: str = PROGRAM_NAME_MARKER,
) -> Optional[LoanProgram]:
    """Program named ``preferred``, else the first whose name mentions ``marker``."""
    for program in programs:
        if program.name.strip().upper() == preferred.upper():
            return program
    marker = marker.upper()
    for program in programs:
        if marker in program.name.upper():
            return program
    return None


class WizardController:
    def __init__(self, gateway, settings: Optional[Settings] = None, max_workers: int = 4):
        self.gateway = gateway
        self.settings = settings or Settings()
        self.lang = self.settings.LANGUAGE
        self.max_workers = max_workers
        self._sequence = itertools.count(1)

        self.customers: List[Customer] = []
        self.properties: List[Property] = []
        self.programs: List[LoanProgram] = []
        self.institutions: List[FinancialInstitution] = []
        self.program: Optional[LoanProgram] = None
        self.rate_range: Optional[RateRange] = None
        self.catalogs_loaded = False

        self.notices: List[Notice] = []
        self.destination: Optional[str] = None
        self.reset()

    # lifecycle

    def reset(self) -> None:
        """Back to an empty step 1; catalogs stay loaded."""
        self.state = WizardState()
        self.step = Step.CLIENT_PROPERTY
        self.form_modified = False
        self.generated: Optional[LoanSimulation] = None
        self.generated_discarded = False
        self.snapshot: Optional[EligibilitySnapshot] = None
        self.current_customer: Optional[Customer] = None
        self.current_property: Optional[Property] = None
        self.filtered_institutions: List[InstitutionRate] = []
        self.selected_institution_rate: Optional[InstitutionRate] = None
        self._eligibility_ticket: Optional[EligibilityTicket] = None
        self._rate_ticket: Optional[RateTicket] = None

    def load_catalogs(self) -> None:
        """Fetch the four catalogs concurrently, then resolve the program."""
        loaders = {
            "customers": (self.gateway.get_customers, "load_customers_failed"),
            "properties": (self.gateway.get_properties, "load_properties_failed"),
            "programs": (self.gateway.get_loan_programs, "load_programs_failed"),
            "institutions": (self.gateway.get_institutions, "load_institutions_failed"),
        }
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {pool.submit(fn): (slot, key) for slot, (fn, key) in loaders.items()}
            for future in as_completed(futures):
                slot, key = futures[future]
                try:
                    setattr(self, slot, future.result())
                except GatewayError as exc:
                    logger.warning("Catalog %s failed to load: %s", slot, exc)
                    setattr(self, slot, [])
                    self._notify("error", key, description=str(exc))
        self.catalogs_loaded = True
        logger.info(
            "Catalogs loaded: %d customers, %d properties, %d programs, %d institutions",
            len(self.customers),
            len(self.properties),
            len(self.programs),
            len(self.institutions),
        )
        self.select_default_program()

    def select_default_program(self) -> None:
        self.program = resolve_program(self.programs, self.settings.PROGRAM_NAME)
        if self.program is None:
            if self.programs:
                self._notify("warning", "program_missing")
            self.rate_range = None
            return
        self.load_rate_range()

    def load_rate_range(self) -> None:
        if self.program is None:
            return
        try:
            self.rate_range = self.gateway.get_rate_range(self.program.id)
        except GatewayError as exc:
            self.rate_range = None
            self._notify("error", "load_rate_range_failed", description=str(exc))

    @property
    def program_id(self) -> Optional[str]:
        return self.program.id if self.program else None

    # notices

    def _notify(self, level: str, key: str, message: Optional[str] = None, description: str = "") -> None:
        notice = Notice(level=level, key=key, message=message or t(key, self.lang), description=description)
        log = logger.warning if level == "error" else logger.info
        log("%s: %s %s", key, notice.message, description)
        self.notices.append(notice)

    def drain_notices(self) -> List[Notice]:
        notices, self.notices = self.notices, []
        return notices

    # field mutation

    def update_field(self, name: str, value: Any) -> None:
        if name not in EDITABLE_FIELDS:
            raise ValueError(f"{name!r} is not an editable wizard field")
        if name == "rate_type":
            value = RateType(value)
        elif name == "grace_type":
            value = GraceType(value)
        elif value is None:
            value = ""
        cascade = {
            "customer_id": self.select_customer,
            "property_id": self.choose_property,
            "interest_rate": self.set_interest_rate,
            "institution_id": self.select_institution,
        }.get(name)
        if cascade is not None:
            cascade(value)
        else:
            self._set(name, value)

    def _set(self, name: str, value: Any) -> None:
        setattr(self.state, name, value)
        if self.generated is not None:
            self.form_modified = True

    # step 1

    def select_customer(self, customer_id: str) -> None:
        self._set("customer_id", customer_id)
        self.current_customer = self._find_customer(customer_id)
        self._set("property_id", "")
        self._set("selected_bonos", {})
        self.current_property = None
        self.snapshot = None
        self._eligibility_ticket = None

    def select_property(self, property_id: str) -> Optional[EligibilityTicket]:
        """Record the property and issue an eligibility ticket for the new pair."""
        self._set("property_id", property_id)
        self.current_property = self._find_property(property_id)
        self.snapshot = None
        self._set("selected_bonos", {})
        if not (self.state.customer_id and property_id):
            self._eligibility_ticket = None
            return None
        ticket = EligibilityTicket(self.state.customer_id, property_id, next(self._sequence))
        self._eligibility_ticket = ticket
        return ticket

    def fetch_eligibility(self, ticket: EligibilityTicket) -> bool:
        try:
            snapshot = self.gateway.validate_eligibility_with_property(ticket.customer_id, ticket.property_id)
        except GatewayError as exc:
            return self.fail_eligibility(ticket, exc)
        return self.apply_eligibility(ticket, snapshot)

    def apply_eligibility(self, ticket: EligibilityTicket, snapshot: EligibilitySnapshot) -> bool:
        if ticket != self._eligibility_ticket:
            logger.debug("Discarding stale eligibility for %s/%s", ticket.customer_id, ticket.property_id)
            return False
        self._eligibility_ticket = None
        self.snapshot = snapshot
        self._set("selected_bonos", {b.type: True for b in snapshot.mivivienda.eligible_bonos()})
        logger.info(
            "Eligibility for %s/%s: mivivienda=%s",
            ticket.customer_id,
            ticket.property_id,
            snapshot.mivivienda.eligible,
        )
        return True

    def fail_eligibility(self, ticket: EligibilityTicket, error: Exception) -> bool:
        if ticket != self._eligibility_ticket:
            logger.debug("Discarding stale eligibility failure for %s/%s", ticket.customer_id, ticket.property_id)
            return False
        self._eligibility_ticket = None
        self.snapshot = None
        self._notify("error", "eligibility_failed", description=str(error))
        return True

    def choose_property(self, property_id: str) -> None:
        ticket = self.select_property(property_id)
        if ticket is not None:
            self.fetch_eligibility(ticket)

    def retry_eligibility(self) -> None:
        if self.state.customer_id and self.state.property_id:
            self.choose_property(self.state.property_id)

    def _find_customer(self, customer_id: str) -> Optional[Customer]:
        if not customer_id:
            return None
        for c in self.customers:
            if c.id == customer_id:
                return c
        try:
            return self.gateway.get_customer_by_id(customer_id)
        except GatewayError as exc:
            self._notify("error", "load_customers_failed", description=str(exc))
            return None

    def _find_property(self, property_id: str) -> Optional[Property]:
        if not property_id:
            return None
        for p in self.properties:
            if p.id == property_id:
                return p
        try:
            return self.gateway.get_property_by_id(property_id)
        except GatewayError as exc:
            self._notify("error", "load_properties_failed", description=str(exc))
            return None

    # step 3

    def set_interest_rate(self, raw: str) -> Optional[RateTicket]:
        """Store the typed rate and refresh the institutions offering it."""
        self._set("interest_rate", raw)
        rate = parse_decimal(raw)
        if rate is None or rate <= 0 or self.program_id is None:
            self.filtered_institutions = []
            self._rate_ticket = None
            return None
        ticket = RateTicket(self.program_id, rate, next(self._sequence))
        self._rate_ticket = ticket
        self.fetch_institutions(ticket)
        return ticket

    def fetch_institutions(self, ticket: RateTicket) -> bool:
        try:
            offers = self.gateway.search_institutions_offering_rate(ticket.program_id, ticket.rate)
        except GatewayError as exc:
            if ticket != self._rate_ticket:
                return False
            logger.warning("Institution search for %s%% failed: %s", ticket.rate, exc)
            self.filtered_institutions = []
            return True
        return self.apply_institutions(ticket, offers)

    def apply_institutions(self, ticket: RateTicket, offers: List[InstitutionRate]) -> bool:
        if ticket != self._rate_ticket:
            logger.debug("Discarding stale institution search for %s%%", ticket.rate)
            return False
        self.filtered_institutions = list(offers)
        return True

    def select_institution(self, institution_id: str) -> None:
        self._set("institution_id", institution_id)
        self.selected_institution_rate = None
        if not institution_id or self.program_id is None:
            return
        try:
            detail = self.gateway.get_institution_rate(institution_id, self.program_id)
        except GatewayError as exc:
            self._notify("error", "institution_detail_failed", description=str(exc))
            return
        if self.state.institution_id == institution_id:
            self.selected_institution_rate = detail

    @property
    def rate_in_range(self) -> bool:
        rate = parse_decimal(self.state.interest_rate)
        return rate is not None and self.rate_range is not None and self.rate_range.contains(rate)

    # derived values and guards

    @property
    def property_price(self) -> Decimal:
        return self.current_property.price_amount if self.current_property else Decimal("0")

    @property
    def totals(self) -> DerivedTotals:
        return compute_totals(
            self.state.user_contribution,
            self.state.selected_bonos,
            self.snapshot,
            self.property_price,
        )

    def check_step(self, step: Step) -> StepCheck:
        if step == Step.CLIENT_PROPERTY:
            return check_client_property(self.state.customer_id, self.state.property_id, self.snapshot, self.lang)
        if step == Step.INITIAL_PAYMENT:
            return check_initial_payment(self.totals, self.settings.MIN_DOWN_PAYMENT_PCT, self.lang)
        if step == Step.RATE_INSTITUTION:
            return check_rate_institution(
                self.state.interest_rate, self.state.institution_id, self.rate_range, self.lang
            )
        if step == Step.TERM_GRACE:
            return check_term_grace(
                self.state.term_in_months,
                self.settings.MIN_TERM_MONTHS,
                self.settings.MAX_TERM_MONTHS,
                self.lang,
            )
        return StepCheck(step=step, passed=True)

    def checks(self) -> List[StepCheck]:
        return [self.check_step(s) for s in Step if s != Step.RESULTS]

    @property
    def can_generate(self) -> bool:
        return all(c.passed for c in self.checks())

    @property
    def has_live_simulation(self) -> bool:
        return self.generated is not None and not self.generated_discarded and not self.form_modified

    # navigation

    def next_step(self) -> bool:
        if self.step == Step.RESULTS:
            return False
        check = self.check_step(self.step)
        if not check.passed:
            self._notify("error", check.code.lower(), message=check.message)
            return False
        if self.step == Step.TERM_GRACE and not self.has_live_simulation:
            self._notify("info", "generate_first")
            return False
        self.step = Step(self.step + 1)
        logger.info("Wizard advanced to step %d", self.step)
        return True

    def previous_step(self) -> bool:
        if self.step == Step.CLIENT_PROPERTY:
            return False
        self.step = Step(self.step - 1)
        return True

    # finalization

    def build_request(self) -> CreateSimulationRequest:
        totals = self.totals
        discount = parse_decimal(self.state.discount_rate)
        return CreateSimulationRequest(
            customer_id=self.state.customer_id,
            property_id=self.state.property_id or None,
            institution_id=self.state.institution_id,
            loan_program_id=self.program_id or "",
            parameters=LoanParameters(
                property_price=Money.pen(totals.property_price),
                initial_down_payment=Money.pen(totals.total_initial_payment),
                loan_amount=Money.pen(totals.loan_amount),
                term_in_months=parse_int(self.state.term_in_months) or 0,
                interest_rate=InterestRate(
                    rate=(parse_decimal(self.state.interest_rate) or Decimal("0")) / HUNDRED,
                    type=self.state.rate_type,
                    capitalization_period=None,
                ),
                grace_period=GracePeriod(
                    duration_in_months=max(0, parse_int(self.state.grace_period_months) or 0),
                    type=self.state.grace_type,
                ),
                discount_rate=discount / HUNDRED if discount is not None else None,
            ),
        )

    def generate(self) -> Optional[LoanSimulation]:
        """Replace the current simulation with a fresh one for the form values."""
        if not self.can_generate or self.program_id is None:
            self._notify("error", "generate_blocked")
            return None
        request = self.build_request()
        if self.generated is not None and not self.generated_discarded:
            try:
                self.gateway.delete_simulation(self.generated.id)
            except GatewayError as exc:
                self._notify("error", "generate_failed", description=str(exc))
                return None
            self.generated_discarded = True
        try:
            simulation = self.gateway.create_simulation(request)
        except GatewayError as exc:
            self._notify("error", "generate_failed", description=str(exc))
            return None
        self.generated = simulation
        self.generated_discarded = False
        self.form_modified = False
        self.step = Step.RESULTS
        tcea = simulation.payment_plan.tcea if simulation.payment_plan else None
        self._notify(
            "success",
            "generate_ok",
            description=t("generate_ok_detail", self.lang, tcea=format_percent(tcea)),
        )
        return simulation

    def save(self) -> bool:
        if self.generated is None or self.generated_discarded:
            self._notify("error", "save_missing")
            return False
        try:
            self.gateway.save_simulation(self.generated.id)
        except GatewayError as exc:
            self._notify("error", "save_failed", description=str(exc))
            return False
        logger.info("Simulation %s saved", self.generated.id)
        self._notify("success", "save_ok")
        self._finish()
        return True

    def cancel(self) -> bool:
        """Leave the wizard, finalizing a generated simulation per cancel policy."""
        if self.generated is not None and not self.generated_discarded:
            try:
                if self.settings.CANCEL_POLICY == "discard":
                    self.gateway.delete_simulation(self.generated.id)
                else:
                    self.gateway.save_simulation(self.generated.id)
            except GatewayError as exc:
                self._notify("error", "cancel_failed", description=str(exc))
                return False
        self._finish()
        return True

    def _finish(self) -> None:
        self.reset()
        self.destination = SIMULATIONS_PAGE
