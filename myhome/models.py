from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, model_validator
from pydantic.alias_generators import to_camel

from core.utils import parse_enum


class Currency(str, Enum):
    PEN = "PEN"
    USD = "USD"


class RateType(str, Enum):
    NOMINAL = "NOMINAL"
    EFFECTIVE = "EFFECTIVE"


class CapitalizationPeriod(str, Enum):
    DAILY = "DAILY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    BIMONTHLY = "BIMONTHLY"
    QUARTERLY = "QUARTERLY"
    SEMIANNUAL = "SEMIANNUAL"
    ANNUAL = "ANNUAL"


class GraceType(str, Enum):
    PARTIAL = "PARTIAL"
    TOTAL = "TOTAL"


class SimulationStatus(str, Enum):
    DRAFT = "DRAFT"
    SAVED = "SAVED"
    CONVERTED_TO_APPLICATION = "CONVERTED_TO_APPLICATION"
    EXPIRED = "EXPIRED"


class SubsidyType(str, Enum):
    BONO_BUEN_PAGADOR = "BONO_BUEN_PAGADOR"
    BFH_COMPRA = "BFH_COMPRA"
    BFH_CONSTRUCCION = "BFH_CONSTRUCCION"
    BFH_MEJORA = "BFH_MEJORA"
    BONO_INTEGRADOR = "BONO_INTEGRADOR"
    BONO_VERDE = "BONO_VERDE"


class LoanProgramName(str, Enum):
    NUEVO_CREDITO_MIVIVIENDA = "NUEVO_CREDITO_MIVIVIENDA"
    TECHO_PROPIO = "TECHO_PROPIO"


class CustomerStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class PropertyStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    SOLD = "SOLD"
    UNDER_CONSTRUCTION = "UNDER_CONSTRUCTION"
    INACTIVE = "INACTIVE"


class PropertyType(str, Enum):
    APARTMENT = "APARTMENT"
    HOUSE = "HOUSE"
    DUPLEX = "DUPLEX"
    PENTHOUSE = "PENTHOUSE"
    STUDIO = "STUDIO"
    LOFT = "LOFT"
    TOWNHOUSE = "TOWNHOUSE"


def lenient(enum_cls, fallback):
    return BeforeValidator(lambda raw: parse_enum(raw, enum_cls, fallback))


def _list_or_empty(raw):
    return raw or []


def _fill(data: dict, name: str, value) -> None:
    if name not in data and to_camel(name) not in data:
        data[name] = value


# Decimals travel as JSON numbers, not strings.
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ApiModel(BaseModel):
    """Base for payloads exchanged with the backend (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class Money(ApiModel):
    amount: Amount = Decimal("0")
    currency: Annotated[Currency, lenient(Currency, Currency.PEN)] = Currency.PEN

    @classmethod
    def pen(cls, amount: Decimal) -> "Money":
        return cls(amount=amount, currency=Currency.PEN)


class InterestRate(ApiModel):
    rate: Amount
    type: Annotated[RateType, lenient(RateType, RateType.EFFECTIVE)] = RateType.EFFECTIVE
    capitalization_period: Optional[CapitalizationPeriod] = None


class GracePeriod(ApiModel):
    duration_in_months: int = Field(0, ge=0)
    type: Annotated[GraceType, lenient(GraceType, GraceType.TOTAL)] = GraceType.TOTAL


class LoanParameters(ApiModel):
    property_price: Money
    initial_down_payment: Money
    loan_amount: Money
    term_in_months: int
    currency: Annotated[Currency, lenient(Currency, Currency.PEN)] = Currency.PEN
    interest_rate: InterestRate
    grace_period: GracePeriod = Field(default_factory=GracePeriod)
    discount_rate: Optional[Amount] = None


class CreateSimulationRequest(ApiModel):
    customer_id: str
    property_id: Optional[str] = None
    institution_id: str
    loan_program_id: str
    parameters: LoanParameters


class Installment(ApiModel):
    id: str = ""
    installment_number: int
    due_date: str = ""
    initial_balance: Money = Field(default_factory=Money)
    interest: Money = Field(default_factory=Money)
    amortization: Money = Field(default_factory=Money)
    other_costs: Money = Field(default_factory=Money)
    total_payment: Money = Field(default_factory=Money)
    final_balance: Money = Field(default_factory=Money)


class PaymentPlan(ApiModel):
    id: str = ""
    simulation_id: str = ""
    tcea: float = 0.0
    van: Money = Field(default_factory=Money)
    tir: float = 0.0
    monthly_payment: Money = Field(default_factory=Money)
    installments: Annotated[List[Installment], BeforeValidator(_list_or_empty)] = Field(default_factory=list)

    @model_validator(mode="after")
    def _order_installments(self):
        self.installments.sort(key=lambda i: i.installment_number)
        return self


class SimulationSubsidy(ApiModel):
    id: str = ""
    subsidy_config_id: str = ""
    name: str = ""
    amount: Money = Field(default_factory=Money)
    simulation_id: str = ""


class LoanSimulation(ApiModel):
    id: str
    customer_id: str
    property_id: Optional[str] = None
    institution_id: str = ""
    loan_program_id: str = ""
    simulation_date: str = ""
    expires_at: str = ""
    status: Annotated[SimulationStatus, lenient(SimulationStatus, SimulationStatus.DRAFT)] = SimulationStatus.DRAFT
    parameters: Optional[LoanParameters] = None
    payment_plan: Optional[PaymentPlan] = None
    subsidies: Annotated[List[SimulationSubsidy], BeforeValidator(_list_or_empty)] = Field(default_factory=list)


class Bono(ApiModel):
    type: Annotated[SubsidyType, lenient(SubsidyType, SubsidyType.BONO_BUEN_PAGADOR)]
    eligible: bool = False
    amount: Optional[Amount] = None
    currency: Optional[str] = None
    reason: Optional[str] = None
    failure_reason: Optional[str] = None
    price_range: Optional[str] = None


class ProgramEligibility(ApiModel):
    eligible: bool = False
    reasons: Annotated[List[str], BeforeValidator(_list_or_empty)] = Field(default_factory=list)
    failure_reasons: Annotated[List[str], BeforeValidator(_list_or_empty)] = Field(default_factory=list)
    available_bonos: Annotated[List[Bono], BeforeValidator(_list_or_empty)] = Field(default_factory=list)

    @property
    def explanations(self) -> List[str]:
        return self.reasons if self.eligible else self.failure_reasons

    def eligible_bonos(self) -> List[Bono]:
        return [b for b in self.available_bonos if b.eligible]


class TechoPropioEligibility(ProgramEligibility):
    modalidad: Optional[str] = None


class EligibilitySnapshot(ApiModel):
    """Eligibility verdicts for one customer/property pair."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    customer_id: str = ""
    property_id: str = ""
    mivivienda: ProgramEligibility = Field(default_factory=ProgramEligibility)
    techo_propio: TechoPropioEligibility = Field(default_factory=TechoPropioEligibility)

    def bono(self, subsidy: SubsidyType) -> Optional[Bono]:
        for b in self.mivivienda.available_bonos:
            if b.type == subsidy:
                return b
        return None


class Customer(ApiModel):
    id: str
    status: Annotated[CustomerStatus, lenient(CustomerStatus, CustomerStatus.ACTIVE)] = CustomerStatus.ACTIVE
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    email: str = ""
    phone_number: str = ""
    monthly_income_amount: float = 0.0
    monthly_income_currency: str = "PEN"
    monthly_expenses_amount: float = 0.0
    net_income: float = 0.0
    credit_score: Optional[int] = None
    is_eligible_for_loan: bool = False

    @property
    def display_name(self) -> str:
        return self.full_name or f"{self.first_name} {self.last_name}".strip() or self.id


class Property(ApiModel):
    """Property listing flattened from the nested backend document."""

    id: str
    property_code: str = ""
    status: Annotated[PropertyStatus, lenient(PropertyStatus, PropertyStatus.AVAILABLE)] = PropertyStatus.AVAILABLE
    property_type: Annotated[PropertyType, lenient(PropertyType, PropertyType.APARTMENT)] = PropertyType.APARTMENT
    bedrooms: int = 0
    bathrooms: int = 0
    address: str = ""
    price_amount: Amount = Decimal("0")
    price_currency: str = "PEN"
    eco_certified: bool = False

    @model_validator(mode="before")
    @classmethod
    def _flatten(cls, data: Any):
        if not isinstance(data, dict):
            return data
        data = {k: v for k, v in data.items() if v is not None}
        characteristics = data.get("characteristics") or {}
        list_price = ((data.get("pricing") or {}).get("listPrice") or {}).get("amount") or {}
        location = data.get("location") or {}
        sustainability = data.get("sustainability") or {}
        _fill(data, "bedrooms", characteristics.get("bedrooms") or 0)
        _fill(data, "bathrooms", characteristics.get("bathrooms") or 0)
        _fill(data, "price_amount", list_price.get("amount") or 0)
        _fill(data, "price_currency", list_price.get("currency") or "PEN")
        _fill(data, "eco_certified", bool(sustainability.get("hasCertification")))
        if location:
            parts = [location.get("address"), location.get("district"), location.get("province")]
            _fill(data, "address", ", ".join(p for p in parts if isinstance(p, str) and p))
        return data

    @property
    def label(self) -> str:
        return f"{self.property_code or self.id} - {self.property_type.value}"


class LoanProgram(ApiModel):
    id: str
    name: str = ""
    description: str = ""

    @property
    def program(self) -> LoanProgramName:
        return parse_enum(self.name, LoanProgramName, LoanProgramName.NUEVO_CREDITO_MIVIVIENDA)


class FinancialInstitution(ApiModel):
    id: str
    name: str = ""
    is_active: bool = True


class RateRange(ApiModel):
    min_rate: Amount
    max_rate: Amount
    message: str = ""

    def contains(self, rate: Decimal) -> bool:
        return self.min_rate <= rate <= self.max_rate


class InstitutionRate(ApiModel):
    institution_id: str
    institution_name: str = ""
    min_rate: Amount = Decimal("0")
    max_rate: Amount = Decimal("0")
    insurance_rate: float = 0.0
    offers_requested_rate: bool = False
