import pathlib
import sys
from decimal import Decimal

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from core.config import Settings
from core.exceptions import ApiError
from core.wizard import WizardController
from myhome.models import (
    Bono,
    Customer,
    EligibilitySnapshot,
    FinancialInstitution,
    InstitutionRate,
    LoanProgram,
    LoanSimulation,
    PaymentPlan,
    ProgramEligibility,
    Property,
    RateRange,
    SubsidyType,
)


def make_snapshot(customer_id="C1", property_id="P1", eligible=True, bonos=None):
    if bonos is None:
        bonos = [Bono(type=SubsidyType.BONO_BUEN_PAGADOR, eligible=True, amount=Decimal("10000"))]
    return EligibilitySnapshot(
        customer_id=customer_id,
        property_id=property_id,
        mivivienda=ProgramEligibility(
            eligible=eligible,
            reasons=["Ingreso dentro del rango"] if eligible else [],
            failure_reasons=[] if eligible else ["Precio fuera del rango"],
            available_bonos=bonos,
        ),
    )


def make_simulation(sim_id="S1", tcea=9.87, status="DRAFT"):
    return LoanSimulation(
        id=sim_id,
        customer_id="C1",
        property_id="P1",
        institution_id="I1",
        loan_program_id="LP1",
        status=status,
        payment_plan=PaymentPlan(tcea=tcea, tir=0.8, monthly_payment={"amount": 2200}, van={"amount": 150}),
    )


class FakeGateway:
    """In-memory backend recording every call as ``(name, args)``."""

    def __init__(self):
        self.calls = []
        self.errors = {}
        self.customers = [
            Customer(id="C1", full_name="Ana Torres", email="ana@example.com", phone_number="999111222"),
            Customer(id="C2", full_name="Luis Ramos", email="luis@example.com", phone_number="988777666"),
        ]
        self.properties = [
            Property(id="P1", property_code="DEP-101", price_amount=Decimal("300000")),
            Property(id="P2", property_code="CASA-7", property_type="HOUSE", price_amount=Decimal("250000"), eco_certified=True),
        ]
        self.programs = [
            LoanProgram(id="LP2", name="TECHO_PROPIO"),
            LoanProgram(id="LP1", name="NUEVO_CREDITO_MIVIVIENDA"),
        ]
        self.institutions = [
            FinancialInstitution(id="I1", name="BCP"),
            FinancialInstitution(id="I2", name="BBVA"),
        ]
        self.rate_range = RateRange(min_rate=Decimal("6"), max_rate=Decimal("11"), message="")
        self.offers = [InstitutionRate(institution_id="I1", institution_name="BCP", min_rate=Decimal("7"), max_rate=Decimal("10"))]
        self.snapshots = {}
        self.created = []
        self.simulations = []

    def _call(self, name, *args):
        self.calls.append((name, args))
        if name in self.errors:
            raise self.errors[name]

    def names(self):
        return [name for name, _ in self.calls]

    def get_customers(self):
        self._call("get_customers")
        return list(self.customers)

    def get_customer_by_id(self, customer_id):
        self._call("get_customer_by_id", customer_id)
        return Customer(id=customer_id)

    def get_properties(self):
        self._call("get_properties")
        return list(self.properties)

    def get_property_by_id(self, property_id):
        self._call("get_property_by_id", property_id)
        return Property(id=property_id)

    def get_loan_programs(self):
        self._call("get_loan_programs")
        return list(self.programs)

    def get_institutions(self):
        self._call("get_institutions")
        return list(self.institutions)

    def get_rate_range(self, program_id):
        self._call("get_rate_range", program_id)
        return self.rate_range

    def search_institutions_offering_rate(self, program_id, rate):
        self._call("search_institutions_offering_rate", program_id, rate)
        return list(self.offers)

    def get_institution_rate(self, institution_id, program_id):
        self._call("get_institution_rate", institution_id, program_id)
        return InstitutionRate(institution_id=institution_id, institution_name="BCP", min_rate=Decimal("7"), max_rate=Decimal("10"))

    def validate_eligibility_with_property(self, customer_id, property_id):
        self._call("validate_eligibility_with_property", customer_id, property_id)
        return self.snapshots.get((customer_id, property_id)) or make_snapshot(customer_id, property_id)

    def create_simulation(self, request):
        self._call("create_simulation", request)
        self.created.append(request)
        return make_simulation(f"S{len(self.created)}")

    def get_simulations(self):
        self._call("get_simulations")
        return list(self.simulations)

    def get_simulation(self, simulation_id):
        self._call("get_simulation", simulation_id)
        for sim in self.simulations:
            if sim.id == simulation_id:
                return sim
        raise ApiError(404, "Simulación no encontrada")

    def delete_simulation(self, simulation_id):
        self._call("delete_simulation", simulation_id)

    def save_simulation(self, simulation_id):
        self._call("save_simulation", simulation_id)
        return None


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def controller(gateway, settings):
    ctrl = WizardController(gateway, settings)
    ctrl.load_catalogs()
    return ctrl


@pytest.fixture
def ready_controller(controller):
    """Controller with every step filled in for C1/P1 (300,000 PEN)."""
    controller.select_customer("C1")
    controller.choose_property("P1")
    controller.update_field("user_contribution", "20000")
    controller.set_interest_rate("8")
    controller.select_institution("I1")
    controller.update_field("term_in_months", "240")
    controller.drain_notices()
    return controller
