from decimal import Decimal

from myhome.models import (
    CreateSimulationRequest,
    EligibilitySnapshot,
    LoanSimulation,
    Money,
    Property,
    PropertyType,
    SimulationStatus,
    SubsidyType,
)


def test_property_flattens_backend_document():
    prop = Property.model_validate(
        {
            "id": "P9",
            "propertyCode": "DEP-9",
            "propertyType": "house",
            "status": "SOLD",
            "characteristics": {"bedrooms": 3, "bathrooms": 2},
            "pricing": {"listPrice": {"amount": {"amount": 285000.5, "currency": "PEN"}}},
            "location": {"address": "Av. Arequipa 123", "district": "Lince"},
            "sustainability": {"hasCertification": True},
        }
    )
    assert prop.price_amount == Decimal("285000.5")
    assert prop.property_type == PropertyType.HOUSE
    assert prop.bedrooms == 3
    assert prop.eco_certified
    assert prop.address == "Av. Arequipa 123, Lince"


def test_property_without_pricing_defaults_to_zero():
    prop = Property.model_validate({"id": "P0", "pricing": None, "propertyType": "CASTLE"})
    assert prop.price_amount == Decimal("0")
    assert prop.property_type == PropertyType.APARTMENT


def test_money_serializes_as_numbers():
    assert Money.pen(Decimal("10.50")).to_payload() == {"amount": 10.5, "currency": "PEN"}


def test_snapshot_null_lists_become_empty():
    snap = EligibilitySnapshot.model_validate(
        {
            "customerId": "C1",
            "propertyId": "P1",
            "mivivienda": {"eligible": True, "reasons": None, "failureReasons": None, "availableBonos": None},
            "techoPropio": {"eligible": False, "failureReasons": ["Ingreso alto"], "modalidad": "COMPRA"},
        }
    )
    assert snap.mivivienda.available_bonos == []
    assert snap.techo_propio.explanations == ["Ingreso alto"]
    assert snap.techo_propio.modalidad == "COMPRA"


def test_snapshot_bono_lookup_and_unknown_type():
    snap = EligibilitySnapshot.model_validate(
        {"mivivienda": {"availableBonos": [{"type": "bono_verde", "eligible": True, "amount": 5000}]}}
    )
    assert snap.bono(SubsidyType.BONO_VERDE).amount == Decimal("5000")
    assert snap.bono(SubsidyType.BFH_MEJORA) is None


def test_simulation_status_fallback():
    sim = LoanSimulation.model_validate({"id": "S1", "customerId": "C1", "status": "PENDING", "subsidies": None})
    assert sim.status == SimulationStatus.DRAFT
    assert sim.subsidies == []


def test_request_uses_camel_case():
    request = CreateSimulationRequest.model_validate(
        {
            "customerId": "C1",
            "institutionId": "I1",
            "loanProgramId": "LP1",
            "parameters": {
                "propertyPrice": {"amount": 1},
                "initialDownPayment": {"amount": 1},
                "loanAmount": {"amount": 0},
                "termInMonths": 60,
                "interestRate": {"rate": 0.08},
            },
        }
    )
    payload = request.to_payload()
    assert payload["propertyId"] is None
    assert payload["parameters"]["termInMonths"] == 60
    assert payload["parameters"]["interestRate"]["type"] == "EFFECTIVE"
