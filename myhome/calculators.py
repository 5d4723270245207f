from __future__ import annotations

from decimal import ROUND_UP, Decimal
from typing import Dict, Iterable, Mapping, Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict

from core.utils import parse_decimal, to_cents
from myhome.models import EligibilitySnapshot, LoanSimulation, PaymentPlan, SubsidyType
from myhome.presets import CENT, MIN_DOWN_PAYMENT_PCT

ZERO = Decimal("0")


def nz(x, default: Decimal = ZERO) -> Decimal:
    """Return a non-negative ``Decimal`` for free-text form input.

    The contribution field is typed by hand, so empty or garbled text is
    treated as nothing contributed rather than an error.
    """

    value = parse_decimal(x)
    if value is None:
        return default
    return max(value, ZERO)


class DerivedTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_contribution: Decimal = ZERO
    total_bonos: Decimal = ZERO
    total_initial_payment: Decimal = ZERO
    property_price: Decimal = ZERO
    loan_amount: Decimal = ZERO


def bono_total(
    selected_bonos: Mapping[SubsidyType, bool],
    snapshot: Optional[EligibilitySnapshot],
) -> Decimal:
    """Sum the MiVivienda bonos that are eligible, selected and priced."""
    if snapshot is None:
        return ZERO
    total = ZERO
    for bono in snapshot.mivivienda.available_bonos:
        if bono.eligible and selected_bonos.get(bono.type) and bono.amount is not None:
            total += bono.amount
    return total


def compute_totals(
    user_contribution,
    selected_bonos: Mapping[SubsidyType, bool],
    snapshot: Optional[EligibilitySnapshot],
    property_price,
) -> DerivedTotals:
    contribution = nz(user_contribution)
    bonos = bono_total(selected_bonos, snapshot)
    price = nz(property_price)
    initial = contribution + bonos
    return DerivedTotals(
        user_contribution=contribution,
        total_bonos=bonos,
        total_initial_payment=initial,
        property_price=price,
        loan_amount=max(ZERO, price - initial),
    )


def minimum_down_payment(property_price, pct: Decimal = MIN_DOWN_PAYMENT_PCT) -> Decimal:
    return to_cents(nz(property_price) * pct)


def down_payment_shortfall(totals: DerivedTotals, pct: Decimal = MIN_DOWN_PAYMENT_PCT) -> Decimal:
    """Amount still missing to reach the minimum down payment, rounded up to the cent."""
    missing = minimum_down_payment(totals.property_price, pct) - totals.total_initial_payment
    return max(ZERO, missing).quantize(CENT, rounding=ROUND_UP)


def schedule_frame(plan: Optional[PaymentPlan]) -> pd.DataFrame:
    """Installment schedule as a table ready for ``st.dataframe`` or PDF export."""
    columns = [
        "N°",
        "Fecha",
        "Saldo inicial",
        "Interés",
        "Amortización",
        "Otros costos",
        "Cuota total",
        "Saldo final",
    ]
    if plan is None or not plan.installments:
        return pd.DataFrame(columns=columns)
    rows = [
        {
            "N°": i.installment_number,
            "Fecha": i.due_date,
            "Saldo inicial": float(i.initial_balance.amount),
            "Interés": float(i.interest.amount),
            "Amortización": float(i.amortization.amount),
            "Otros costos": float(i.other_costs.amount),
            "Cuota total": float(i.total_payment.amount),
            "Saldo final": float(i.final_balance.amount),
        }
        for i in plan.installments
    ]
    return pd.DataFrame(rows, columns=columns)


def schedule_summary(plan: Optional[PaymentPlan]) -> Dict[str, float]:
    df = schedule_frame(plan)
    if df.empty:
        return {"interest": 0.0, "amortization": 0.0, "other_costs": 0.0, "total_paid": 0.0}
    return {
        "interest": float(df["Interés"].sum()),
        "amortization": float(df["Amortización"].sum()),
        "other_costs": float(df["Otros costos"].sum()),
        "total_paid": float(df["Cuota total"].sum()),
    }


def simulations_frame(
    simulations: Iterable[LoanSimulation],
    customer_names: Optional[Mapping[str, str]] = None,
    institution_names: Optional[Mapping[str, str]] = None,
) -> pd.DataFrame:
    customer_names = customer_names or {}
    institution_names = institution_names or {}
    columns = ["ID", "Cliente", "Propiedad", "Entidad", "Monto", "Plazo", "Cuota", "TCEA", "Estado", "Fecha"]
    rows = []
    for sim in simulations:
        params = sim.parameters
        plan = sim.payment_plan
        rows.append(
            {
                "ID": sim.id,
                "Cliente": customer_names.get(sim.customer_id, sim.customer_id),
                "Propiedad": sim.property_id or "-",
                "Entidad": institution_names.get(sim.institution_id, sim.institution_id),
                "Monto": float(params.loan_amount.amount) if params else 0.0,
                "Plazo": params.term_in_months if params else 0,
                "Cuota": float(plan.monthly_payment.amount) if plan else 0.0,
                "TCEA": plan.tcea if plan else 0.0,
                "Estado": sim.status.value,
                "Fecha": sim.simulation_date,
            }
        )
    return pd.DataFrame(rows, columns=columns)
