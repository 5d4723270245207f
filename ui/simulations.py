import streamlit as st

from core.exceptions import GatewayError
from core.i18n import t
from core.utils import format_currency, format_date
from myhome.calculators import simulations_frame
from myhome.models import LoanSimulation, SimulationStatus
from ui.results import pdf_button, render_plan_summary, render_schedule


def filter_simulations(simulations, query: str, customer_names=None, institution_names=None):
    """Saved simulations whose id, customer, property or institution match ``query``."""
    customer_names = customer_names or {}
    institution_names = institution_names or {}
    q = (query or "").strip().lower()
    result = []
    for sim in simulations:
        if sim.status != SimulationStatus.SAVED:
            continue
        haystack = " ".join(
            [
                sim.id,
                sim.customer_id,
                customer_names.get(sim.customer_id, ""),
                sim.property_id or "",
                sim.institution_id,
                institution_names.get(sim.institution_id, ""),
            ]
        ).lower()
        if not q or q in haystack:
            result.append(sim)
    return result


def render_simulation_list(gateway, lang: str, customer_names=None, institution_names=None):
    """Saved simulations table; returns the id picked for the detail view."""
    try:
        simulations = gateway.get_simulations()
    except GatewayError as exc:
        st.error(f"{t('load_simulations_failed', lang)}: {exc}")
        return None
    query = st.text_input(t("label_search_simulations", lang))
    saved = filter_simulations(simulations, query, customer_names, institution_names)
    total_saved = sum(1 for s in simulations if s.status == SimulationStatus.SAVED)
    st.caption(t("label_simulations_count", lang, saved=total_saved, total=len(simulations)))
    if not saved:
        st.info(t("label_no_simulations", lang))
        return None
    st.dataframe(
        simulations_frame(saved, customer_names, institution_names),
        use_container_width=True,
        hide_index=True,
    )
    ids = [s.id for s in saved]
    choice = st.selectbox(t("btn_view", lang), [""] + ids)
    return choice or None


def render_simulation_detail(gateway, simulation_id: str, lang: str, customers=None, properties=None, institutions=None):
    try:
        simulation: LoanSimulation = gateway.get_simulation(simulation_id)
    except GatewayError as exc:
        st.error(f"{t('load_simulation_failed', lang)}: {exc}")
        return
    customer = next((c for c in customers or [] if c.id == simulation.customer_id), None)
    property_ = next((p for p in properties or [] if p.id == simulation.property_id), None)
    institution = next((i.name for i in institutions or [] if i.id == simulation.institution_id), "")

    st.markdown(f"#### {simulation.id}")
    st.caption(f"{simulation.status.value}  |  {format_date(simulation.simulation_date)}  |  {institution}")
    if simulation.payment_plan is not None:
        render_plan_summary(simulation.payment_plan, lang)

    c1, c2 = st.columns(2)
    with c1:
        st.markdown(f"**{t('label_customer', lang)}**")
        if customer is not None:
            st.write(customer.display_name)
            st.caption(f"{customer.email}  |  {customer.phone_number}")
        else:
            st.write(simulation.customer_id)
    with c2:
        st.markdown(f"**{t('label_property', lang)}**")
        if property_ is not None:
            st.write(property_.label)
            st.caption(format_currency(property_.price_amount, property_.price_currency))
        else:
            st.write(simulation.property_id or "-")

    if simulation.payment_plan is not None:
        pdf_button(simulation, lang, customer, property_, institution, key="detail_pdf")
        render_schedule(simulation.payment_plan, lang)
