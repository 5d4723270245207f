import streamlit as st

from core.i18n import t
from core.utils import format_currency
from core.wizard import filter_customers, filter_properties
from myhome.presets import SUBSIDY_LABELS
from ui.components import option_index


def render_client_property(controller):
    lang = controller.lang
    state = controller.state

    c1, c2 = st.columns(2)
    with c1:
        query = st.text_input(t("label_customer_search", lang))
        customers = filter_customers(controller.customers, query)
        labels = {c.id: _customer_label(c) for c in customers}
        current = controller.current_customer
        if state.customer_id and state.customer_id not in labels:
            labels[state.customer_id] = _customer_label(current) if current else state.customer_id
        options = [""] + list(labels)
        choice = st.selectbox(
            t("label_customer", lang),
            options,
            index=option_index(options, state.customer_id),
            format_func=lambda cid: labels.get(cid, "-"),
        )
        if choice != state.customer_id:
            controller.select_customer(choice)
            st.rerun()
        customer = controller.current_customer
        if customer is not None:
            st.caption(
                f"{customer.email}  |  {customer.phone_number}  |  "
                f"{format_currency(customer.monthly_income_amount, customer.monthly_income_currency)}"
            )
    with c2:
        query = st.text_input(t("label_property_search", lang))
        eco = st.checkbox(t("label_eco_only", lang))
        properties = filter_properties(controller.properties, query, eco)
        labels = {p.id: _property_label(p) for p in properties}
        current = controller.current_property
        if state.property_id and state.property_id not in labels:
            labels[state.property_id] = _property_label(current) if current else state.property_id
        options = [""] + list(labels)
        choice = st.selectbox(
            t("label_property", lang),
            options,
            index=option_index(options, state.property_id),
            format_func=lambda pid: labels.get(pid, "-"),
            disabled=not state.customer_id,
        )
        if choice != state.property_id:
            with st.spinner():
                controller.choose_property(choice)
            st.rerun()

    if state.customer_id and state.property_id:
        _render_eligibility(controller)


def _customer_label(customer):
    return f"{customer.display_name} ({customer.email or customer.phone_number or customer.id})"


def _property_label(prop):
    return f"{prop.label} - {format_currency(prop.price_amount, prop.price_currency)}"


def _render_eligibility(controller):
    lang = controller.lang
    snapshot = controller.snapshot
    if snapshot is None:
        if st.button(t("btn_retry", lang)):
            controller.retry_eligibility()
            st.rerun()
        return
    for name, verdict in (("MiVivienda", snapshot.mivivienda), ("Techo Propio", snapshot.techo_propio)):
        status = t("label_eligible" if verdict.eligible else "label_not_eligible", lang)
        with st.expander(f"{name}: {status}", expanded=name == "MiVivienda"):
            for line in verdict.explanations:
                st.write(f"- {line}")
            for bono in verdict.available_bonos:
                amount = format_currency(bono.amount) if bono.amount is not None else "-"
                mark = "✓" if bono.eligible else "✗"
                detail = bono.reason if bono.eligible else bono.failure_reason
                st.write(f"{mark} {SUBSIDY_LABELS.get(bono.type.value, bono.type.value)}: {amount} {detail or ''}")
