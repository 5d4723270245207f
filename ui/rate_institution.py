import streamlit as st

from core.i18n import t
from core.utils import format_percent
from myhome.models import RateType
from ui.components import option_index


def render_rate_institution(controller):
    lang = controller.lang
    state = controller.state
    rng = controller.rate_range

    if rng is not None:
        st.info(t("label_rate_range", lang, min_rate=rng.min_rate, max_rate=rng.max_rate) + (f" - {rng.message}" if rng.message else ""))

    c1, c2, c3 = st.columns(3)
    raw = c1.text_input(t("label_interest_rate", lang), value=state.interest_rate)
    if raw != state.interest_rate:
        controller.set_interest_rate(raw)
        st.rerun()
    if state.interest_rate and rng is not None and not controller.rate_in_range:
        c1.error(t("rate_out_of_range", lang, min_rate=rng.min_rate, max_rate=rng.max_rate))

    types = [r.value for r in RateType]
    rate_type = c2.selectbox(t("label_rate_type", lang), types, index=option_index(types, state.rate_type.value))
    if rate_type != state.rate_type.value:
        controller.update_field("rate_type", rate_type)

    discount = c3.text_input(t("label_discount_rate", lang), value=state.discount_rate)
    if discount != state.discount_rate:
        controller.update_field("discount_rate", discount)

    offers = controller.filtered_institutions
    if state.interest_rate and not offers:
        st.caption(t("label_no_institutions", lang))
    labels = {o.institution_id: o.institution_name for o in offers}
    if state.institution_id and state.institution_id not in labels:
        labels[state.institution_id] = next(
            (i.name for i in controller.institutions if i.id == state.institution_id), state.institution_id
        )
    options = [""] + list(labels)
    choice = st.selectbox(
        t("label_institution", lang),
        options,
        index=option_index(options, state.institution_id),
        format_func=lambda iid: labels.get(iid, "-"),
    )
    if choice != state.institution_id:
        controller.select_institution(choice)
        st.rerun()

    detail = controller.selected_institution_rate
    if detail is not None:
        d1, d2, d3 = st.columns(3)
        d1.metric("Tasa mínima", format_percent(detail.min_rate))
        d2.metric("Tasa máxima", format_percent(detail.max_rate))
        d3.metric("Seguro", format_percent(detail.insurance_rate, 4))
