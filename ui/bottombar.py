import streamlit as st

from core.i18n import t
from core.rules import Step
from ui.components import money_metric


def render_bottombar(controller):
    """Running totals and the back/next/generate/save buttons."""
    lang = controller.lang
    totals = controller.totals
    st.divider()
    cols = st.columns(4)
    money_metric(cols[0], "label_property_price", totals.property_price, lang)
    money_metric(cols[1], "label_total_bonos", totals.total_bonos, lang)
    money_metric(cols[2], "label_initial_payment", totals.total_initial_payment, lang)
    money_metric(cols[3], "label_loan_amount", totals.loan_amount, lang)

    if controller.form_modified and controller.generated is not None:
        st.warning(t("label_modified", lang))

    back, generate, forward = st.columns(3)
    if back.button(t("btn_back", lang), disabled=controller.step == Step.CLIENT_PROPERTY, key="wizard_back"):
        controller.previous_step()
        st.rerun()
    if controller.step >= Step.TERM_GRACE:
        label = "btn_regenerate" if controller.generated is not None else "btn_generate"
        if generate.button(t(label, lang), disabled=not controller.can_generate, key="wizard_generate", type="primary"):
            controller.generate()
            st.rerun()
    if controller.step == Step.RESULTS:
        if forward.button(t("btn_save", lang), disabled=not controller.has_live_simulation, key="wizard_save"):
            controller.save()
            st.rerun()
    elif forward.button(t("btn_next", lang), key="wizard_next"):
        controller.next_step()
        st.rerun()
