import streamlit as st

from core.i18n import t
from myhome.models import GraceType
from ui.components import option_index


def render_term_grace(controller):
    lang = controller.lang
    state = controller.state
    c1, c2, c3 = st.columns(3)

    term = c1.text_input(t("label_term", lang), value=state.term_in_months)
    if term != state.term_in_months:
        controller.update_field("term_in_months", term)
    check = controller.check_step(controller.step)
    if state.term_in_months and not check.passed:
        c1.error(check.message)

    months = c2.text_input(t("label_grace_months", lang), value=state.grace_period_months)
    if months != state.grace_period_months:
        controller.update_field("grace_period_months", months)

    types = [g.value for g in GraceType]
    grace = c3.selectbox(t("label_grace_type", lang), types, index=option_index(types, state.grace_type.value))
    if grace != state.grace_type.value:
        controller.update_field("grace_type", grace)
