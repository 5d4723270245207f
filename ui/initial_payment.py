import streamlit as st

from core.i18n import t
from core.utils import format_currency
from myhome.calculators import minimum_down_payment
from myhome.presets import SUBSIDY_LABELS


def render_initial_payment(controller):
    lang = controller.lang
    state = controller.state
    pct = controller.settings.MIN_DOWN_PAYMENT_PCT

    raw = st.text_input(t("label_contribution", lang), value=state.user_contribution)
    if raw != state.user_contribution:
        controller.update_field("user_contribution", raw)

    minimum = minimum_down_payment(controller.property_price, pct)
    st.caption(
        t("label_min_down_payment", lang, pct=f"{(pct * 100).normalize():f}", amount=format_currency(minimum))
    )

    st.markdown(f"**{t('label_bonos', lang)}**")
    bonos = controller.snapshot.mivivienda.eligible_bonos() if controller.snapshot else []
    for bono in bonos:
        amount = format_currency(bono.amount) if bono.amount is not None else "-"
        st.checkbox(
            f"{SUBSIDY_LABELS.get(bono.type.value, bono.type.value)}: {amount}",
            value=bool(state.selected_bonos.get(bono.type)),
            disabled=True,
            key=f"bono_{bono.type.value}",
        )
