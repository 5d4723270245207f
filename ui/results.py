import streamlit as st

from core.i18n import t
from core.utils import format_currency, format_percent
from export.pdf_export import build_simulation_pdf
from myhome.calculators import schedule_frame


def render_plan_summary(plan, lang: str):
    cols = st.columns(4)
    cols[0].metric(t("label_monthly_payment", lang), format_currency(plan.monthly_payment.amount))
    cols[1].metric(t("label_tcea", lang), format_percent(plan.tcea))
    cols[2].metric(t("label_tir", lang), format_percent(plan.tir))
    cols[3].metric(t("label_van", lang), format_currency(plan.van.amount))


def render_schedule(plan, lang: str):
    st.markdown(f"**{t('label_schedule', lang)}**")
    df = schedule_frame(plan)
    st.dataframe(df, use_container_width=True, hide_index=True)


def pdf_button(simulation, lang: str, customer=None, property_=None, institution_name: str = "", key: str = "pdf"):
    if simulation.payment_plan is None:
        return
    st.download_button(
        t("btn_download_pdf", lang),
        data=build_simulation_pdf(simulation, customer, property_, institution_name),
        file_name=f"simulacion_{simulation.id}.pdf",
        mime="application/pdf",
        key=key,
    )


def render_results(controller):
    lang = controller.lang
    simulation = controller.generated
    if simulation is None or simulation.payment_plan is None:
        st.info(t("generate_first", lang))
        return
    plan = simulation.payment_plan
    render_plan_summary(plan, lang)
    institution = next((i.name for i in controller.institutions if i.id == simulation.institution_id), "")
    pdf_button(simulation, lang, controller.current_customer, controller.current_property, institution, key="results_pdf")
    render_schedule(plan, lang)
