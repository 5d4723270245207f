import streamlit as st

from core.i18n import t
from core.rules import Step
from myhome import __version__
from myhome.presets import STEP_KEYS


def render_topbar(controller):
    """Title, program badge and the step indicator."""
    lang = controller.lang
    left, right = st.columns([3, 1])
    with left:
        st.markdown(f"### {t('app_title', lang)}")
        if controller.program is not None:
            st.caption(f"{controller.program.name}  |  v{__version__}")
    with right:
        if st.button(t("btn_cancel", lang), key="wizard_cancel"):
            if controller.cancel():
                st.rerun()
    cols = st.columns(len(Step))
    for col, step in zip(cols, Step):
        label = f"{step.value}. {t(STEP_KEYS[step.value], lang)}"
        if step == controller.step:
            col.markdown(f"**▶ {label}**")
        elif step < controller.step:
            col.markdown(f"✓ {label}")
        else:
            col.markdown(f"<span style='color:#999'>{label}</span>", unsafe_allow_html=True)
    st.progress((controller.step - 1) / (len(Step) - 1))
