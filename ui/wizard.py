import streamlit as st

from core.rules import Step
from ui.bottombar import render_bottombar
from ui.client_property import render_client_property
from ui.components import render_notices
from ui.initial_payment import render_initial_payment
from ui.rate_institution import render_rate_institution
from ui.results import render_results
from ui.term_grace import render_term_grace
from ui.topbar import render_topbar

PAGES = {
    Step.CLIENT_PROPERTY: render_client_property,
    Step.INITIAL_PAYMENT: render_initial_payment,
    Step.RATE_INSTITUTION: render_rate_institution,
    Step.TERM_GRACE: render_term_grace,
    Step.RESULTS: render_results,
}


def render_wizard(controller):
    if not controller.catalogs_loaded:
        with st.spinner():
            controller.load_catalogs()
    render_topbar(controller)
    render_notices(controller)
    PAGES[controller.step](controller)
    render_bottombar(controller)
