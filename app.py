import streamlit as st

from core.config import get_settings
from core.exceptions import ConfigurationError
from core.i18n import t
from core.integrations import BackendGateway
from core.logging import get_logger, setup_logging
from core.state import SessionStore
from core.wizard import SIMULATIONS_PAGE, WizardController
from ui.components import render_notices
from ui.simulations import render_simulation_detail, render_simulation_list
from ui.wizard import render_wizard

WIZARD_PAGE = "wizard"

st.set_page_config(page_title="MiVivienda - Simulador de crédito", layout="wide")

try:
    settings = get_settings()
except ConfigurationError as exc:
    st.error(f"Configuración inválida: {exc}")
    st.stop()

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
logger = get_logger(__name__)
lang = settings.LANGUAGE


@st.cache_resource
def get_gateway():
    logger.info("Connecting to %s", settings.API_BASE_URL)
    return BackendGateway.from_settings(settings, SessionStore(settings.SESSION_FILE))


def init_state():
    ss = st.session_state
    if "gateway" not in ss:
        ss["gateway"] = get_gateway()
    if "wizard" not in ss:
        ss["wizard"] = WizardController(ss["gateway"], settings)
    ss.setdefault("page", WIZARD_PAGE)
    ss.setdefault("simulation_id", None)


init_state()
controller = st.session_state["wizard"]

# The controller asks for navigation after save/cancel.
if controller.destination == SIMULATIONS_PAGE:
    st.session_state["page"] = SIMULATIONS_PAGE
    controller.destination = None

pages = [WIZARD_PAGE, SIMULATIONS_PAGE]
labels = {WIZARD_PAGE: t("nav_new_simulation", lang), SIMULATIONS_PAGE: t("nav_simulations", lang)}
nav = st.sidebar.radio(
    "Menu",
    pages,
    index=pages.index(st.session_state["page"]),
    format_func=lambda p: labels[p],
)
if nav != st.session_state["page"]:
    st.session_state["page"] = nav
    st.session_state["simulation_id"] = None

if st.session_state["page"] == WIZARD_PAGE:
    render_wizard(controller)
else:
    st.title(t("nav_simulations", lang))
    render_notices(controller)
    if not controller.catalogs_loaded:
        controller.load_catalogs()
    customer_names = {c.id: c.display_name for c in controller.customers}
    institution_names = {i.id: i.name for i in controller.institutions}
    if st.session_state["simulation_id"]:
        if st.button(t("btn_back_to_list", lang)):
            st.session_state["simulation_id"] = None
            st.rerun()
        render_simulation_detail(
            controller.gateway,
            st.session_state["simulation_id"],
            lang,
            controller.customers,
            controller.properties,
            controller.institutions,
        )
    else:
        picked = render_simulation_list(controller.gateway, lang, customer_names, institution_names)
        if picked:
            st.session_state["simulation_id"] = picked
            st.rerun()
