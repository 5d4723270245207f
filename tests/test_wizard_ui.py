from streamlit.testing.v1 import AppTest

from conftest import make_simulation
from ui.simulations import filter_simulations


def wizard_app():
    import streamlit as st
    from ui.wizard import render_wizard

    render_wizard(st.session_state["wizard"])


def simulations_app():
    import streamlit as st
    from ui.simulations import render_simulation_list

    render_simulation_list(st.session_state["gateway"], "es", {"C1": "Ana Torres"}, {"I1": "BCP"})


def client_property_app():
    import streamlit as st
    from ui.client_property import render_client_property

    render_client_property(st.session_state["wizard"])


def _widget(widgets, label):
    return next(w for w in widgets if w.label == label)


def test_step_one_selects_customer_and_property(controller):
    at = AppTest.from_function(wizard_app, default_timeout=10)
    at.session_state["wizard"] = controller
    at.run()
    assert not at.exception

    _widget(at.selectbox, "Cliente").set_value("C1").run()
    assert controller.state.customer_id == "C1"

    _widget(at.selectbox, "Propiedad").set_value("P1").run()
    assert controller.state.property_id == "P1"
    assert controller.snapshot is not None
    assert not at.exception


def test_search_filters_keep_current_selection(controller):
    controller.select_customer("C1")
    controller.choose_property("P1")
    at = AppTest.from_function(client_property_app, default_timeout=10)
    at.session_state["wizard"] = controller
    at.run()
    assert not at.exception

    _widget(at.text_input, "Buscar cliente").input("luis").run()
    _widget(at.checkbox, "Solo propiedades eco-certificadas").check().run()
    assert not at.exception
    assert controller.state.customer_id == "C1"
    assert controller.state.property_id == "P1"
    assert controller.snapshot is not None
    assert _widget(at.selectbox, "Cliente").value == "C1"
    assert _widget(at.selectbox, "Propiedad").value == "P1"


def test_next_blocked_shows_guard_message(controller):
    at = AppTest.from_function(wizard_app, default_timeout=10)
    at.session_state["wizard"] = controller
    at.run()
    _widget(at.button, "Siguiente").click().run()
    assert controller.step == 1
    assert at.error[0].value == "Selecciona un cliente"


def test_results_step_shows_plan(ready_controller):
    ready_controller.generate()
    at = AppTest.from_function(wizard_app, default_timeout=10)
    at.session_state["wizard"] = ready_controller
    at.run()
    assert not at.exception
    assert at.success[0].value == "Crédito generado exitosamente: TCEA: 9.87%"
    values = {m.label: m.value for m in at.metric}
    assert values["TCEA"] == "9.87%"
    assert values["Cuota mensual"] == "S/ 2,200.00"
    assert values["Monto a financiar"] == "S/ 270,000.00"


def test_simulation_list_counts_saved(gateway):
    gateway.simulations = [make_simulation("S1", status="SAVED"), make_simulation("S2")]
    at = AppTest.from_function(simulations_app, default_timeout=10)
    at.session_state["gateway"] = gateway
    at.run()
    assert not at.exception
    assert any(c.value == "1 guardadas de 2 simulaciones" for c in at.caption)
    assert len(at.dataframe) == 1


def test_filter_simulations_matches_names():
    sims = [make_simulation("S1", status="SAVED"), make_simulation("S2", status="SAVED"), make_simulation("S3")]
    assert [s.id for s in filter_simulations(sims, "ana", {"C1": "Ana Torres"})] == ["S1", "S2"]
    assert [s.id for s in filter_simulations(sims, "s2")] == ["S2"]
    assert [s.id for s in filter_simulations(sims, "bcp", institution_names={"I1": "BCP"})] == ["S1", "S2"]
    assert filter_simulations(sims, "zzz") == []
