# app.py
import os, sys, re, uuid
import logging

# Asegura que la raíz del proyecto está en el path de importación
ROOT = os.path.dirname(__file__)
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import streamlit as st

from config import (
    APP_TITLE,
    LOG_LEVEL,
    OPENAI_API_KEY,
    STATE_DIR,
    SURVEY_DB_URL,
    WEBHOOK_URL,
    WEBHOOK_TIMEOUT,
)
from services import survey
from services.schema import SurveyState
from services.survey import SurveyError
from services.llm_client import LLMError, generate_question, generate_report
from services.storage import StateStore
from services.submission_log import log_submission
from services.webhook import send_lead
from components.ui import (
    render_contact_form,
    render_header,
    render_question,
    render_report,
    render_reset_footer,
    render_welcome,
)
from utils.logging_config import configure_logging

# ---------------------------------------------------------------------
# Página
# ---------------------------------------------------------------------
st.set_page_config(page_title=APP_TITLE, layout="centered")
configure_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

STATE_KEY = "survey_state"
FLASH_KEY = "flash"

store = StateStore(STATE_DIR)


# ---------------------------------------------------------------------
# Sesión y persistencia
# ---------------------------------------------------------------------
def _session_id() -> str:
    """Id estable por navegador vía ?sid=..., como el localStorage original."""
    sid = st.query_params.get("sid")
    if not sid or not re.match(r"^[A-Za-z0-9_-]{1,64}$", sid):
        sid = uuid.uuid4().hex
        st.query_params["sid"] = sid
    return sid

def _get_state(sid: str) -> SurveyState:
    if STATE_KEY not in st.session_state:
        st.session_state[STATE_KEY] = store.load(sid) or survey.new_state()
    return st.session_state[STATE_KEY]

def _flash(kind: str, msg: str):
    st.session_state[FLASH_KEY] = (kind, msg)

def _show_flash():
    kind, msg = st.session_state.pop(FLASH_KEY, (None, None))
    if kind == "error":
        st.error(msg)
    elif kind == "success":
        st.success(msg)

def _reset(sid: str):
    store.clear(sid)
    st.session_state[STATE_KEY] = survey.reset()
    _flash("success", "Diagnóstico reiniciado. Puedes volver a empezar desde el principio.")
    st.rerun()


# ---------------------------------------------------------------------
# Pasos
# ---------------------------------------------------------------------
def _ask_ai(sid: str, state: SurveyState, phase: str):
    with st.spinner("La IA está buscando la mejor pregunta para ti..."):
        try:
            survey.advance_with_ai(state, phase, generate_question)
        except (LLMError, SurveyError) as e:
            logger.error("No se pudo obtener la siguiente pregunta (fase %s): %s", phase, e)
            _flash("error", str(e) if isinstance(e, SurveyError) else
                   "No se pudo obtener la siguiente pregunta. Inténtalo de nuevo.")
    store.save(sid, state)
    st.rerun()

def _survey_screen(sid: str, state: SurveyState):
    if state.pending_phase:
        st.warning("La conversación está en pausa.")
        if st.button("Reintentar", type="primary"):
            _ask_ai(sid, state, state.pending_phase)
        return

    q = survey.current_question(state)
    if q is None:
        st.error("No hay ninguna pregunta pendiente.")
        return

    text, selected, submitted = render_question(q, survey.progress(state))
    if not submitted:
        return
    try:
        step, phase = survey.submit_answer(state, text, selected)
    except SurveyError as e:
        st.error(str(e))
        return
    store.save(sid, state)
    if step == "ask_ai":
        _ask_ai(sid, state, phase)
    st.rerun()

def _report_screen(sid: str, state: SurveyState):
    if state.report:
        render_report(state)
        return

    clicked = render_contact_form(state)
    store.save(sid, state)
    if not clicked:
        return
    try:
        req = survey.build_report_request(state)
    except SurveyError as e:
        st.error(str(e))
        return

    with st.spinner("Estamos generando tu informe personalizado. Esto puede tardar unos segundos..."):
        try:
            report = generate_report(req)
        except LLMError as e:
            logger.error("Error generando el informe: %s", e)
            st.error("No se pudo generar el informe. Inténtalo más tarde.")
            return
    survey.finish_report(state, report)
    store.save(sid, state)

    send_lead(state, WEBHOOK_URL, timeout=WEBHOOK_TIMEOUT)
    log_submission(state, SURVEY_DB_URL)
    st.rerun()


# ---------------------------------------------------------------------
# App principal
# ---------------------------------------------------------------------
def main():
    sid = _session_id()
    state = _get_state(sid)

    render_header(APP_TITLE)
    if not OPENAI_API_KEY:
        st.error("No se encontró OPENAI_API_KEY. Configura `.env`, variables de entorno o `st.secrets`.")
        st.stop()
    _show_flash()

    if state.phase == "welcome":
        if render_welcome():
            survey.start(state)
            store.save(sid, state)
            st.rerun()
        return

    if state.phase == "survey":
        _survey_screen(sid, state)
    elif state.phase == "report":
        _report_screen(sid, state)

    if render_reset_footer():
        _reset(sid)


if __name__ == "__main__":
    main()
