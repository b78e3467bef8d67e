import streamlit as st
import pandas as pd
from typing import List, Optional, Tuple
from services.schema import Question, SurveyState
from services.survey import export_data, export_filename

def render_header(title: str):
    st.title(title)
    st.caption("Una herramienta para detectar ineficiencias.")

def render_welcome() -> bool:
    st.subheader("Bienvenido a encuesta.ia")
    st.write(
        "Vamos a descubrir juntos algunas tareas de tu día a día que se podrían mejorar. "
        "Será una conversación breve y sin tecnicismos."
    )
    return st.button("Empezar diagnóstico →", type="primary")

def _number_to_text(v: Optional[float]) -> str:
    if v is None:
        return ""
    return f"{v:g}"

def render_question(q: Question, progress: float) -> Tuple[str, List[str], bool]:
    """Pinta la pregunta actual. Devuelve (texto, opciones marcadas, enviado)."""
    st.progress(progress)
    if q.preamble:
        st.info(q.preamble)

    with st.form(key=f"form-{q.id}", clear_on_submit=True):
        label = q.text + (" _(opcional)_" if q.optional else "")
        st.markdown(f"#### {label}")
        if q.hint:
            st.caption(q.hint)

        selected: List[str] = []
        if q.type == "textarea":
            text = st.text_area("Respuesta", key=f"in-{q.id}", placeholder="Escribe tu respuesta aquí...",
                                label_visibility="collapsed", height=140)
        elif q.type == "number":
            v = st.number_input("Respuesta", key=f"in-{q.id}", min_value=0.0, value=None, step=0.5,
                                label_visibility="collapsed")
            text = _number_to_text(v)
        elif q.type == "multiple-choice":
            text = st.radio("Respuesta", q.options or [], index=None, key=f"in-{q.id}",
                            label_visibility="collapsed") or ""
        elif q.type == "checkbox-suggestions":
            for i, opt in enumerate(q.options or []):
                if st.checkbox(opt, key=f"in-{q.id}-{i}"):
                    selected.append(opt)
            text = st.text_area("Otras tareas", key=f"in-{q.id}-custom",
                                placeholder="Añade aquí otras tareas (una por línea)...")
        else:
            text = st.text_input("Respuesta", key=f"in-{q.id}", placeholder="Tu respuesta...",
                                 label_visibility="collapsed")

        submitted = st.form_submit_button("Siguiente →", type="primary")
    return text, selected, submitted

def render_contact_form(state: SurveyState) -> bool:
    """Email + consentimientos antes de generar el informe. Actualiza ``state``."""
    st.subheader("Casi hemos terminado...")
    st.write("Para generar tu informe personalizado, necesitamos tu consentimiento.")

    email = st.text_input("Tu dirección de email", value=state.form_data.get("userEmail", ""),
                          placeholder="tu@email.com")
    consent = st.checkbox("Acepto los términos de uso y la política de privacidad para recibir el informe.",
                          value=state.consent)
    st.divider()
    phone_consent = st.checkbox("(Opcional) Acepto que me contactéis por teléfono.", value=state.phone_consent)
    phone = ""
    if phone_consent:
        phone = st.text_input("Número de teléfono", value=state.form_data.get("userPhone", ""),
                              placeholder="Escribe aquí tu número de teléfono")

    state.form_data["userEmail"] = email.strip()
    state.consent = consent
    state.phone_consent = phone_consent
    if phone_consent:
        state.form_data["userPhone"] = phone.strip()
    else:
        state.form_data.pop("userPhone", None)

    return st.button("Generar mi informe ✉️", type="primary", disabled=not (consent and email.strip()))

def render_report(state: SurveyState):
    st.subheader("Tu informe está listo")
    with st.container(border=True):
        st.markdown(state.report)

    with st.expander("Tus respuestas", expanded=False):
        df = pd.DataFrame([{"Pregunta": e.question, "Respuesta": e.answer} for e in state.conversation_history])
        st.dataframe(df, use_container_width=True, hide_index=True)

    c1, c2 = st.columns(2)
    with c1:
        st.download_button("Descargar datos", export_data(state), file_name=export_filename(),
                           mime="application/json", use_container_width=True)
    with c2:
        st.download_button("Descargar informe", state.to_markdown, file_name="informe-encuesta-ia.md",
                           mime="text/markdown", use_container_width=True)

def render_reset_footer() -> bool:
    st.divider()
    return st.button("↻ Reiniciar diagnóstico", type="tertiary")
