"""
Máquina de estados del formulario de encuesta.ia.

Pantallas: welcome -> survey -> report. Dentro de ``survey`` las preguntas
se encolan en ``state.questions``: primero las cuatro iniciales fijas y
después las que va generando el modelo. Las fases de conversación son
etiquetas que se envían al modelo y se leen de su respuesta; aquí solo se
aplican unas pocas salvaguardas sobre lo que devuelve.
"""
import json
import logging
from datetime import date
from typing import Callable, List, Literal, Optional, Tuple

from services.schema import ConversationEntry, GeneratedQuestion, Question, ReportRequest, SurveyState
from services.prompts import FREQUENCY_OPTIONS, REFLECTION_ANOTHER_TASK, REFLECTION_PREPARE_REPORT
from utils.text import dedupe, split_lines
import config

logger = logging.getLogger(__name__)

INITIAL_QUESTIONS: List[Question] = [
    Question(id="q1", phase="basic_info", text="Para empezar, ¿cuál es tu nombre?", type="text", key="userName"),
    Question(id="q2", phase="basic_info", text="¿Y tu cargo en la empresa?", type="text", key="userRole"),
    Question(id="q3", phase="basic_info", text="¿Cómo se llama tu empresa?", type="text", key="companyName"),
    Question(id="q4", phase="basic_info",
             text="¿Y el sector de tu empresa? (Ej: hostelería, software, consultoría...)",
             type="text", key="sector"),
]

REFLECTION_QUESTION_TEXT = "¿Qué quieres hacer ahora?"

# Qué hacer tras responder: pasar a la siguiente pregunta encolada, pedir
# una nueva al modelo (con la fase indicada) o ir a la pantalla de informe.
Step = Tuple[Literal["advance", "ask_ai", "report"], Optional[str]]

AskFn = Callable[[List[ConversationEntry], str, Optional[str]], List[GeneratedQuestion]]


class SurveyError(RuntimeError):
    """Error presentable al usuario."""

class AnswerRequiredError(SurveyError):
    pass

class PrematureResultError(SurveyError):
    pass

class ReportNotReadyError(SurveyError):
    pass


def new_state() -> SurveyState:
    return SurveyState(questions=[q.model_copy() for q in INITIAL_QUESTIONS])

def reset() -> SurveyState:
    return new_state()

def start(state: SurveyState) -> SurveyState:
    state.phase = "survey"
    return state

def current_question(state: SurveyState) -> Optional[Question]:
    if 0 <= state.current_question_index < len(state.questions):
        return state.questions[state.current_question_index]
    return None

def progress(state: SurveyState) -> float:
    if state.phase == "report":
        return 1.0
    limit = max(config.HISTORY_SOFT_LIMIT, 1)
    return min(len(state.conversation_history) / limit, 1.0)

def compose_answer(question: Question, text: str, selected: Optional[List[str]] = None) -> str:
    if question.type == "checkbox-suggestions":
        return ", ".join(dedupe([*(selected or []), *split_lines(text)]))
    if question.type in ("multiple-choice", "FREQUENCY_QUESTION"):
        return text or ""
    return (text or "").strip()

def submit_answer(state: SurveyState, text: str, selected: Optional[List[str]] = None) -> Step:
    q = current_question(state)
    if q is None:
        raise SurveyError("No hay ninguna pregunta pendiente.")
    if state.pending_phase:
        raise SurveyError("La pregunta ya está respondida; reintenta obtener la siguiente.")

    answer = compose_answer(q, text, selected)
    if not answer and not q.optional:
        raise AnswerRequiredError("Por favor, selecciona una opción o escribe una respuesta.")

    state.form_data[q.key] = answer
    state.conversation_history.append(ConversationEntry(question=q.text, answer=answer))

    is_last = state.current_question_index >= len(state.questions) - 1
    end_of_initial = q.phase == "basic_info" and q.id == INITIAL_QUESTIONS[-1].id
    if not is_last:
        state.current_question_index += 1
        return "advance", None
    if not end_of_initial and answer == REFLECTION_PREPARE_REPORT:
        state.phase = "report"
        return "report", None
    # la fase queda guardada hasta que el modelo responda, para poder reintentar
    if end_of_initial or answer == REFLECTION_ANOTHER_TASK:
        state.pending_phase = "problem_detection"
    else:
        state.pending_phase = q.phase
    return "ask_ai", state.pending_phase

def _to_question(g: GeneratedQuestion, n: int, preamble: Optional[str] = None) -> Question:
    phase = g.phase or "problem_detection"
    qtype = g.type or "text"
    options = g.options
    if qtype == "FREQUENCY_QUESTION" or "con qué frecuencia" in g.question.lower():
        qtype, options = "multiple-choice", list(FREQUENCY_OPTIONS)
    return Question(
        id=f"q-ai-{n}",
        phase=phase,
        text=g.question,
        type=qtype,
        key=f"custom-{phase}-{n}",
        options=options,
        optional=bool(g.optional),
        hint=g.hint,
        preamble=preamble,
    )

def _reflection_choice() -> GeneratedQuestion:
    return GeneratedQuestion(
        question=REFLECTION_QUESTION_TEXT,
        phase="reflection",
        type="multiple-choice",
        options=[REFLECTION_ANOTHER_TASK, REFLECTION_PREPARE_REPORT],
    )

def _to_report(state: SurveyState) -> Step:
    answered = len(state.conversation_history)
    if answered < config.MIN_HISTORY_FOR_REPORT:
        logger.warning("El modelo intentó terminar con solo %d respuestas", answered)
        raise PrematureResultError(
            "La IA ha intentado terminar la conversación antes de tiempo. Por favor, inténtalo de nuevo.")
    state.phase = "report"
    state.pending_phase = None
    return "report", None

def apply_generated(state: SurveyState, generated: List[GeneratedQuestion]) -> Step:
    """
    Incorpora la salida del modelo al estado y devuelve el siguiente paso.

    Si la salida no es aceptable se lanza SurveyError y ``pending_phase``
    queda intacta para reintentar la misma fase.
    """
    answered = len(state.conversation_history)
    if not generated:
        raise SurveyError("No se pudo obtener la siguiente pregunta. Inténtalo de nuevo.")

    first = generated[0]
    if first.is_result or answered >= config.HISTORY_SOFT_LIMIT:
        return _to_report(state)

    preamble = None
    items = list(generated)
    if first.phase == "reflection" and first.type != "multiple-choice":
        preamble = first.question
        items = items[1:] or [_reflection_choice()]

    new_questions = []
    for i, g in enumerate(items):
        if g.is_result:
            break
        new_questions.append(_to_question(g, answered + 1 + i, preamble if i == 0 else None))
    if not new_questions:
        return _to_report(state)

    state.questions.extend(new_questions)
    state.current_question_index = len(state.questions) - len(new_questions)
    state.pending_phase = None
    return "advance", None

def advance_with_ai(state: SurveyState, phase: str, ask: AskFn) -> Step:
    return apply_generated(state, ask(state.conversation_history, phase, state.form_data.get("sector")))

def build_report_request(state: SurveyState) -> ReportRequest:
    if len(state.conversation_history) < config.MIN_HISTORY_FOR_REPORT:
        raise ReportNotReadyError("Es necesario responder a más preguntas para poder generar un informe.")
    if not (state.form_data.get("userEmail") or "").strip():
        raise ReportNotReadyError("Por favor, introduce tu email para recibir el informe.")
    if not state.consent:
        raise ReportNotReadyError("Debes aceptar los términos para poder generar el informe.")
    fd = state.form_data
    return ReportRequest(
        company_name=fd.get("companyName") or "N/A",
        user_name=fd.get("userName") or "N/A",
        user_role=fd.get("userRole") or "N/A",
        conversation_history=list(state.conversation_history),
    )

def finish_report(state: SurveyState, report: str) -> SurveyState:
    state.report = report
    state.phase = "report"
    return state

def export_filename(today: Optional[date] = None) -> str:
    return f"diagnostico-encuesta-ia-{(today or date.today()).isoformat()}.json"

def export_data(state: SurveyState) -> str:
    data = {
        "formData": state.form_data,
        "conversationHistory": [e.model_dump() for e in state.conversation_history],
        "report": state.report,
    }
    return json.dumps(data, indent=2, ensure_ascii=False)
