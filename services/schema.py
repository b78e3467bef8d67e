from typing import Dict, List, Literal, Optional, get_args
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Phase = Literal[
    "basic_info",
    "problem_detection",
    "time_calculation",
    "context_data",
    "reflection",
    "result",
]
PHASES = get_args(Phase)

QuestionType = Literal[
    "text",
    "textarea",
    "number",
    "multiple-choice",
    "checkbox-suggestions",
    "FREQUENCY_QUESTION",
]
QUESTION_TYPES = get_args(QuestionType)
CHOICE_TYPES = ("multiple-choice", "checkbox-suggestions")

# Pantallas de la app (no confundir con las fases de la conversación)
AppPhase = Literal["welcome", "survey", "report"]


class _CamelModel(BaseModel):
    # camelCase en JSON (front/localStorage), snake_case en Python
    model_config = ConfigDict(populate_by_name=True)


class ConversationEntry(BaseModel):
    question: str
    answer: str


class Question(_CamelModel):
    id: str
    phase: Phase
    text: str
    type: QuestionType = "text"
    key: str
    options: Optional[List[str]] = None
    optional: bool = False
    hint: Optional[str] = None
    preamble: Optional[str] = None


class GeneratedQuestion(_CamelModel):
    """
    Una pregunta tal y como la devuelve el modelo. El parseo es tolerante:
    tipo desconocido -> "text", fase desconocida -> None (la rellena quien
    llama) y tipos de selección sin opciones -> "textarea".
    """
    question: str = ""
    phase: Optional[Phase] = None
    type: Optional[QuestionType] = None
    options: Optional[List[str]] = None
    optional: Optional[bool] = None
    hint: Optional[str] = None
    confidence_score: Optional[float] = Field(default=None, alias="confidenceScore")
    needs_clarification: Optional[bool] = Field(default=None, alias="needsClarification")

    @field_validator("question", mode="before")
    @classmethod
    def _question_text(cls, v):
        return "" if v is None else str(v).strip()

    @field_validator("phase", mode="before")
    @classmethod
    def _known_phase(cls, v):
        return v if v in PHASES else None

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, v):
        if v is None:
            return None
        return v if v in QUESTION_TYPES else "text"

    @field_validator("options", mode="before")
    @classmethod
    def _clean_options(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            v = [v]
        opts = [str(o).strip() for o in v if o is not None and str(o).strip()]
        return opts or None

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _score(cls, v):
        try:
            return None if v is None else float(v)
        except (TypeError, ValueError):
            return None

    @model_validator(mode="after")
    def _choices_need_options(self):
        if self.type in CHOICE_TYPES and not self.options:
            self.type = "textarea"
        return self

    @property
    def is_result(self) -> bool:
        return self.phase == "result" or not self.question


class QuestionBatch(BaseModel):
    responses: List[GeneratedQuestion] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_question(cls, data):
        # algunos modelos devuelven la pregunta suelta o una lista
        if isinstance(data, list):
            return {"responses": data}
        if isinstance(data, dict) and "responses" not in data and ("question" in data or "phase" in data):
            return {"responses": [data]}
        return data


class QuestionRequest(_CamelModel):
    conversation_history: List[ConversationEntry] = Field(default_factory=list, alias="conversationHistory")
    current_phase: Phase = Field(default="basic_info", alias="currentPhase")
    sector: Optional[str] = None


class ReportRequest(_CamelModel):
    company_name: str = Field(default="N/A", alias="companyName")
    user_name: str = Field(default="N/A", alias="userName")
    user_role: str = Field(default="N/A", alias="userRole")
    conversation_history: List[ConversationEntry] = Field(default_factory=list, alias="conversationHistory")


class SurveyState(_CamelModel):
    """Todo lo que se persiste de una encuesta (clave ``encuesta-ia-state``)."""
    phase: AppPhase = "welcome"
    questions: List[Question] = Field(default_factory=list)
    current_question_index: int = Field(default=0, alias="currentQuestionIndex")
    form_data: Dict[str, str] = Field(default_factory=dict, alias="formData")
    conversation_history: List[ConversationEntry] = Field(default_factory=list, alias="conversationHistory")
    report: str = ""
    consent: bool = False
    phone_consent: bool = Field(default=False, alias="phoneConsent")
    # fase que se está pidiendo al modelo; se conserva si la llamada falla
    pending_phase: Optional[Phase] = Field(default=None, alias="pendingPhase")

    @property
    def to_markdown(self) -> str:
        fd = self.form_data
        md = [f"# Diagnóstico de {fd.get('companyName') or 'N/D'}",
              f"- Contacto: {fd.get('userName') or 'N/D'} ({fd.get('userRole') or 'N/D'})",
              f"- Sector: {fd.get('sector') or 'N/D'}"]
        md.append("\n## Informe")
        md.append(self.report or "N/D")
        md.append("\n## Conversación")
        if self.conversation_history:
            for i, e in enumerate(self.conversation_history, 1):
                md.append(f"{i}. **{e.question}**\n   {e.answer}")
        else:
            md.append("- N/D")
        return "\n".join(md)
