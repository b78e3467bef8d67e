from services.prompts import (
    build_question_prompts,
    build_report_prompts,
    format_conversation,
    sector_key,
    suggestions_for,
)
from services.schema import ConversationEntry


def test_format_conversation():
    h = [ConversationEntry(question="¿Nombre?", answer="Ane"), ConversationEntry(question="¿Cargo?", answer="CEO")]
    assert format_conversation(h) == "P: ¿Nombre?\nR: Ane\n\nP: ¿Cargo?\nR: CEO"
    assert format_conversation([]) == "(sin respuestas todavía)"

def test_sector_matching():
    assert sector_key("Clínica dental") == "salud"
    assert sector_key("Distribución de bebidas") == "logistica"
    assert sector_key("Desarrollo de software") == "software"
    assert sector_key("IT") == "software"
    assert sector_key("Asesoría fiscal") == "consultoria"
    assert sector_key("hostelería") == "generico"
    assert sector_key(None) == "generico"
    assert suggestions_for("hostelería")[0] == "Gestión de clientes"

def test_question_prompt_is_valid_format():
    system, user = build_question_prompts([], "reflection", None)
    assert "sector general" in system
    assert '"Analizar otra tarea"' in system
    assert '{"responses": [{"question": "", "phase": "result"}]}' in system
    assert user.endswith("Genera la siguiente pregunta para la fase: reflection")

def test_report_prompt():
    system, user = build_report_prompts("ACME", "Ane", "Gerente", [], brand="GoiLab", hourly_rate=25.0)
    assert "25€" in system
    assert "contactar a GoiLab" in system
    assert "Contacto: Ane, Gerente" in user
