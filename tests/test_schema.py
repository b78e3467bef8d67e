from services.schema import GeneratedQuestion, QuestionBatch, QuestionRequest, SurveyState

def test_basic_batch():
    data = {
        "responses": [
            {
                "question": "¿Qué tareas os quitan más tiempo?",
                "type": "checkbox-suggestions",
                "phase": "problem_detection",
                "options": ["Gestión de citas", "Llamadas a pacientes"],
                "optional": False,
                "hint": "Marca todas las que apliquen",
                "confidenceScore": 0.9,
            }
        ]
    }
    b = QuestionBatch.model_validate(data)
    q = b.responses[0]
    assert q.phase == "problem_detection"
    assert q.options == ["Gestión de citas", "Llamadas a pacientes"]
    assert q.confidence_score == 0.9
    assert not q.is_result

def test_bare_question_is_wrapped():
    b = QuestionBatch.model_validate({"question": "", "phase": "result"})
    assert len(b.responses) == 1
    assert b.responses[0].is_result

def test_lenient_parsing():
    q = GeneratedQuestion.model_validate({"question": " ¿Algo más? ", "type": "slider", "phase": "closing"})
    assert q.question == "¿Algo más?"
    assert q.type == "text"
    assert q.phase is None

def test_choice_without_options_becomes_textarea():
    q = GeneratedQuestion.model_validate({"question": "Elige", "type": "multiple-choice", "options": ["", "  "]})
    assert q.type == "textarea"
    assert q.options is None

def test_request_aliases():
    r = QuestionRequest.model_validate({
        "conversationHistory": [{"question": "¿Nombre?", "answer": "Ane"}],
        "currentPhase": "time_calculation",
        "sector": "software",
    })
    assert r.current_phase == "time_calculation"
    assert r.conversation_history[0].answer == "Ane"

def test_state_markdown():
    s = SurveyState.model_validate({
        "phase": "report",
        "formData": {"companyName": "Clínica Sol", "userName": "Ane", "userRole": "Gerente"},
        "conversationHistory": [{"question": "¿Sector?", "answer": "salud"}],
        "report": "Informe breve.",
    })
    md = s.to_markdown
    assert md.startswith("# Diagnóstico de Clínica Sol")
    assert "Informe breve." in md
    assert "1. **¿Sector?**" in md
