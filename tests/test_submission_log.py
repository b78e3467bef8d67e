import json

from services import survey
from services.schema import ConversationEntry
from services.submission_log import list_submissions, log_submission


def _finished_state():
    s = survey.new_state()
    s.form_data.update(userName="Ane", userRole="Gerente", companyName="Clínica Sol", sector="salud",
                       userEmail="ane@example.com", userPhone="600000000")
    s.conversation_history = [ConversationEntry(question="¿Tareas?", answer="Gestión de citas")]
    return survey.finish_report(s, "Informe final")


def test_disabled_without_url():
    assert log_submission(_finished_state(), "") is None

def test_log_and_list(tmp_path):
    url = f"sqlite:///{tmp_path / 'encuesta.db'}"
    first = log_submission(_finished_state(), url)
    second = log_submission(_finished_state(), url)
    assert first is not None and second == first + 1

    rows = list_submissions(url, limit=10)
    assert [r.id for r in rows] == [second, first]
    row = rows[0]
    assert row.company_name == "Clínica Sol"
    assert row.user_phone is None  # sin consentimiento telefónico
    assert json.loads(row.conversation) == [{"question": "¿Tareas?", "answer": "Gestión de citas"}]
    assert row.report == "Informe final"

def test_phone_kept_with_consent(tmp_path):
    url = f"sqlite:///{tmp_path / 'encuesta.db'}"
    s = _finished_state()
    s.phone_consent = True
    log_submission(s, url)
    assert list_submissions(url)[0].user_phone == "600000000"

def test_database_error_is_not_raised(tmp_path):
    url = f"sqlite:///{tmp_path / 'no_existe' / 'encuesta.db'}"
    assert log_submission(_finished_state(), url) is None

def test_init_db_creates_table(tmp_path):
    from sqlalchemy import create_engine, inspect
    from services.submission_log import init_db

    url = f"sqlite:///{tmp_path / 'init.db'}"
    init_db(url)
    assert "survey_submissions" in inspect(create_engine(url)).get_table_names()
