import json
import os

import pytest

from services import survey
from services.storage import STORAGE_KEY, StateStore


def test_save_and_load_roundtrip(tmp_path):
    store = StateStore(str(tmp_path / "state"))
    s = survey.start(survey.new_state())
    survey.submit_answer(s, "Ane")
    s.consent = True
    assert store.save("abc123", s)

    with open(tmp_path / "state" / "abc123.json", encoding="utf-8") as f:
        raw = json.load(f)[STORAGE_KEY]
    assert raw["currentQuestionIndex"] == 1
    assert raw["formData"] == {"userName": "Ane"}

    loaded = store.load("abc123")
    assert loaded == s

def test_pending_phase_survives_reload(tmp_path):
    store = StateStore(str(tmp_path))
    s = survey.start(survey.new_state())
    for answer in ("Ane", "Gerente", "Clínica Sol", "salud"):
        survey.submit_answer(s, answer)
    store.save("abc123", s)

    with open(tmp_path / "abc123.json", encoding="utf-8") as f:
        assert json.load(f)[STORAGE_KEY]["pendingPhase"] == "problem_detection"

    loaded = store.load("abc123")
    assert loaded.pending_phase == "problem_detection"
    with pytest.raises(survey.SurveyError):
        survey.submit_answer(loaded, "salud")
    assert len(loaded.conversation_history) == 4

def test_missing_state(tmp_path):
    assert StateStore(str(tmp_path)).load("nobody") is None

def test_corrupt_state_is_discarded(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{no es json", encoding="utf-8")
    store = StateStore(str(tmp_path))
    assert store.load("bad") is None
    assert not os.path.exists(path)

def test_clear(tmp_path):
    store = StateStore(str(tmp_path))
    store.save("s1", survey.new_state())
    store.clear("s1")
    assert store.load("s1") is None
    store.clear("s1")

def test_rejects_unsafe_session_id(tmp_path):
    with pytest.raises(ValueError):
        StateStore(str(tmp_path)).load("../etc/passwd")
