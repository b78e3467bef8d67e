from types import SimpleNamespace

import requests

from services import survey, webhook
from services.schema import ConversationEntry


def _state():
    s = survey.new_state()
    s.form_data.update(userName="Ane", userEmail="ane@example.com", companyName="Clínica Sol", userPhone="600")
    s.conversation_history = [ConversationEntry(question="¿Sector?", answer="salud")]
    return survey.finish_report(s, "Informe")


def test_payload_shape():
    p = webhook.build_payload(_state())
    assert p["contactInfo"] == {"userName": "Ane", "userRole": "N/A", "userEmail": "ane@example.com", "userPhone": ""}
    assert p["companyInfo"] == {"companyName": "Clínica Sol", "sector": "N/A"}
    assert p["surveyData"]["conversationHistory"] == [{"question": "¿Sector?", "answer": "salud"}]
    assert p["surveyData"]["report"] == "Informe"

def test_send_lead_posts_json(monkeypatch):
    sent = {}

    def fake_post(url, json=None, timeout=None):
        sent.update(url=url, json=json, timeout=timeout)
        return SimpleNamespace(ok=True, status_code=200, reason="OK")

    monkeypatch.setattr(webhook.requests, "post", fake_post)
    assert webhook.send_lead(_state(), "https://hooks.example.com/encuesta", timeout=3)
    assert sent["url"] == "https://hooks.example.com/encuesta"
    assert sent["timeout"] == 3
    assert sent["json"]["companyInfo"]["companyName"] == "Clínica Sol"

def test_send_lead_failures_return_false(monkeypatch):
    monkeypatch.setattr(webhook.requests, "post",
                        lambda *a, **k: SimpleNamespace(ok=False, status_code=502, reason="Bad Gateway"))
    assert webhook.send_lead(_state(), "https://hooks.example.com/encuesta") is False

    def boom(*a, **k):
        raise requests.ConnectionError("sin red")
    monkeypatch.setattr(webhook.requests, "post", boom)
    assert webhook.send_lead(_state(), "https://hooks.example.com/encuesta") is False

def test_send_lead_disabled():
    assert webhook.send_lead(_state(), "") is False
