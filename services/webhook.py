# services/webhook.py
import logging
from typing import Any, Dict, Optional

import requests

from services.schema import SurveyState

logger = logging.getLogger(__name__)


def build_payload(state: SurveyState) -> Dict[str, Any]:
    fd = state.form_data
    return {
        "contactInfo": {
            "userName": fd.get("userName") or "N/A",
            "userRole": fd.get("userRole") or "N/A",
            "userEmail": fd.get("userEmail") or "N/A",
            "userPhone": (fd.get("userPhone") or "") if state.phone_consent else "",
        },
        "companyInfo": {
            "companyName": fd.get("companyName") or "N/A",
            "sector": fd.get("sector") or "N/A",
        },
        "surveyData": {
            "conversationHistory": [e.model_dump() for e in state.conversation_history],
            "report": state.report,
        },
    }


def send_lead(state: SurveyState, url: Optional[str], timeout: int = 10) -> bool:
    """Envía el diagnóstico al webhook de captación. Nunca lanza."""
    if not url:
        return False
    try:
        rsp = requests.post(url, json=build_payload(state), timeout=timeout)
    except requests.RequestException as e:
        logger.error("Fallo al enviar datos al webhook: %s", e)
        return False
    if not rsp.ok:
        logger.error("Error enviando datos al webhook: %s %s", rsp.status_code, rsp.reason)
        return False
    return True
