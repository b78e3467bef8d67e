import os
from dotenv import load_dotenv

load_dotenv()

try:
    import streamlit as st
    _secrets = st.secrets if hasattr(st, "secrets") else {}
except Exception:
    _secrets = {}

def _get(key: str, default: str = "") -> str:
    val = os.getenv(key)
    if val:
        return val
    try:
        return _secrets.get(key, default)
    except Exception:
        # sin secrets.toml
        return default

def _get_int(key: str, default: int) -> int:
    try:
        return int(_get(key, str(default)))
    except Exception:
        return default

def _get_float(key: str, default: float) -> float:
    try:
        return float(_get(key, str(default)))
    except Exception:
        return default

APP_TITLE = _get("APP_TITLE", "encuesta.ia - Diagnóstico interactivo")
LOG_LEVEL = _get("LOG_LEVEL", "INFO")

# Endpoint compatible con OpenAI (OpenAI, DeepSeek...)
OPENAI_API_KEY = _get("OPENAI_API_KEY", "")
OPENAI_BASE_URL = _get("OPENAI_BASE_URL", "")
OPENAI_MODEL = _get("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TEMPERATURE = _get_float("OPENAI_TEMPERATURE", 0.7)
MAX_TOKENS_QUESTION = _get_int("MAX_TOKENS_QUESTION", 800)
MAX_TOKENS_REPORT = _get_int("MAX_TOKENS_REPORT", 2000)

# Límites de la conversación (número de respuestas en el historial)
HISTORY_SOFT_LIMIT = _get_int("HISTORY_SOFT_LIMIT", 12)
HISTORY_HARD_LIMIT = _get_int("HISTORY_HARD_LIMIT", 15)
MIN_HISTORY_FOR_REPORT = _get_int("MIN_HISTORY_FOR_REPORT", 5)

# Informe
HOURLY_RATE_EUR = _get_float("HOURLY_RATE_EUR", 25.0)
BRAND_NAME = _get("BRAND_NAME", "GoiLab")

# Canales opcionales
WEBHOOK_URL = _get("WEBHOOK_URL", "")
WEBHOOK_TIMEOUT = _get_int("WEBHOOK_TIMEOUT", 10)
SURVEY_DB_URL = _get("SURVEY_DB_URL", "")
STATE_DIR = _get("STATE_DIR", ".encuesta_state")
