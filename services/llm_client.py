import json
import logging
import re
from typing import List, Optional

from tenacity import retry, stop_after_attempt, wait_exponential
from openai import OpenAI, BadRequestError, OpenAIError
from pydantic import ValidationError

from services.schema import ConversationEntry, GeneratedQuestion, QuestionBatch, ReportRequest
from services.prompts import build_question_prompts, build_report_prompts
import config

logger = logging.getLogger(__name__)

FALLBACK_QUESTION = "¿Podrías contarme más detalles sobre esta situación?"


class LLMError(RuntimeError):
    """Fallo al obtener una respuesta utilizable del modelo."""


_client: Optional[OpenAI] = None

def _get_client() -> OpenAI:
    global _client
    if _client is None:
        if not config.OPENAI_API_KEY:
            raise LLMError("OPENAI_API_KEY no está configurada.")
        kwargs = dict(api_key=config.OPENAI_API_KEY)
        if config.OPENAI_BASE_URL:
            kwargs["base_url"] = config.OPENAI_BASE_URL
        _client = OpenAI(**kwargs)
    return _client

def _coalesce_text_from_chat(rsp) -> Optional[str]:
    choices = getattr(rsp, "choices", None)
    if not choices:
        return None
    msg = getattr(choices[0], "message", None)
    if msg is None:
        return None
    return getattr(msg, "content", None)

def _strip_code_fences(s: str) -> str:
    s = s.strip()
    s = re.sub(r'^\s*```(?:json)?\s*', '', s, flags=re.IGNORECASE)
    s = re.sub(r'\s*```\s*$', '', s)
    return s

def _extract_json(text: str) -> str:
    m = re.search(r"\{.*\}", text, re.DOTALL)
    if not m:
        raise ValueError("La respuesta del modelo no contiene JSON parseable.")
    return m.group(0)

def _loads_json_robust(raw):
    if raw is None:
        raise ValueError("Respuesta vacía del modelo.")
    if not isinstance(raw, str):
        return raw
    s = _strip_code_fences(raw)
    if not s:
        raise ValueError("El modelo devolvió cadena vacía.")
    try:
        obj = json.loads(s)
    except json.JSONDecodeError:
        return json.loads(_extract_json(s))
    if isinstance(obj, str):
        inner = _strip_code_fences(obj)
        if inner.startswith("{") or inner.startswith("["):
            return json.loads(inner)
        return json.loads(_extract_json(inner))
    return obj

def _is_temperature_error(e: Exception) -> bool:
    s = str(e)
    return ("temperature" in s) and ("Unsupported value" in s or "unsupported_value" in s or "does not support" in s)

def _is_unsupported_param(e: Exception, param: str) -> bool:
    s = str(e)
    return ("unsupported_parameter" in s or "Unexpected" in s or "unexpected" in s or "Unknown parameter" in s) and (param in s)

def _chat_create_robust(args: dict):
    """
    Chat Completions adaptándose al endpoint:
    - quita temperature si el modelo la rechaza,
    - quita response_format si no está soportado,
    - cambia max_tokens -> max_completion_tokens.
    """
    a = dict(args)
    for _ in range(4):
        try:
            return _get_client().chat.completions.create(**a)
        except BadRequestError as e:
            if _is_temperature_error(e):
                a.pop("temperature", None); continue
            if _is_unsupported_param(e, "response_format"):
                a.pop("response_format", None); continue
            if _is_unsupported_param(e, "max_tokens") and "max_tokens" in a:
                a["max_completion_tokens"] = a.pop("max_tokens")
                continue
            raise
    return _get_client().chat.completions.create(**a)

@retry(wait=wait_exponential(multiplier=1, min=2, max=8),
       stop=stop_after_attempt(3),
       reraise=True)
def _request(args: dict) -> str:
    rsp = _chat_create_robust(args)
    text = _coalesce_text_from_chat(rsp)
    if not text or not text.strip():
        raise LLMError("El modelo devolvió una respuesta vacía.")
    return text

def _call_openai(system: str, user: str, max_tokens: int, json_mode: bool = False) -> str:
    _get_client()  # sin API key falla aquí, antes de los reintentos
    args = dict(
        model=config.OPENAI_MODEL.strip(),
        messages=[
            {"role": "system", "content": system},
            {"role": "user",   "content": user},
        ],
        max_tokens=max_tokens,
        temperature=config.OPENAI_TEMPERATURE,
        stream=False,
    )
    if json_mode:
        args["response_format"] = {"type": "json_object"}
    try:
        return _request(args)
    except LLMError:
        raise
    except OpenAIError as e:
        logger.error("Llamada al modelo %s fallida: %s", args["model"], e)
        raise LLMError("No se pudo obtener respuesta del modelo.") from e

def _fallback_question(phase: str) -> GeneratedQuestion:
    return GeneratedQuestion(question=FALLBACK_QUESTION, type="textarea", phase=phase, optional=False)

def generate_question(history: List[ConversationEntry],
                      phase: str,
                      sector: Optional[str] = None) -> List[GeneratedQuestion]:
    """
    Pide al modelo la(s) siguiente(s) pregunta(s) para ``phase``.

    Nunca devuelve una lista vacía: si la salida no se puede interpretar se
    devuelve una pregunta genérica de la fase actual. Los errores de red o
    del proveedor se propagan como LLMError.
    """
    if len(history) >= config.HISTORY_HARD_LIMIT:
        logger.info("Límite de %d respuestas alcanzado; se pasa al informe", config.HISTORY_HARD_LIMIT)
        return [GeneratedQuestion(question="", phase="result")]

    system, user = build_question_prompts(history, phase, sector)
    raw = _call_openai(system, user, config.MAX_TOKENS_QUESTION, json_mode=True)
    try:
        batch = QuestionBatch.model_validate(_loads_json_robust(raw))
    except (ValueError, ValidationError) as e:
        logger.warning("Respuesta del modelo no interpretable (%s): %.200s", e, raw)
        return [_fallback_question(phase)]
    if not batch.responses:
        logger.warning("El modelo no devolvió preguntas para la fase %s", phase)
        return [_fallback_question(phase)]

    for q in batch.responses:
        if q.phase is None:
            q.phase = phase
    return batch.responses

def generate_report(request: ReportRequest) -> str:
    system, user = build_report_prompts(
        company_name=request.company_name,
        user_name=request.user_name,
        user_role=request.user_role,
        history=request.conversation_history,
        brand=config.BRAND_NAME,
        hourly_rate=config.HOURLY_RATE_EUR,
    )
    report = _call_openai(system, user, config.MAX_TOKENS_REPORT)
    return _strip_code_fences(report)
