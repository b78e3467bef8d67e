# api.py
"""
Backend HTTP de encuesta.ia para front-ends que no usan Streamlit.

    uvicorn api:app --port 3001

Rutas:
- POST /api/ai/question  -> {"responses": [...]}
- POST /api/ai/report    -> {"report": "..."}
- GET  /health
"""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from services import llm_client
from services.llm_client import LLMError
from services.schema import QuestionRequest, ReportRequest
from utils.logging_config import configure_logging

configure_logging(config.LOG_LEVEL)
logger = logging.getLogger(__name__)

SERVICE_NAME = "encuesta.ia AI Survey Backend"

app = FastAPI(
    title="encuesta.ia API",
    description="Preguntas dinámicas e informe de ineficiencias generados por IA",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

if not config.OPENAI_API_KEY:
    logger.warning("OPENAI_API_KEY no configurada: las rutas /api/ai/* devolverán error")


def _error(error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": error, "message": str(exc)})


@app.post("/api/ai/question")
def ai_question(req: QuestionRequest):
    try:
        questions = llm_client.generate_question(req.conversation_history, req.current_phase, req.sector)
    except LLMError as e:
        logger.error("Error en /api/ai/question: %s", e)
        return _error("Error generating question", e)
    return {"responses": [q.model_dump(by_alias=True, exclude_none=True) for q in questions]}


@app.post("/api/ai/report")
def ai_report(req: ReportRequest):
    try:
        report = llm_client.generate_report(req)
    except LLMError as e:
        logger.error("Error en /api/ai/report: %s", e)
        return _error("Error generating report", e)
    return {"report": report}


@app.get("/health")
def health():
    return {
        "status": "OK",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
