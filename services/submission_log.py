# services/submission_log.py
"""
Registro opcional de encuestas completadas (SQLite u otra URL de SQLAlchemy).

Se activa con SURVEY_DB_URL, p. ej. ``sqlite:///encuesta.db``. Es un canal
secundario: si la base de datos falla se deja constancia en el log y la
encuesta sigue adelante.
"""
from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional

from sqlalchemy import Column, DateTime, Integer, String, Text, create_engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from services.schema import SurveyState

logger = logging.getLogger(__name__)

Base = declarative_base()


class SurveySubmission(Base):
    __tablename__ = "survey_submissions"

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Contacto
    user_name = Column(String(200), nullable=True)
    user_role = Column(String(200), nullable=True)
    user_email = Column(String(320), nullable=True, index=True)
    user_phone = Column(String(50), nullable=True)

    # Empresa
    company_name = Column(String(200), nullable=True)
    sector = Column(String(200), nullable=True)

    conversation = Column(Text, nullable=False)  # JSON [{question, answer}]
    report = Column(Text, nullable=True)


_engines: Dict[str, object] = {}

def _session_factory(url: str):
    engine = _engines.get(url)
    if engine is None:
        engine = create_engine(url)
        Base.metadata.create_all(bind=engine)
        _engines[url] = engine
    return sessionmaker(autoflush=False, bind=engine)

def init_db(url: str) -> None:
    _session_factory(url)

def log_submission(state: SurveyState, url: Optional[str]) -> Optional[int]:
    """Guarda la encuesta y devuelve el id de la fila, o None si no se registra."""
    if not url:
        return None
    fd = state.form_data
    row = SurveySubmission(
        user_name=fd.get("userName"),
        user_role=fd.get("userRole"),
        user_email=fd.get("userEmail"),
        user_phone=fd.get("userPhone") if state.phone_consent else None,
        company_name=fd.get("companyName"),
        sector=fd.get("sector"),
        conversation=json.dumps([e.model_dump() for e in state.conversation_history], ensure_ascii=False),
        report=state.report or None,
    )
    try:
        SessionLocal = _session_factory(url)
        with SessionLocal() as db:
            db.add(row)
            db.commit()
            db.refresh(row)
            logger.info("Encuesta registrada (id=%s, empresa=%s)", row.id, row.company_name)
            return row.id
    except SQLAlchemyError as e:
        logger.error("No se pudo registrar la encuesta en %s: %s", url, e)
        return None

def list_submissions(url: str, limit: int = 50) -> List[SurveySubmission]:
    SessionLocal = _session_factory(url)
    with SessionLocal() as db:
        stmt = select(SurveySubmission).order_by(SurveySubmission.id.desc()).limit(limit)
        rows = list(db.scalars(stmt))
        db.expunge_all()
        return rows
