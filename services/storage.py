# services/storage.py
"""
Persistencia del estado de la encuesta entre recargas de página.

Equivale al ``localStorage`` del navegador: un fichero JSON por sesión
(``<STATE_DIR>/<session_id>.json``) con la clave ``encuesta-ia-state``.
Los fallos de lectura/escritura se registran en el log y no interrumpen
la encuesta.
"""
import json
import logging
import os
import re
from typing import Optional

from pydantic import ValidationError

from services.schema import SurveyState

logger = logging.getLogger(__name__)

STORAGE_KEY = "encuesta-ia-state"
_SESSION_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class StateStore:
    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, session_id: str) -> str:
        if not _SESSION_RE.match(session_id or ""):
            raise ValueError(f"Identificador de sesión no válido: {session_id!r}")
        return os.path.join(self.directory, f"{session_id}.json")

    def load(self, session_id: str) -> Optional[SurveyState]:
        path = self._path(session_id)
        if not os.path.exists(path):
            return None
        try:
            with open(path, encoding="utf-8") as f:
                payload = json.load(f)
            return SurveyState.model_validate(payload[STORAGE_KEY])
        except (OSError, ValueError, KeyError, TypeError, ValidationError) as e:
            logger.error("Estado guardado ilegible en %s (%s); se reinicia la encuesta", path, e)
            self.clear(session_id)
            return None

    def save(self, session_id: str, state: SurveyState) -> bool:
        path = self._path(session_id)
        tmp = path + ".tmp"
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump({STORAGE_KEY: state.model_dump(mode="json", by_alias=True)}, f, ensure_ascii=False)
            os.replace(tmp, path)
            return True
        except OSError as e:
            logger.error("No se pudo guardar el estado de %s: %s", session_id, e)
            return False

    def clear(self, session_id: str) -> None:
        try:
            os.remove(self._path(session_id))
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("No se pudo borrar el estado de %s: %s", session_id, e)
