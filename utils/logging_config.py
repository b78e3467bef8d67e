"""
Configuración de logging de la aplicación.

Un único handler de consola en el logger raíz. Los módulos usan
``logging.getLogger(__name__)`` y no configuran nada por su cuenta.
"""
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_HANDLER_NAME = "encuesta_ia_console"


def configure_logging(level: str = "INFO") -> logging.Logger:
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    # idempotente: Streamlit re-ejecuta el script en cada interacción
    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    # el SDK de OpenAI y httpx son muy verbosos en DEBUG/INFO
    for noisy in ("httpx", "openai", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    return root
