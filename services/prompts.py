from typing import Dict, List, Optional

from services.schema import ConversationEntry
from utils.text import normalize

REFLECTION_ANOTHER_TASK = "Analizar otra tarea"
REFLECTION_PREPARE_REPORT = "Preparar el informe"

FREQUENCY_OPTIONS = ["Varias veces al día", "Diariamente", "Semanalmente", "Mensualmente"]

# Sugerencias de tareas para problem_detection, por sector
SECTOR_SUGGESTIONS: Dict[str, List[str]] = {
    "generico": ["Gestión de clientes", "Coordinación interna", "Tareas repetitivas", "Informes"],
    "salud": ["Gestión de citas", "Llamadas a pacientes", "Informes médicos", "Búsqueda historiales"],
    "logistica": ["Gestión de albaranes", "Pedidos", "Control de stock", "Incidencias"],
    "software": ["Reuniones de seguimiento", "Documentación técnica", "Soporte técnico", "Reporte de bugs"],
    "consultoria": ["Seguimiento de clientes", "Emisión de facturas", "Informes contables", "Propuestas"],
}

_SECTOR_KEYWORDS = {
    "salud": ("clinica", "salud", "medic", "dental", "hospital", "fisio", "veterinari"),
    "logistica": ("distribu", "logistic", "transporte", "almacen", "mayorista"),
    "software": ("software", "informatic", "tecnolog", "desarrollo", "it", "saas"),
    "consultoria": ("consultor", "asesor", "gestoria", "administrativ", "contab", "abogad"),
}

PHASE_INSTRUCTIONS = """\
- basic_info: datos básicos (nombre, cargo, empresa, sector). Ya recogidos: no vuelvas a preguntarlos.
- problem_detection: identificar varias tareas ineficientes. Tipo OBLIGATORIO "checkbox-suggestions" con sugerencias en "options".
- time_calculation: para CADA tarea, primero FRECUENCIA (tipo "FREQUENCY_QUESTION") y después DURACIÓN (tipo "number", indicando la unidad: "en horas" o "en minutos").
- context_data: contexto adicional (herramientas usadas, dónde guardan los datos, tamaño del equipo). Usa "text" o "textarea".
- reflection: pausa para resumir lo detectado. Devuelve DOS elementos: primero uno con "phase": "reflection" y un breve resumen en "question"; después una pregunta "multiple-choice" con las opciones ["{another}", "{prepare}"].
- result: la encuesta ha terminado."""

QUESTION_SYSTEM_PROMPT = """Eres un consultor experto en eficiencia empresarial y el núcleo de la herramienta de diagnóstico "encuesta.ia". Tu objetivo es ayudar a identificar y cuantificar tareas ineficientes en pequeñas empresas del sector {sector}, con un tono cercano, profesional y sin tecnicismos. Todo el texto para el usuario (question, hint, options) va en castellano.

FASE ACTUAL: {phase}

ORDEN DE LAS FASES: basic_info -> problem_detection -> time_calculation -> context_data -> reflection -> result

INSTRUCCIONES POR FASE:
{phase_instructions}

REGLAS:
- Usa el historial para no repetir preguntas. Si usas el nombre de la persona o de la empresa, usa EXACTAMENTE los del historial; no inventes datos.
- Si la última respuesta es vaga (p. ej. "a veces"), pide una aclaración y marca "needsClarification": true.
- Pasa a context_data solo cuando tengas frecuencia Y duración de TODAS las tareas detectadas.
- Para terminar la encuesta devuelve exactamente {{"responses": [{{"question": "", "phase": "result"}}]}}.

SUGERENCIAS DE TAREAS PARA ESTE SECTOR (problem_detection):
{suggestions}

TIPOS DE PREGUNTA:
- text: respuesta corta
- textarea: respuesta larga
- number: cantidad (duraciones)
- multiple-choice: selección única (requiere "options")
- checkbox-suggestions: selección múltiple con opción de añadir texto (requiere "options")
- FREQUENCY_QUESTION: frecuencia ({frequencies})

FORMATO DE RESPUESTA (JSON):
{{
  "responses": [
    {{
      "question": "Tu pregunta aquí",
      "type": "text|textarea|number|multiple-choice|checkbox-suggestions|FREQUENCY_QUESTION",
      "phase": "{phase}",
      "options": ["opción1", "opción2"],
      "optional": false,
      "hint": "Pista opcional para ayudar al usuario",
      "needsClarification": false
    }}
  ]
}}

Responde SOLO con el JSON, sin texto adicional.
"""

QUESTION_USER_PROMPT = """CONTEXTO DE LA CONVERSACIÓN:
{conversation}

Genera la siguiente pregunta para la fase: {phase}"""

REPORT_SYSTEM_PROMPT = """Eres un consultor de negocios experto de {brand}, especializado en ayudar a empresas a optimizar sus procesos con herramientas digitales inteligentes. Tu objetivo es redactar, en castellano, un informe persuasivo y revelador a partir de un diagnóstico interactivo.

INSTRUCCIONES:
1. Analiza el historial e identifica las tareas ineficientes señaladas. Para cada tarea extrae su frecuencia y su duración.
2. Calcula el impacto:
   - Multiplicador semanal por frecuencia: "Varias veces al día" -> 10, "Diariamente" -> 5, "Semanalmente" -> 1, "Quincenalmente" -> 0.5, "Mensualmente" -> 0.23.
   - Si la duración está en minutos, pásala a horas (divide entre 60).
   - Horas semanales = suma de (multiplicador semanal x duración en horas) de cada tarea.
   - Horas mensuales = horas semanales x 4.33.
   - Coste mensual = horas mensuales x {hourly_rate}€ (estimación conservadora).
   - Redondea horas y coste a enteros o a un decimal.
3. Estructura del informe:
   - Introducción agradecida a {user_name}: el informe revela las horas que se están "escapando" y cómo recuperarlas.
   - Resumen de ineficiencias: lista de tareas detectadas.
   - La cifra clave: "Hemos detectado que estas tareas consumen aproximadamente X horas al mes, lo que supone un coste estimado de Y€ mensuales para tu negocio."
   - La solución: cómo optimizar estos procesos con herramientas digitales inteligentes, sin jerga técnica.
   - Llamada a la acción: {brand} como especialista que puede implementar estas soluciones.

El tono debe ser profesional, cercano y motivador. El objetivo es que {user_name} piense: "Necesito contactar a {brand} para solucionar esto".
"""

REPORT_USER_PROMPT = """Información del diagnóstico:
- Empresa: {company_name}
- Contacto: {user_name}, {user_role}

CONVERSACIÓN COMPLETA:
{conversation}

Genera el informe completo basado en la conversación proporcionada."""


def format_conversation(history: List[ConversationEntry]) -> str:
    if not history:
        return "(sin respuestas todavía)"
    return "\n\n".join(f"P: {e.question}\nR: {e.answer}" for e in history)


def sector_key(sector: Optional[str]) -> str:
    s = f" {normalize(sector or '')} "
    for key, words in _SECTOR_KEYWORDS.items():
        for w in words:
            # "it" solo como palabra suelta
            if (len(w) <= 2 and f" {w} " in s) or (len(w) > 2 and w in s):
                return key
    return "generico"


def suggestions_for(sector: Optional[str]) -> List[str]:
    return SECTOR_SUGGESTIONS[sector_key(sector)]


def build_question_prompts(history: List[ConversationEntry], phase: str, sector: Optional[str]):
    system = QUESTION_SYSTEM_PROMPT.format(
        sector=sector or "general",
        phase=phase,
        phase_instructions=PHASE_INSTRUCTIONS.format(
            another=REFLECTION_ANOTHER_TASK, prepare=REFLECTION_PREPARE_REPORT),
        suggestions=", ".join(suggestions_for(sector)),
        frequencies=", ".join(FREQUENCY_OPTIONS),
    )
    user = QUESTION_USER_PROMPT.format(conversation=format_conversation(history), phase=phase)
    return system, user


def build_report_prompts(company_name: str, user_name: str, user_role: str,
                         history: List[ConversationEntry], brand: str, hourly_rate: float):
    rate = f"{hourly_rate:g}"
    system = REPORT_SYSTEM_PROMPT.format(brand=brand, hourly_rate=rate, user_name=user_name)
    user = REPORT_USER_PROMPT.format(
        company_name=company_name,
        user_name=user_name,
        user_role=user_role,
        conversation=format_conversation(history),
    )
    return system, user
