import re
from typing import Iterable, List

def clean_text(s: str) -> str:
    s = s.replace('\x00', ' ')
    s = re.sub(r'[\r\t]', ' ', s)
    s = re.sub(r' +', ' ', s)
    return s.strip()

def split_lines(s: str) -> List[str]:
    """Una entrada por línea no vacía (tareas escritas a mano)."""
    return [clean_text(line) for line in (s or "").split("\n") if line.strip()]

def dedupe(items: Iterable[str]) -> List[str]:
    seen, out = set(), []
    for it in items:
        if it not in seen:
            out.append(it); seen.add(it)
    return out

def normalize(s: str) -> str:
    """Minúsculas y sin tildes, para comparar palabras clave."""
    s = (s or "").lower()
    for a, b in (("á", "a"), ("é", "e"), ("í", "i"), ("ó", "o"), ("ú", "u"), ("ü", "u")):
        s = s.replace(a, b)
    return s
