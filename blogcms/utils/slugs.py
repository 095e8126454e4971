import re
import unicodedata


_NON_WORD = re.compile(r"[^a-z0-9]+")


def slugify(value: str, max_length: int = 200) -> str:
    """
    Convierte un texto en un slug ASCII en minúsculas separado por guiones.
    "¿Qué es Python?" -> "que-es-python"
    """
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = _NON_WORD.sub("-", normalized.lower()).strip("-")
    return slug[:max_length].rstrip("-") or "item"
