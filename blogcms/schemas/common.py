import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class CamelModel(BaseModel):
    """
    Base de los schemas de la API: claves camelCase en el JSON,
    aceptando también snake_case en la entrada.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normaliza un datetime a UTC. Los valores sin zona horaria se asumen UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_json_field(value: Any) -> Any:
    """
    Los campos JSON de filas antiguas pueden venir serializados como texto.
    Un texto que no es JSON válido se trata como vacío.
    """
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return json.loads(value)
        except ValueError:
            logger.warning(f"Discarding malformed JSON field value: {value[:50]!r}")
            return None
    return value
