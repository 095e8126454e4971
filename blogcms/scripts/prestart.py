# blogcms/scripts/prestart.py
import logging
import sys
import time

from sqlalchemy.exc import SQLAlchemyError

from blogcms.core.config import get_settings
from blogcms.db.session import create_db_engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

max_tries = 60
wait_seconds = 2


def main() -> int:
    settings = get_settings()
    db_uri_censored = settings.DATABASE_URI
    if settings.POSTGRES_PASSWORD:
        db_uri_censored = db_uri_censored.replace(settings.POSTGRES_PASSWORD, "******")
    logger.info(f"Esperando a la base de datos en: {db_uri_censored}")

    engine = create_db_engine(settings)
    for i in range(1, max_tries + 1):
        try:
            with engine.connect():
                logger.info("Conexión a la base de datos establecida exitosamente")
                return 0
        except SQLAlchemyError as e:
            logger.warning(f"Intento {i}/{max_tries}: Base de datos no está lista. Reintentando...")
            logger.debug(f"Error de conexión: {e}")
            time.sleep(wait_seconds)

    logger.error("No se pudo conectar a la base de datos después de varios intentos. Saliendo.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
