# blogcms/scripts/create_admin.py
import logging
import sys

from blogcms.core.config import get_settings
from blogcms.db import models_registry  # noqa: F401
from blogcms.crud.crud_user import create_user, get_user_by_email
from blogcms.db.session import create_db_engine, create_session_factory
from blogcms.models.user import UserRoleEnum

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main() -> int:
    logger.info("Iniciando creación de usuario administrador...")
    settings = get_settings()
    if not settings.FIRST_ADMIN_PASSWORD:
        logger.error("FIRST_ADMIN_PASSWORD no está configurado.")
        return 1

    db = create_session_factory(create_db_engine(settings))()
    try:
        admin_email = settings.FIRST_ADMIN_EMAIL
        user = get_user_by_email(db, email=admin_email)
        if not user:
            create_user(
                db,
                name=settings.FIRST_ADMIN_NAME,
                email=admin_email,
                password=settings.FIRST_ADMIN_PASSWORD,
                role=UserRoleEnum.admin,
                can_publish=True,
            )
            logger.info(f"Usuario administrador '{admin_email}' creado exitosamente.")
        else:
            logger.info(f"El usuario administrador '{admin_email}' ya existe.")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
