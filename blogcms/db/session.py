# blogcms/db/session.py
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from blogcms.core.config import Settings


def create_db_engine(settings: Settings) -> Engine:
    """
    Crea el motor (engine) de SQLAlchemy usando la URI de la configuración.
    """
    uri = settings.DATABASE_URI
    if uri.startswith("sqlite"):
        # check_same_thread es necesario para SQLite; en memoria se comparte una sola conexión
        kwargs = {"connect_args": {"check_same_thread": False}}
        if uri in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(uri, **kwargs)
    return create_engine(
        uri,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    # Fábrica de sesiones que se usará para crear sesiones individuales.
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependencia que entrega una sesión por petición usando la fábrica
    registrada en app.state. Asegura que la sesión se cierre siempre.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
