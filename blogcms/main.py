# blogcms/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException

from blogcms.api.v1.endpoints import admin, articles, assets, auth, author, health, taxonomy, users
from blogcms.core.config import Settings, get_settings
from blogcms.core.errors import DomainPermissionError, DomainValidationError
from blogcms.core.logging_config import setup_logging
from blogcms.core.security import TokenService
from blogcms.db.session import create_db_engine, create_session_factory
from blogcms.middleware.request_logging import RequestLoggingMiddleware
from blogcms.services.scheduler import SchedulerService

logger = logging.getLogger('blogcms')

API_DESCRIPTION = '''
## Backend API del Blog CMS

**Servicios Disponibles:**
- **Authentication**: Registro, login y JWT
- **Articles**: Ciclo de vida draft -> review -> published, con publicación programada
- **Author / Admin**: Paneles, cola de revisión y permisos de publicación
- **Assets**: Biblioteca de archivos con búsqueda
- **Taxonomy**: Categorías y etiquetas
- **Health Check / Metrics**: Monitoreo de estado y Prometheus
'''


def register_exception_handlers(app: FastAPI) -> None:
    """
    Todas las respuestas de error usan la forma {"message": ...}.
    """

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={'message': 'Validation error', 'errors': jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(DomainValidationError)
    async def domain_validation_handler(request: Request, exc: DomainValidationError):
        return JSONResponse(
            status_code=400,
            content={'message': 'Validation error', 'errors': [exc.to_error()]},
        )

    @app.exception_handler(DomainPermissionError)
    async def domain_permission_handler(request: Request, exc: DomainPermissionError):
        return JSONResponse(status_code=403, content={'message': str(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={'message': exc.detail},
            headers=getattr(exc, 'headers', None),
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Construye la aplicación con una configuración explícita. El motor de base
    de datos, el servicio de tokens y el scheduler quedan en app.state.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    engine = create_db_engine(settings)
    session_factory = create_session_factory(engine)
    scheduler = SchedulerService(
        session_factory,
        interval_seconds=settings.SCHEDULER_INTERVAL_SECONDS,
        tick_timeout_seconds=settings.SCHEDULER_TICK_TIMEOUT_SECONDS,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.SCHEDULER_ENABLED:
            scheduler.start()
        else:
            logger.info('Scheduler disabled by configuration')
        yield
        await scheduler.stop()
        engine.dispose()

    app = FastAPI(
        title='Blog CMS API',
        description=API_DESCRIPTION,
        version='1.0.0',
        openapi_url='/openapi.json',
        docs_url='/docs',
        redoc_url='/redoc',
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.token_service = TokenService(
        settings.SECRET_KEY, settings.ALGORITHM, settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    app.state.scheduler = scheduler

    # Configurar CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    # Logging de cada request con request id
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    # Incluir rutas
    app.include_router(health.router, prefix='/api', tags=['Health Check'])
    app.include_router(auth.router, prefix='/api', tags=['Authentication'])
    app.include_router(articles.router, prefix='/api', tags=['Articles'])
    app.include_router(author.router, prefix='/api/author', tags=['Author'])
    app.include_router(admin.router, prefix='/api/admin', tags=['Admin'])
    app.include_router(assets.router, prefix='/api/assets', tags=['Assets'])
    app.include_router(taxonomy.router, prefix='/api', tags=['Taxonomy'])
    app.include_router(users.router, prefix='/api', tags=['Authors'])

    @app.get('/')
    async def root():
        return {
            'message': 'Blog CMS API',
            'status': 'operativo',
            'version': '1.0.0',
            'docs': '/docs',
            'available_services': [
                'health', 'auth', 'articles', 'author', 'admin', 'assets', 'categories', 'tags'
            ],
            'scheduler': 'enabled' if settings.SCHEDULER_ENABLED else 'disabled',
        }

    @app.get('/metrics', include_in_schema=False)
    async def prometheus_metrics():
        """Endpoint de metricas para Prometheus"""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    logger.info('Blog CMS API configured')
    return app


app = create_app()

if __name__ == '__main__':
    import uvicorn
    uvicorn.run(app, host='0.0.0.0', port=8000)
