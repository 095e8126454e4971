# MIDDLEWARE DE LOGGING DE PETICIONES
# Registra cada peticion con su request id, duracion y usuario, y alimenta las metricas de Prometheus

import time
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

from blogcms.core.logging_config import get_api_logger, log_api_request

blogcms_api_requests_total = Counter(
    'blogcms_api_requests_total',
    'Total blog CMS API requests',
    ['method', 'endpoint', 'status']
)

blogcms_api_request_duration_seconds = Histogram(
    'blogcms_api_request_duration_seconds',
    'Blog CMS API request duration in seconds',
    ['method', 'endpoint']
)


def generate_request_id() -> str:
    return f'req_{uuid.uuid4().hex[:12]}'


def _endpoint_label(request: Request) -> str:
    # Plantilla de la ruta (/api/articles/{article_id}) para no disparar la cardinalidad
    route = request.scope.get('route')
    return getattr(route, 'path', request.url.path)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, logger=None):
        super().__init__(app)
        self.logger = logger or get_api_logger()

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get('X-Request-ID') or generate_request_id()
        request.state.request_id = request_id
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            self.logger.exception(
                f'Unhandled error on {request.method} {request.url.path}',
                extra={'request_id': request_id}
            )
            response = JSONResponse(status_code=500, content={'message': 'Server error'})

        elapsed = time.perf_counter() - start
        endpoint = _endpoint_label(request)
        blogcms_api_requests_total.labels(
            method=request.method, endpoint=endpoint, status=str(response.status_code)
        ).inc()
        blogcms_api_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(elapsed)

        log_api_request(
            self.logger,
            method=request.method,
            endpoint=request.url.path,
            status_code=response.status_code,
            response_time_ms=round(elapsed * 1000, 2),
            user_id=getattr(request.state, 'user_id', None),
            request_id=request_id,
        )
        response.headers['X-Request-ID'] = request_id
        return response
