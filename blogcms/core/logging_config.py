import json
import logging
import logging.config
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from blogcms.core.config import Settings

# Atributos extra que se copian al JSON cuando están presentes en el registro
_EXTRA_FIELDS = (
    "service", "endpoint", "method", "status_code", "response_time_ms",
    "user_id", "request_id", "article_id", "published_count", "operation",
)


class StructuredFormatter(logging.Formatter):
    """
    Formatter que genera logs en formato JSON estructurado
    para facilitar la integración con sistemas de monitoreo
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
            "thread": record.thread,
        }

        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def build_logging_config(settings: Settings) -> Dict[str, Any]:
    """
    Construye el diccionario para dictConfig. Sin LOG_TO_FILE sólo se usa la consola.
    """
    level = settings.LOG_LEVEL.upper()
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
            "level": level,
            "stream": "ext://sys.stdout"
        },
    }
    app_handlers = ["console"]
    scheduler_handlers = ["console"]
    api_handlers = ["console"]

    if settings.LOG_TO_FILE:
        log_dir = Path(settings.LOG_DIR)
        for name, filename, file_level, backups in (
            ("file_all", "app.log", level, 10),
            ("file_errors", "errors.log", "ERROR", 10),
            ("file_scheduler", "scheduler.log", level, 5),
            ("file_api", "api.log", level, 10),
        ):
            handlers[name] = {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "structured",
                "filename": str(log_dir / filename),
                "maxBytes": 10485760,  # 10MB
                "backupCount": backups,
                "level": file_level,
                "encoding": "utf-8",
            }
        app_handlers += ["file_all", "file_errors"]
        scheduler_handlers += ["file_scheduler", "file_errors"]
        api_handlers += ["file_api"]

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": StructuredFormatter,
            },
            "simple": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": handlers,
        "loggers": {
            "blogcms": {
                "level": level,
                "handlers": app_handlers,
                "propagate": False
            },
            "blogcms.services.scheduler": {
                "level": level,
                "handlers": scheduler_handlers,
                "propagate": False
            },
            "blogcms.api": {
                "level": level,
                "handlers": api_handlers,
                "propagate": False
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": api_handlers,
                "propagate": False
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": api_handlers[1:] or ["console"],
                "propagate": False
            },
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console"]
        }
    }


def setup_logging(settings: Settings) -> None:
    """
    Configura el sistema de logging con rotación y formato estructurado
    para integración con sistemas de monitoreo
    """
    if settings.LOG_TO_FILE:
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(settings))

    logger = logging.getLogger("blogcms")
    logger.info("Logging system initialized successfully")
    if settings.LOG_TO_FILE:
        logger.info(f"Log files will be stored in: {Path(settings.LOG_DIR).absolute()}")


class LoggerAdapter(logging.LoggerAdapter):
    """
    Adapter personalizado para agregar contexto adicional a los logs
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        if self.extra:
            kwargs.setdefault('extra', {}).update(self.extra)
        return msg, kwargs


def get_scheduler_logger() -> LoggerAdapter:
    """
    Obtiene un logger específico para el scheduler de publicaciones
    """
    return LoggerAdapter(logging.getLogger("blogcms.services.scheduler"), {"service": "scheduler"})


def get_api_logger() -> LoggerAdapter:
    return LoggerAdapter(logging.getLogger("blogcms.api"), {"service": "api"})


def log_api_request(logger: logging.LoggerAdapter, method: str, endpoint: str,
                    status_code: int = None, response_time_ms: int = None,
                    user_id: str = None, **kwargs):
    """
    Registra información de una petición API con contexto estructurado

    Args:
        logger: Logger a usar
        method: Método HTTP
        endpoint: Endpoint accedido
        status_code: Código de respuesta HTTP
        response_time_ms: Tiempo de respuesta en millisegundos
        user_id: ID del usuario (si está autenticado)
        **kwargs: Información adicional
    """
    extra = {
        "method": method,
        "endpoint": endpoint,
    }

    if status_code:
        extra["status_code"] = status_code
    if response_time_ms is not None:
        extra["response_time_ms"] = response_time_ms
    if user_id:
        extra["user_id"] = user_id

    extra.update(kwargs)

    if status_code and status_code >= 500:
        logger.error(f"API request failed: {method} {endpoint}", extra=extra)
    elif status_code and status_code >= 400:
        logger.warning(f"API request rejected: {method} {endpoint}", extra=extra)
    else:
        logger.info(f"API request: {method} {endpoint}", extra=extra)
