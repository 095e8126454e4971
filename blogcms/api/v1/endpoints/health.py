# blogcms/api/v1/endpoints/health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from blogcms.db.session import get_db

router = APIRouter()


def check_scheduler_service(request: Request) -> dict:
    """
    Verifica el estado del job de publicación programada.
    """
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None or not request.app.state.settings.SCHEDULER_ENABLED:
        return {"status": "disabled"}
    if scheduler.is_running:
        return {"status": "running", "intervalSeconds": scheduler.interval_seconds}
    return {"status": "stopped"}


@router.get("/health", summary="Verifica el estado completo del servicio")
def check_health(request: Request, db: Session = Depends(get_db)):
    """
    Endpoint de Health Check consolidado.
    Verifica que la API está activa, la conexión a base de datos y el scheduler.
    """
    health_status = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "database": {"status": "unknown"},
            "scheduler": check_scheduler_service(request),
        }
    }

    # Verificar conexión a base de datos
    try:
        db.execute(text("SELECT 1"))
        health_status["services"]["database"] = {"status": "healthy"}
    except Exception as e:
        health_status["services"]["database"] = {"status": "unhealthy", "error": str(e)}
        health_status["status"] = "unhealthy"
        raise HTTPException(status_code=503, detail=health_status)

    if health_status["services"]["scheduler"]["status"] == "stopped":
        health_status["status"] = "degraded"

    return health_status
