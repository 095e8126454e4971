"""
Publicación programada de artículos.

Un barrido (sweep) busca los artículos aprobados (`status=published`) que aún
no están en línea (`published=False`) y cuya fecha `scheduled_publish_at` ya
pasó, y los activa. Cada UPDATE vuelve a comprobar `published=False`, así que
barridos repetidos o concurrentes no publican dos veces: el segundo afecta
cero filas. El estado vive en la base de datos, por lo que un tick perdido se
recupera en el siguiente.
"""
import asyncio
from datetime import datetime
from typing import Any, Dict, Optional

from prometheus_client import Counter
from sqlalchemy import update
from sqlalchemy.orm import Session, sessionmaker

from blogcms.core.logging_config import get_scheduler_logger
from blogcms.models.blog import Article, ArticleStatusEnum
from blogcms.services.article_lifecycle import utcnow

logger = get_scheduler_logger()

scheduler_sweeps_total = Counter(
    'blogcms_scheduler_sweeps_total',
    'Scheduled publication sweeps',
    ['outcome']
)

scheduled_articles_published_total = Counter(
    'blogcms_scheduled_articles_published_total',
    'Articles published by the scheduler'
)


def _sweep_result(success: bool, published: int, message: str) -> Dict[str, Any]:
    return {"success": success, "published": published, "message": message}


def publish_scheduled_articles(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Ejecuta un barrido. Nunca lanza excepciones: un error aborta el barrido,
    se registra y se devuelve como `success=False` para reintentar en el próximo tick.
    """
    now = now or utcnow()
    try:
        due = (
            db.query(Article.id, Article.title)
            .filter(
                Article.status == ArticleStatusEnum.published,
                Article.published.is_(False),
                Article.scheduled_publish_at.isnot(None),
                Article.scheduled_publish_at <= now,
            )
            .order_by(Article.scheduled_publish_at, Article.id)
            .all()
        )

        if not due:
            scheduler_sweeps_total.labels(outcome="empty").inc()
            return _sweep_result(True, 0, "No scheduled articles to publish")

        published = 0
        for article_id, title in due:
            result = db.execute(
                update(Article)
                .where(
                    Article.id == article_id,
                    Article.status == ArticleStatusEnum.published,
                    Article.published.is_(False),
                )
                .values(published=True, published_at=now, updated_at=now)
                .execution_options(synchronize_session="fetch")
            )
            # Commit por fila: cada actualización es independiente e idempotente
            db.commit()
            if result.rowcount:
                published += 1
                scheduled_articles_published_total.inc()
                logger.info(
                    f"Published scheduled article: {title} (ID: {article_id})",
                    extra={"article_id": article_id},
                )

        scheduler_sweeps_total.labels(outcome="success").inc()
        return _sweep_result(True, published, f"Published {published} scheduled article(s)")
    except Exception as e:
        db.rollback()
        scheduler_sweeps_total.labels(outcome="error").inc()
        logger.exception("Error processing scheduled articles")
        return _sweep_result(False, 0, f"Error processing scheduled articles: {e}")


class SchedulerService:
    """
    Ejecuta el barrido en segundo plano: una vez al arrancar y luego cada
    `interval_seconds`. Cada tick abre su propia sesión y corre el barrido
    (bloqueante) en un hilo, limitado por `tick_timeout_seconds`.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        interval_seconds: int = 60,
        tick_timeout_seconds: int = 30,
    ):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.tick_timeout_seconds = tick_timeout_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """
        Inicia el job periódico. Debe llamarse con un event loop en ejecución.
        """
        if self.is_running:
            logger.info("Scheduler service is already running")
            return
        logger.info(f"Starting scheduler service (every {self.interval_seconds} seconds)")
        self._task = asyncio.get_running_loop().create_task(
            self._run_forever(), name="publish-scheduled-articles"
        )

    async def stop(self) -> None:
        if not self.is_running:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Scheduler service stopped")

    def _sweep(self) -> Dict[str, Any]:
        db = self.session_factory()
        try:
            return publish_scheduled_articles(db)
        finally:
            db.close()

    async def run_once(self) -> Dict[str, Any]:
        """
        Ejecuta un barrido fuera del event loop con timeout.
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._sweep), timeout=self.tick_timeout_seconds
            )
        except asyncio.TimeoutError:
            scheduler_sweeps_total.labels(outcome="timeout").inc()
            logger.error(f"Scheduled publication sweep exceeded {self.tick_timeout_seconds}s")
            return _sweep_result(False, 0, "Scheduled publication sweep timed out")

    async def _run_forever(self) -> None:
        while True:
            result = await self.run_once()
            if result["published"] > 0:
                logger.info(f"Published {result['published']} scheduled article(s)")
            await asyncio.sleep(self.interval_seconds)
