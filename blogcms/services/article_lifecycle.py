"""
Ciclo de vida de un artículo: draft -> review -> published.

`apply_status_transition` es la única regla que decide los valores de
`status`, `published`, `published_at` y `scheduled_publish_at`. Todas las
rutas que cambian el estado (creación, edición, cambio de estado del autor y
revisión del administrador) pasan por aquí, de modo que un artículo en
`draft` o `review` nunca queda con `published=True`.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from blogcms.core.errors import DomainPermissionError, DomainValidationError
from blogcms.models.blog import Article, ArticleStatusEnum
from blogcms.models.user import User

logger = logging.getLogger(__name__)

# Estados que un administrador puede fijar directamente (nunca "review")
ADMIN_STATUSES = frozenset({ArticleStatusEnum.draft, ArticleStatusEnum.published})
AUTHOR_STATUSES = frozenset({ArticleStatusEnum.draft, ArticleStatusEnum.review})


class ArticleTransitionError(DomainValidationError):
    """
    Transición de estado inválida (estado no permitido, rechazo sin comentarios...).
    """


class TransitionPermissionError(DomainPermissionError):
    """
    El usuario no puede llevar el artículo al estado solicitado.
    """


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_article_editor(article: Article, user: User) -> bool:
    """
    Autor principal, coautores y administradores pueden editar un artículo.
    """
    if user.is_admin or article.author_id == user.id:
        return True
    return any(co_author.id == user.id for co_author in article.co_authors)


def authorize_transition(actor: User, target: ArticleStatusEnum) -> None:
    """
    Verifica que el usuario pueda fijar el estado solicitado.

    - Administradores: sólo draft o published; review no existe para ellos.
    - Autores: draft o review; published sólo con el permiso can_publish.
    """
    if actor.is_admin:
        if target not in ADMIN_STATUSES:
            raise ArticleTransitionError(
                "Administrators can only set articles to draft or published", field="status"
            )
        return
    if target in AUTHOR_STATUSES:
        return
    if not actor.can_publish:
        raise TransitionPermissionError("You don't have permission to publish articles")


def validate_review_decision(target: ArticleStatusEnum, remarks: Optional[str]) -> Optional[str]:
    """
    Valida la decisión de revisión de un administrador y devuelve los
    comentarios normalizados. Rechazar (volver a draft) exige comentarios.
    """
    if target not in ADMIN_STATUSES:
        raise ArticleTransitionError(
            "Review decision must be 'published' (approve) or 'draft' (reject)", field="status"
        )
    remarks = remarks.strip() if remarks else None
    if target == ArticleStatusEnum.draft and not remarks:
        raise ArticleTransitionError("Feedback is required when rejecting an article", field="remarks")
    return remarks


def apply_status_transition(
    article: Article,
    target: ArticleStatusEnum,
    *,
    scheduled_publish_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Article:
    """
    Aplica la regla de estado sobre el objeto (sin hacer commit).

    - draft / review: published=False y se descarta cualquier programación
      (una fecha enviada junto a un estado no publicado se ignora).
    - published sin fecha, o con fecha ya vencida: published=True y
      published_at=now (se conserva si ya estaba en línea).
    - published con fecha futura: aprobado pero pendiente, published=False
      hasta que el scheduler lo active.
    """
    now = now or utcnow()
    target = ArticleStatusEnum(target)
    article.status = target

    if target != ArticleStatusEnum.published:
        if scheduled_publish_at is not None:
            logger.info(
                f"Ignoring schedule for article {article.id}: status '{target.value}' is not published"
            )
        article.published = False
        article.published_at = None
        article.scheduled_publish_at = None
        return article

    if scheduled_publish_at is not None and _as_utc(scheduled_publish_at) > now:
        article.published = False
        article.published_at = None
        article.scheduled_publish_at = _as_utc(scheduled_publish_at)
        return article

    if not article.published or article.published_at is None:
        article.published_at = now
    article.published = True
    article.scheduled_publish_at = _as_utc(scheduled_publish_at) if scheduled_publish_at else None
    return article
