from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import desc, func, or_, update
from sqlalchemy.orm import Session

from blogcms.core.errors import DomainValidationError
from blogcms.models.blog import (
    Article, ArticleStatusEnum, Category, Tag, article_co_authors,
)
from blogcms.models.user import User
from blogcms.schemas.article import ArticleCreate, ArticleUpdate
from blogcms.services.article_lifecycle import apply_status_transition, utcnow
from blogcms.utils.slugs import slugify

# Campos que se copian tal cual del payload al modelo
_PLAIN_FIELDS = (
    "title", "content", "excerpt", "featured_image", "meta_title",
    "meta_description", "keywords", "canonical_url",
)


def get_article(db: Session, article_id: int) -> Optional[Article]:
    """
    Obtiene un artículo por su ID.
    """
    return db.get(Article, article_id)


def get_article_by_slug(db: Session, slug: str) -> Optional[Article]:
    return db.query(Article).filter(Article.slug == slug).first()


def unique_slug(db: Session, base: str, exclude_id: Optional[int] = None) -> str:
    """
    Devuelve `base` o `base-2`, `base-3`... hasta encontrar uno libre.
    """
    candidate = base
    suffix = 2
    while True:
        query = db.query(Article.id).filter(Article.slug == candidate)
        if exclude_id is not None:
            query = query.filter(Article.id != exclude_id)
        if query.first() is None:
            return candidate
        candidate = f"{base}-{suffix}"
        suffix += 1


def _resolve_slug(db: Session, requested: Optional[str], title: str, exclude_id: Optional[int] = None) -> str:
    if requested is None:
        return unique_slug(db, slugify(title), exclude_id=exclude_id)
    existing = get_article_by_slug(db, requested)
    if existing is not None and existing.id != exclude_id:
        raise DomainValidationError("An article with this slug already exists", field="slug")
    return requested


def get_articles_by_author(db: Session, author_id: int) -> List[Article]:
    """
    Artículos donde el usuario es autor principal o coautor.
    """
    co_authored = db.query(article_co_authors.c.article_id).filter(
        article_co_authors.c.user_id == author_id
    )
    return (
        db.query(Article)
        .filter(or_(Article.author_id == author_id, Article.id.in_(co_authored)))
        .order_by(desc(Article.updated_at), desc(Article.id))
        .all()
    )


def get_articles_by_status(db: Session, author_id: int, status: ArticleStatusEnum) -> List[Article]:
    return (
        db.query(Article)
        .filter(Article.author_id == author_id, Article.status == status)
        .order_by(desc(Article.updated_at), desc(Article.id))
        .all()
    )


def get_articles(
    db: Session,
    status: Optional[ArticleStatusEnum] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Article]:
    """
    Listado administrativo con filtro opcional por estado.
    """
    query = db.query(Article)
    if status is not None:
        query = query.filter(Article.status == status)
    return query.order_by(desc(Article.updated_at), desc(Article.id)).offset(skip).limit(limit).all()


def get_published_articles(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    author_id: Optional[int] = None,
    category_slug: Optional[str] = None,
    tag_slug: Optional[str] = None,
) -> List[Article]:
    """
    Artículos realmente visibles (published=True), los más recientes primero.
    """
    query = db.query(Article).filter(Article.published.is_(True))
    if author_id is not None:
        query = query.filter(Article.author_id == author_id)
    if category_slug:
        query = query.filter(Article.categories.any(Category.slug == category_slug))
    if tag_slug:
        query = query.filter(Article.tags.any(Tag.slug == tag_slug))
    return (
        query.order_by(desc(Article.published_at), desc(Article.id))
        .offset(skip)
        .limit(limit)
        .all()
    )


def _load_by_ids(db: Session, model, ids: List[int], field: str) -> list:
    ids = list(dict.fromkeys(ids))
    if not ids:
        return []
    rows = db.query(model).filter(model.id.in_(ids)).all()
    missing = sorted(set(ids) - {row.id for row in rows})
    if missing:
        raise DomainValidationError(f"Unknown ids: {missing}", field=field)
    return rows


def set_article_relations(
    db: Session,
    article: Article,
    category_ids: Optional[List[int]] = None,
    tag_ids: Optional[List[int]] = None,
    co_author_ids: Optional[List[int]] = None,
) -> Article:
    """
    Reemplaza categorías, etiquetas y coautores. `None` deja la relación intacta.
    El autor principal nunca forma parte de sus propios coautores.
    """
    if category_ids is not None:
        article.categories = _load_by_ids(db, Category, category_ids, "categoryIds")
    if tag_ids is not None:
        article.tags = _load_by_ids(db, Tag, tag_ids, "tagIds")
    if co_author_ids is not None:
        wanted = [user_id for user_id in co_author_ids if user_id != article.author_id]
        article.co_authors = _load_by_ids(db, User, wanted, "coAuthorIds")
    return article


def create_article(
    db: Session, article_in: ArticleCreate, author_id: int, now: Optional[datetime] = None
) -> Article:
    """
    Crea un artículo. Siempre nace como borrador y el estado solicitado
    se aplica después con la regla del ciclo de vida.
    """
    data = article_in.model_dump(include=set(_PLAIN_FIELDS))
    db_article = Article(
        **data,
        slug=_resolve_slug(db, article_in.slug, article_in.title),
        author_id=author_id,
        status=ArticleStatusEnum.draft,
        published=False,
        view_count=0,
    )
    set_article_relations(
        db, db_article,
        category_ids=article_in.category_ids,
        tag_ids=article_in.tag_ids,
        co_author_ids=article_in.co_author_ids,
    )
    if article_in.status != ArticleStatusEnum.draft:
        apply_status_transition(
            db_article, article_in.status,
            scheduled_publish_at=article_in.scheduled_publish_at, now=now,
        )
    db.add(db_article)
    db.commit()
    db.refresh(db_article)
    return db_article


def update_article(
    db: Session, article_id: int, article_update: ArticleUpdate, now: Optional[datetime] = None
) -> Optional[Article]:
    """
    Actualiza un artículo existente. Un cambio de estado pasa por la regla del ciclo de vida.
    """
    db_article = get_article(db, article_id)
    if db_article is None:
        return None

    update_data = article_update.model_dump(exclude_unset=True)
    for field in _PLAIN_FIELDS:
        if field in update_data:
            if update_data[field] is None and field in ("title", "content"):
                continue
            setattr(db_article, field, update_data[field])

    if "slug" in update_data and update_data["slug"] and update_data["slug"] != db_article.slug:
        db_article.slug = _resolve_slug(db, update_data["slug"], db_article.title, exclude_id=db_article.id)

    set_article_relations(
        db, db_article,
        category_ids=update_data.get("category_ids"),
        tag_ids=update_data.get("tag_ids"),
        co_author_ids=update_data.get("co_author_ids"),
    )

    if update_data.get("status") is not None:
        apply_status_transition(
            db_article, update_data["status"],
            scheduled_publish_at=update_data.get("scheduled_publish_at"), now=now,
        )
    elif "scheduled_publish_at" in update_data and db_article.status == ArticleStatusEnum.published:
        # Reprogramar un artículo aprobado sin cambiar su estado
        apply_status_transition(
            db_article, ArticleStatusEnum.published,
            scheduled_publish_at=update_data["scheduled_publish_at"], now=now,
        )

    db_article.updated_at = now or utcnow()
    db.add(db_article)
    db.commit()
    db.refresh(db_article)
    return db_article


def update_article_status(
    db: Session,
    article_id: int,
    status: ArticleStatusEnum,
    *,
    scheduled_publish_at: Optional[datetime] = None,
    reviewed_by: Optional[int] = None,
    review_remarks: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[Article]:
    """
    Cambia el estado de un artículo. Tanto el cambio directo como la revisión
    del administrador (con o sin programación) usan esta función.
    """
    db_article = get_article(db, article_id)
    if db_article is None:
        return None
    now = now or utcnow()

    apply_status_transition(db_article, status, scheduled_publish_at=scheduled_publish_at, now=now)
    if reviewed_by is not None:
        db_article.reviewed_by = reviewed_by
        db_article.reviewed_at = now
        db_article.review_remarks = review_remarks
    db_article.updated_at = now

    db.add(db_article)
    db.commit()
    db.refresh(db_article)
    return db_article


def delete_article(db: Session, article_id: int) -> bool:
    """
    Elimina un artículo (y sus comentarios y relaciones).
    """
    db_article = get_article(db, article_id)
    if db_article is None:
        return False
    db.delete(db_article)
    db.commit()
    return True


def increment_view_count(db: Session, article_id: int) -> None:
    # UPDATE atómico para no perder visitas concurrentes
    db.execute(
        update(Article)
        .where(Article.id == article_id)
        .values(view_count=Article.view_count + 1)
        .execution_options(synchronize_session="fetch")
    )
    db.commit()


def count_articles_by_status(db: Session) -> Dict[str, int]:
    rows = db.query(Article.status, func.count(Article.id)).group_by(Article.status).all()
    counts = {status.value: 0 for status in ArticleStatusEnum}
    for status, total in rows:
        counts[ArticleStatusEnum(status).value] = total
    return counts


def count_pending_scheduled(db: Session) -> int:
    return (
        db.query(func.count(Article.id))
        .filter(
            Article.status == ArticleStatusEnum.published,
            Article.published.is_(False),
            Article.scheduled_publish_at.isnot(None),
        )
        .scalar()
    )


def total_views(db: Session) -> int:
    return db.query(func.coalesce(func.sum(Article.view_count), 0)).scalar()
