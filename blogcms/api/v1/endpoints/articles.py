from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from blogcms.core.deps import require_admin, require_auth
from blogcms.crud import crud_article, crud_comment
from blogcms.db.session import get_db
from blogcms.models.blog import Article as ArticleModel, ArticleStatusEnum
from blogcms.models.user import User
from blogcms.schemas.article import (
    Article, ArticleCreate, ArticleFull, ArticlePublic, ArticleStatusUpdate, ArticleUpdate,
)
from blogcms.schemas.comment import Comment, CommentCreate
from blogcms.services.article_lifecycle import authorize_transition, is_article_editor

router = APIRouter()


def get_article_or_404(db: Session, article_id: int) -> ArticleModel:
    article = crud_article.get_article(db, article_id)
    if not article:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Article not found")
    return article


def ensure_editor(article: ArticleModel, user: User, action: str = "update") -> None:
    if not is_article_editor(article, user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You don't have permission to {action} this article",
        )


def get_published_or_404(db: Session, article_id: int) -> ArticleModel:
    article = crud_article.get_article(db, article_id)
    if not article or not article.published:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Article not found")
    return article


@router.post("/articles", response_model=Article, status_code=status.HTTP_201_CREATED)
def create_article(
    article_in: ArticleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
):
    """
    Crea un artículo. El autor es el usuario autenticado.
    """
    authorize_transition(current_user, article_in.status)
    return crud_article.create_article(db, article_in, author_id=current_user.id)


@router.get("/articles/published", response_model=List[ArticlePublic])
def read_published_articles(
    skip: int = 0,
    limit: int = 20,
    category: Optional[str] = None,
    tag: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Listado público de artículos en línea. Filtros opcionales por slug de categoría o etiqueta.
    """
    return crud_article.get_published_articles(
        db, skip=skip, limit=min(limit, 100), category_slug=category, tag_slug=tag
    )


@router.get("/articles/{article_id}", response_model=Article)
def read_article(
    article_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
):
    article = get_article_or_404(db, article_id)
    ensure_editor(article, current_user, "view")
    return article


@router.get("/articles/{article_id}/full", response_model=ArticleFull)
def read_article_full(
    article_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
):
    """
    Artículo con autor, categorías, etiquetas y coautores (para el editor).
    """
    article = get_article_or_404(db, article_id)
    ensure_editor(article, current_user, "view")
    return article


@router.get("/articles/{article_id}/preview", response_model=ArticleFull)
def preview_article(
    article_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
):
    """
    Vista previa en cualquier estado, sólo para editores y administradores.
    """
    article = get_article_or_404(db, article_id)
    ensure_editor(article, current_user, "preview")
    return article


@router.get("/articles/{article_id}/public", response_model=ArticlePublic)
def read_public_article(article_id: int, db: Session = Depends(get_db)):
    """
    Vista pública. Sólo artículos en línea; cuenta una visita.
    """
    article = get_published_or_404(db, article_id)
    crud_article.increment_view_count(db, article.id)
    return article


@router.patch("/articles/{article_id}", response_model=Article)
def update_article(
    article_id: int,
    article_update: ArticleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
):
    """
    Actualiza un artículo (autor, coautores o administradores).
    """
    article = get_article_or_404(db, article_id)
    ensure_editor(article, current_user)
    if article_update.status is not None:
        authorize_transition(current_user, article_update.status)
    elif (
        "scheduled_publish_at" in article_update.model_fields_set
        and article.status == ArticleStatusEnum.published
    ):
        # Reprogramar un artículo aprobado equivale a publicarlo
        authorize_transition(current_user, ArticleStatusEnum.published)
    return crud_article.update_article(db, article_id, article_update)


@router.patch("/articles/{article_id}/status", response_model=Article)
def update_article_status(
    article_id: int,
    status_update: ArticleStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
):
    """
    Cambio de estado por parte de un editor: enviar a revisión, volver a borrador
    o publicar (sólo con permiso de publicación).
    """
    article = get_article_or_404(db, article_id)
    ensure_editor(article, current_user)
    authorize_transition(current_user, status_update.status)
    return crud_article.update_article_status(
        db, article_id, status_update.status,
        scheduled_publish_at=status_update.scheduled_publish_at,
    )


@router.delete("/articles/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_article(
    article_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
):
    """
    Elimina un artículo. Sólo el autor principal o un administrador.
    """
    article = get_article_or_404(db, article_id)
    if article.author_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to delete this article",
        )
    crud_article.delete_article(db, article_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/articles/{article_id}/comments", response_model=List[Comment])
def read_comments(article_id: int, db: Session = Depends(get_db)):
    get_published_or_404(db, article_id)
    return crud_comment.get_comments_for_article(db, article_id)


@router.post("/articles/{article_id}/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
def create_comment(article_id: int, comment_in: CommentCreate, db: Session = Depends(get_db)):
    """
    Comentario público (o respuesta a otro comentario) sobre un artículo en línea.
    """
    get_published_or_404(db, article_id)
    return crud_comment.create_comment(db, article_id, comment_in)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    if not crud_comment.delete_comment(db, comment_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
