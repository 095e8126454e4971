from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blogcms.core.deps import require_author
from blogcms.crud import crud_article, crud_user
from blogcms.db.session import get_db
from blogcms.models.blog import ArticleStatusEnum
from blogcms.models.user import User
from blogcms.schemas.article import Article, AuthorDashboard
from blogcms.schemas.user import UserProfileUpdate, UserPublic

router = APIRouter()


@router.get("/dashboard", response_model=AuthorDashboard)
def read_dashboard(db: Session = Depends(get_db), current_user: User = Depends(require_author)):
    """
    Estadísticas del autor sobre sus artículos (propios y como coautor).
    Un artículo aprobado con fecha futura cuenta como programado, no como publicado.
    """
    articles = crud_article.get_articles_by_author(db, current_user.id)
    stats = {"published": 0, "scheduled": 0, "in_review": 0, "drafts": 0, "total_views": 0}
    for article in articles:
        stats["total_views"] += article.view_count or 0
        if article.published:
            stats["published"] += 1
        elif article.status == ArticleStatusEnum.published:
            stats["scheduled"] += 1
        elif article.status == ArticleStatusEnum.review:
            stats["in_review"] += 1
        else:
            stats["drafts"] += 1
    return {"stats": stats, "articles": articles}


@router.get("/profile", response_model=UserPublic)
def read_profile(current_user: User = Depends(require_author)):
    return current_user


@router.patch("/profile", response_model=UserPublic)
def update_profile(
    profile: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_author),
):
    return crud_user.update_user_profile(db, current_user.id, profile)


@router.get("/articles", response_model=List[Article])
def read_my_articles(db: Session = Depends(get_db), current_user: User = Depends(require_author)):
    return crud_article.get_articles_by_author(db, current_user.id)


@router.get("/articles/{status}", response_model=List[Article])
def read_my_articles_by_status(
    status: ArticleStatusEnum,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_author),
):
    """
    Artículos propios filtrados por estado (draft, review o published).
    """
    return crud_article.get_articles_by_status(db, current_user.id, status)
