from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from blogcms.api.v1.endpoints.articles import get_article_or_404
from blogcms.core.deps import require_admin
from blogcms.crud import crud_article, crud_comment, crud_user
from blogcms.db.session import get_db
from blogcms.models.blog import ArticleStatusEnum
from blogcms.models.user import User, UserRoleEnum
from blogcms.schemas.article import Article, ReviewDecision, SweepResult
from blogcms.schemas.user import AuthorCreate, PermissionsUpdate, UserProfileUpdate, UserPublic
from blogcms.services.article_lifecycle import validate_review_decision
from blogcms.services.scheduler import publish_scheduled_articles

router = APIRouter()


@router.get("/dashboard")
def read_dashboard(db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    """
    Resumen para el panel de administración.
    """
    by_status = crud_article.count_articles_by_status(db)
    return {
        "stats": {
            "totalUsers": db.query(func.count(User.id)).scalar(),
            "totalAuthors": len(crud_user.get_authors(db)),
            "articlesByStatus": by_status,
            "pendingReview": by_status[ArticleStatusEnum.review.value],
            "scheduled": crud_article.count_pending_scheduled(db),
            "pageViews": crud_article.total_views(db),
            "comments": crud_comment.count_comments(db),
        },
        "recentArticles": [
            Article.model_validate(article).model_dump(by_alias=True, mode="json")
            for article in crud_article.get_articles(db, limit=5)
        ],
    }


@router.get("/articles", response_model=List[Article])
def read_articles(
    status: Optional[ArticleStatusEnum] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Listado de artículos; `?status=review` para la cola de aprobación.
    """
    return crud_article.get_articles(db, status=status, skip=skip, limit=limit)


@router.patch("/articles/{article_id}/status", response_model=Article)
def review_article(
    article_id: int,
    decision: ReviewDecision,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Aprobar (status=published), programar (published + scheduledPublishAt)
    o rechazar (status=draft, remarks obligatorio).
    """
    get_article_or_404(db, article_id)
    remarks = validate_review_decision(decision.status, decision.remarks)
    return crud_article.update_article_status(
        db, article_id, decision.status,
        scheduled_publish_at=decision.scheduled_publish_at,
        reviewed_by=current_user.id,
        review_remarks=remarks,
    )


@router.get("/authors", response_model=List[UserPublic])
def read_authors(db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    return crud_user.get_authors(db)


@router.post("/authors", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def create_author(
    author_in: AuthorCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    if crud_user.get_user_by_email(db, email=author_in.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    return crud_user.create_user(
        db,
        name=author_in.name,
        email=author_in.email,
        password=author_in.password,
        role=UserRoleEnum.author,
        bio=author_in.bio,
        can_publish=author_in.can_publish,
    )


@router.patch("/authors/{user_id}/permissions", response_model=UserPublic)
def update_author_permissions(
    user_id: int,
    permissions: PermissionsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Concede o retira a un autor el permiso de publicar directamente.
    """
    author = crud_user.get_user(db, user_id)
    if author is None or author.role != UserRoleEnum.author:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Author not found")
    return crud_user.set_can_publish(db, user_id, permissions.can_publish)


@router.get("/profile", response_model=UserPublic)
def read_admin_profile(current_user: User = Depends(require_admin)):
    return current_user


@router.patch("/profile", response_model=UserPublic)
def update_admin_profile(
    profile: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return crud_user.update_user_profile(db, current_user.id, profile)


@router.post("/scheduler/run", response_model=SweepResult)
def run_scheduler(db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    """
    Ejecuta un barrido de publicaciones programadas inmediatamente.
    """
    return publish_scheduled_articles(db)
