from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from blogcms.crud import crud_article, crud_user
from blogcms.db.session import get_db
from blogcms.models.user import UserRoleEnum
from blogcms.schemas.article import AuthorPublicProfile
from blogcms.schemas.user import AuthorSummary

router = APIRouter()


@router.get("/users/authors", response_model=List[AuthorSummary])
def read_authors(db: Session = Depends(get_db)):
    """
    Lista pública de autores (para el selector de coautores y la página de autores).
    """
    return crud_user.get_authors(db)


@router.get("/authors/{user_id}/public", response_model=AuthorPublicProfile)
def read_author_public_profile(user_id: int, db: Session = Depends(get_db)):
    author = crud_user.get_user(db, user_id)
    if author is None or author.role != UserRoleEnum.author:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Author not found")
    return {
        "id": author.id,
        "name": author.name,
        "bio": author.bio,
        "avatar_url": author.avatar_url,
        "banner_url": author.banner_url,
        "social_links": author.social_links or {},
        "articles": crud_article.get_published_articles(db, author_id=author.id),
    }
