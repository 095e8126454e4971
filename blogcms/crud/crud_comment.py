from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from blogcms.core.errors import DomainValidationError
from blogcms.models.blog import Comment
from blogcms.schemas.comment import CommentCreate


def get_comment(db: Session, comment_id: int) -> Optional[Comment]:
    return db.get(Comment, comment_id)


def get_comments_for_article(db: Session, article_id: int) -> List[Comment]:
    """
    Comentarios de primer nivel aprobados; las respuestas cuelgan de `replies`.
    """
    return (
        db.query(Comment)
        .filter(
            Comment.article_id == article_id,
            Comment.parent_id.is_(None),
            Comment.is_approved.is_(True),
        )
        .order_by(Comment.created_at, Comment.id)
        .all()
    )


def count_comments(db: Session) -> int:
    return db.query(func.count(Comment.id)).scalar()


def create_comment(db: Session, article_id: int, comment_in: CommentCreate) -> Comment:
    """
    Crea un comentario. Si es respuesta, incrementa `reply_count` del padre.
    """
    parent = None
    if comment_in.parent_id is not None:
        parent = get_comment(db, comment_in.parent_id)
        if parent is None or parent.article_id != article_id:
            raise DomainValidationError("Parent comment not found on this article", field="parentId")

    db_comment = Comment(
        article_id=article_id,
        parent_id=comment_in.parent_id,
        content=comment_in.content,
        author_name=comment_in.author_name,
        author_email=comment_in.author_email,
    )
    db.add(db_comment)
    if parent is not None:
        parent.reply_count = Comment.reply_count + 1
    db.commit()
    db.refresh(db_comment)
    if parent is not None:
        db.refresh(parent)
    return db_comment


def delete_comment(db: Session, comment_id: int) -> bool:
    """
    Elimina un comentario (y sus respuestas) y actualiza el contador del padre.
    """
    db_comment = get_comment(db, comment_id)
    if db_comment is None:
        return False
    if db_comment.parent_id is not None:
        parent = get_comment(db, db_comment.parent_id)
        if parent is not None:
            parent.reply_count = Comment.reply_count - 1
    db.delete(db_comment)
    db.commit()
    return True
