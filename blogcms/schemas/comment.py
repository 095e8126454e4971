from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from blogcms.schemas.common import CamelModel


class CommentCreate(CamelModel):
    content: str = Field(min_length=1)
    author_name: str = Field(min_length=1, max_length=255)
    author_email: EmailStr
    parent_id: Optional[int] = None


class Comment(CamelModel):
    id: int
    content: str
    author_name: str
    article_id: int
    parent_id: Optional[int] = None
    reply_count: int = 0
    created_at: datetime
    replies: List["Comment"] = Field(default_factory=list)


Comment.model_rebuild()
