from datetime import datetime
from typing import Optional

from pydantic import Field

from blogcms.schemas.common import CamelModel


class CategoryCreate(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    slug: Optional[str] = Field(default=None, min_length=2, max_length=120)
    description: Optional[str] = None


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    slug: Optional[str] = Field(default=None, min_length=2, max_length=120)
    description: Optional[str] = None


class Category(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class TagCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, min_length=1, max_length=120)


class Tag(CamelModel):
    id: int
    name: str
    slug: str
    created_at: Optional[datetime] = None
