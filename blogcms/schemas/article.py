from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field, field_validator

from blogcms.models.blog import ArticleStatusEnum
from blogcms.schemas.common import CamelModel, as_utc, parse_json_field
from blogcms.schemas.taxonomy import Category, Tag
from blogcms.schemas.user import AuthorSummary


class ArticleBase(CamelModel):
    """
    Propiedades compartidas de un artículo.
    """
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    slug: Optional[str] = Field(default=None, min_length=1, max_length=255)
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    meta_title: Optional[str] = Field(default=None, max_length=255)
    meta_description: Optional[str] = Field(
        default=None, max_length=160, description="Meta description should be at most 160 characters"
    )
    keywords: List[str] = Field(default_factory=list)
    canonical_url: Optional[str] = None


class ArticleCreate(ArticleBase):
    """
    Schema para crear un artículo. El estado solicitado se aplica
    a través del ciclo de vida, partiendo siempre de borrador.
    """
    status: ArticleStatusEnum = ArticleStatusEnum.draft
    scheduled_publish_at: Optional[datetime] = None
    category_ids: List[int] = Field(default_factory=list)
    tag_ids: List[int] = Field(default_factory=list)
    co_author_ids: List[int] = Field(default_factory=list)

    @field_validator("scheduled_publish_at")
    @classmethod
    def normalize_schedule(cls, value):
        return as_utc(value)


class ArticleUpdate(CamelModel):
    """
    Schema para actualizar un artículo. El flag `published` no es editable:
    sólo lo cambian el ciclo de vida y el scheduler.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = Field(default=None, min_length=1, max_length=255)
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    meta_title: Optional[str] = Field(default=None, max_length=255)
    meta_description: Optional[str] = Field(default=None, max_length=160)
    keywords: Optional[List[str]] = None
    canonical_url: Optional[str] = None
    status: Optional[ArticleStatusEnum] = None
    scheduled_publish_at: Optional[datetime] = None
    category_ids: Optional[List[int]] = None
    tag_ids: Optional[List[int]] = None
    co_author_ids: Optional[List[int]] = None

    @field_validator("scheduled_publish_at")
    @classmethod
    def normalize_schedule(cls, value):
        return as_utc(value)


class ArticleStatusUpdate(CamelModel):
    status: ArticleStatusEnum
    scheduled_publish_at: Optional[datetime] = None

    @field_validator("scheduled_publish_at")
    @classmethod
    def normalize_schedule(cls, value):
        return as_utc(value)


class ReviewDecision(CamelModel):
    """
    Decisión de un administrador sobre un artículo en revisión:
    aprobar (published), programar (published + fecha) o rechazar (draft + remarks).
    """
    status: ArticleStatusEnum
    remarks: Optional[str] = None
    scheduled_publish_at: Optional[datetime] = None

    @field_validator("scheduled_publish_at")
    @classmethod
    def normalize_schedule(cls, value):
        return as_utc(value)


class Article(CamelModel):
    """
    Schema para devolver un artículo tal como está en la base de datos.
    """
    id: int
    title: str
    slug: str
    content: str
    excerpt: Optional[str] = None
    author_id: int
    status: ArticleStatusEnum
    published: bool
    featured_image: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    canonical_url: Optional[str] = None
    scheduled_publish_at: Optional[datetime] = None
    view_count: int = 0
    review_remarks: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None

    @field_validator("keywords", mode="before")
    @classmethod
    def parse_keywords(cls, value):
        return parse_json_field(value) or []


class ArticleFull(Article):
    """
    Artículo con autor, categorías, etiquetas y coautores.
    """
    author: Optional[AuthorSummary] = None
    categories: List[Category] = Field(default_factory=list)
    tags: List[Tag] = Field(default_factory=list)
    co_authors: List[AuthorSummary] = Field(default_factory=list)


class ArticlePublic(CamelModel):
    """
    Vista pública de un artículo publicado (sin campos de revisión).
    """
    id: int
    title: str
    slug: str
    content: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    canonical_url: Optional[str] = None
    view_count: int = 0
    published_at: Optional[datetime] = None
    author: Optional[AuthorSummary] = None
    categories: List[Category] = Field(default_factory=list)
    tags: List[Tag] = Field(default_factory=list)
    co_authors: List[AuthorSummary] = Field(default_factory=list)

    @field_validator("keywords", mode="before")
    @classmethod
    def parse_keywords(cls, value):
        return parse_json_field(value) or []


class ArticleStats(CamelModel):
    published: int
    scheduled: int
    in_review: int
    drafts: int
    total_views: int


class AuthorDashboard(CamelModel):
    stats: ArticleStats
    articles: List[Article]


class SweepResult(CamelModel):
    success: bool
    published: int
    message: str


class AuthorPublicProfile(AuthorSummary):
    """
    Perfil público de un autor con sus artículos en línea.
    """
    banner_url: Optional[str] = None
    social_links: Dict[str, str] = Field(default_factory=dict)
    articles: List[ArticlePublic] = Field(default_factory=list)

    @field_validator("social_links", mode="before")
    @classmethod
    def parse_social_links(cls, value):
        return parse_json_field(value) or {}
