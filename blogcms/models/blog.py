# blogcms/models/blog.py
import enum
from sqlalchemy import (
    Boolean, Column, Integer, String, Text, ForeignKey, Table,
    TIMESTAMP, Enum as SAEnum, func, false, true
)
from sqlalchemy.orm import relationship

from blogcms.db.base import Base, JSONType


class ArticleStatusEnum(str, enum.Enum):
    draft = "draft"
    review = "review"
    published = "published"


article_categories = Table(
    'article_categories',
    Base.metadata,
    Column('article_id', Integer, ForeignKey('articles.id', ondelete='CASCADE'), primary_key=True),
    Column('category_id', Integer, ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True),
)

article_tags = Table(
    'article_tags',
    Base.metadata,
    Column('article_id', Integer, ForeignKey('articles.id', ondelete='CASCADE'), primary_key=True),
    Column('tag_id', Integer, ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
)

article_co_authors = Table(
    'article_co_authors',
    Base.metadata,
    Column('article_id', Integer, ForeignKey('articles.id', ondelete='CASCADE'), primary_key=True),
    Column('user_id', Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
)


class Category(Base):
    __tablename__ = 'categories'
    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    description = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)


class Tag(Base):
    __tablename__ = 'tags'
    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)


class Article(Base):
    __tablename__ = 'articles'
    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    content = Column(Text, nullable=False)
    excerpt = Column(Text)
    author_id = Column(Integer, ForeignKey('users.id', ondelete='RESTRICT'), nullable=False, index=True)
    status = Column(
        SAEnum(ArticleStatusEnum, name='article_status_enum', native_enum=False, length=20),
        nullable=False, server_default=ArticleStatusEnum.draft.value, index=True
    )
    # Indica si el artículo está realmente visible al público
    published = Column(Boolean, server_default=false(), default=False, nullable=False)
    featured_image = Column(String(500))

    # SEO
    meta_title = Column(String(255))
    meta_description = Column(String(160))
    keywords = Column(JSONType, default=list)
    canonical_url = Column(String(500))

    scheduled_publish_at = Column(TIMESTAMP(timezone=True), index=True)
    view_count = Column(Integer, server_default='0', default=0, nullable=False)

    # Revisión editorial
    review_remarks = Column(Text)
    reviewed_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'))
    reviewed_at = Column(TIMESTAMP(timezone=True))

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    published_at = Column(TIMESTAMP(timezone=True))

    author = relationship("User", back_populates="articles", foreign_keys=[author_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by])
    categories = relationship("Category", secondary=article_categories, order_by="Category.name")
    tags = relationship("Tag", secondary=article_tags, order_by="Tag.name")
    co_authors = relationship("User", secondary=article_co_authors, order_by="User.name")
    comments = relationship("Comment", back_populates="article", cascade="all, delete-orphan")


class Comment(Base):
    __tablename__ = 'comments'
    id = Column(Integer, primary_key=True)
    content = Column(Text, nullable=False)
    author_name = Column(String(255), nullable=False)
    author_email = Column(String(255), nullable=False)
    article_id = Column(Integer, ForeignKey('articles.id', ondelete='CASCADE'), nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey('comments.id', ondelete='CASCADE'), index=True)
    reply_count = Column(Integer, server_default='0', default=0, nullable=False)
    is_approved = Column(Boolean, server_default=true(), default=True, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    article = relationship("Article", back_populates="comments")
    parent = relationship("Comment", remote_side=[id], back_populates="replies")
    replies = relationship("Comment", back_populates="parent", cascade="all, delete-orphan", order_by="Comment.id")
