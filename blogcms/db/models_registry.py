# blogcms/db/models_registry.py
# Este archivo importa todos los modelos para que Alembic pueda detectarlos
# Se importa en alembic/env.py
from blogcms.db.base import Base
from blogcms.models.user import User
from blogcms.models.blog import (
    Article, Category, Tag, Comment,
    article_categories, article_tags, article_co_authors,
)
from blogcms.models.asset import Asset

# Exportar Base para uso en Alembic
__all__ = [
    "Base", "User", "Article", "Category", "Tag", "Comment", "Asset",
    "article_categories", "article_tags", "article_co_authors",
]
