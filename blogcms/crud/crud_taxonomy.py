from typing import List, Optional

from sqlalchemy.orm import Session

from blogcms.core.errors import DomainValidationError
from blogcms.models.blog import Category, Tag
from blogcms.schemas.taxonomy import CategoryCreate, CategoryUpdate, TagCreate
from blogcms.utils.slugs import slugify


def _ensure_unique(db: Session, model, field: str, value: str, exclude_id: Optional[int] = None) -> None:
    label = "category" if model is Category else "tag"
    query = db.query(model).filter(getattr(model, field) == value)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    if query.first() is not None:
        raise DomainValidationError(f"A {label} with this {field} already exists", field=field)


# --- Categorías ---

def get_categories(db: Session) -> List[Category]:
    return db.query(Category).order_by(Category.name).all()


def get_category(db: Session, category_id: int) -> Optional[Category]:
    return db.get(Category, category_id)


def get_category_by_slug(db: Session, slug: str) -> Optional[Category]:
    return db.query(Category).filter(Category.slug == slug).first()


def create_category(db: Session, category_in: CategoryCreate) -> Category:
    slug = category_in.slug or slugify(category_in.name)
    _ensure_unique(db, Category, "name", category_in.name)
    _ensure_unique(db, Category, "slug", slug)
    db_category = Category(name=category_in.name, slug=slug, description=category_in.description)
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return db_category


def update_category(db: Session, category_id: int, category_update: CategoryUpdate) -> Optional[Category]:
    db_category = get_category(db, category_id)
    if db_category is None:
        return None
    update_data = category_update.model_dump(exclude_unset=True)
    if update_data.get("name"):
        _ensure_unique(db, Category, "name", update_data["name"], exclude_id=category_id)
    if update_data.get("slug"):
        _ensure_unique(db, Category, "slug", update_data["slug"], exclude_id=category_id)
    for field, value in update_data.items():
        if value is None and field in ("name", "slug"):
            continue
        setattr(db_category, field, value)
    db.commit()
    db.refresh(db_category)
    return db_category


def delete_category(db: Session, category_id: int) -> bool:
    db_category = get_category(db, category_id)
    if db_category is None:
        return False
    db.delete(db_category)
    db.commit()
    return True


# --- Etiquetas ---

def get_tags(db: Session) -> List[Tag]:
    return db.query(Tag).order_by(Tag.name).all()


def get_tag(db: Session, tag_id: int) -> Optional[Tag]:
    return db.get(Tag, tag_id)


def get_tag_by_name(db: Session, name: str) -> Optional[Tag]:
    return db.query(Tag).filter(Tag.name == name).first()


def create_tag(db: Session, tag_in: TagCreate) -> Tag:
    slug = tag_in.slug or slugify(tag_in.name)
    _ensure_unique(db, Tag, "name", tag_in.name)
    _ensure_unique(db, Tag, "slug", slug)
    db_tag = Tag(name=tag_in.name, slug=slug)
    db.add(db_tag)
    db.commit()
    db.refresh(db_tag)
    return db_tag


def delete_tag(db: Session, tag_id: int) -> bool:
    db_tag = get_tag(db, tag_id)
    if db_tag is None:
        return False
    db.delete(db_tag)
    db.commit()
    return True
