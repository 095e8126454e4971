from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from blogcms.core.deps import require_admin, require_auth
from blogcms.crud import crud_taxonomy
from blogcms.db.session import get_db
from blogcms.models.user import User
from blogcms.schemas.taxonomy import Category, CategoryCreate, CategoryUpdate, Tag, TagCreate

router = APIRouter()


@router.get("/categories", response_model=List[Category])
def read_categories(db: Session = Depends(get_db)):
    return crud_taxonomy.get_categories(db)


@router.post("/categories", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(
    category_in: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """
    Crea una categoría. Si no se envía slug se genera a partir del nombre.
    """
    return crud_taxonomy.create_category(db, category_in)


@router.patch("/categories/{category_id}", response_model=Category)
def update_category(
    category_id: int,
    category_update: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    category = crud_taxonomy.update_category(db, category_id, category_update)
    if category is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    if not crud_taxonomy.delete_category(db, category_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/tags", response_model=List[Tag])
def read_tags(db: Session = Depends(get_db)):
    return crud_taxonomy.get_tags(db)


@router.post("/tags", response_model=Tag, status_code=status.HTTP_201_CREATED)
def create_tag(
    tag_in: TagCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
):
    """
    Cualquier usuario autenticado puede crear etiquetas desde el editor.
    """
    return crud_taxonomy.create_tag(db, tag_in)


@router.delete("/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(
    tag_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    if not crud_taxonomy.delete_tag(db, tag_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
