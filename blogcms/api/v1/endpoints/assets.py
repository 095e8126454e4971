from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from blogcms.core.deps import require_auth
from blogcms.crud import crud_asset
from blogcms.db.session import get_db
from blogcms.models.asset import Asset as AssetModel
from blogcms.models.user import User
from blogcms.schemas.asset import Asset, AssetCreate, AssetPage, AssetSearch, AssetUpdate

router = APIRouter()


def get_owned_asset_or_404(db: Session, asset_id: int, user: User) -> AssetModel:
    asset = crud_asset.get_asset(db, asset_id)
    if not asset:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
    if asset.user_id != user.id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to access this asset",
        )
    return asset


@router.post("", response_model=Asset, status_code=status.HTTP_201_CREATED)
def create_asset(
    asset_in: AssetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
):
    """
    Registra los metadatos de un archivo ya subido.
    """
    return crud_asset.create_asset(db, asset_in, user_id=current_user.id)


@router.get("", response_model=List[Asset])
def read_assets(db: Session = Depends(get_db), current_user: User = Depends(require_auth)):
    return crud_asset.get_assets_by_user(db, current_user.id)


@router.get("/search", response_model=AssetPage)
def search_assets(
    query: Optional[str] = None,
    tags: List[str] = Query(default=[]),
    mimetype: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
):
    """
    Búsqueda en la biblioteca del usuario por texto, etiquetas
    (`?tags=a&tags=b`, cualquiera de ellas) y prefijo de mimetype.
    """
    params = AssetSearch(query=query, tags=tags, mimetype=mimetype, page=page, limit=limit)
    items, total = crud_asset.search_assets(db, params, user_id=current_user.id)
    return {"assets": items, "total": total, "page": params.page, "limit": params.limit}


@router.get("/{asset_id}", response_model=Asset)
def read_asset(asset_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_auth)):
    return get_owned_asset_or_404(db, asset_id, current_user)


@router.patch("/{asset_id}", response_model=Asset)
def update_asset(
    asset_id: int,
    asset_update: AssetUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
):
    get_owned_asset_or_404(db, asset_id, current_user)
    return crud_asset.update_asset(db, asset_id, asset_update)


@router.delete("/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_asset(asset_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_auth)):
    get_owned_asset_or_404(db, asset_id, current_user)
    crud_asset.delete_asset(db, asset_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
