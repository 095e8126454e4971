import json
from typing import List, Optional, Tuple

from sqlalchemy import String, cast, desc, func, or_, type_coerce
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Session

from blogcms.models.asset import Asset
from blogcms.schemas.asset import AssetCreate, AssetSearch, AssetUpdate


def get_asset(db: Session, asset_id: int) -> Optional[Asset]:
    return db.get(Asset, asset_id)


def get_assets_by_user(db: Session, user_id: int) -> List[Asset]:
    return (
        db.query(Asset)
        .filter(Asset.user_id == user_id)
        .order_by(desc(Asset.created_at), desc(Asset.id))
        .all()
    )


def _tag_condition(db: Session, tag: str):
    """
    Condición "el arreglo de tags contiene `tag`".
    En PostgreSQL usa el operador JSONB @>; en otros motores busca el
    elemento completo (con comillas) dentro del JSON serializado, que se
    guarda con el mismo `json.dumps` que se usa aquí.
    """
    if db.get_bind().dialect.name == "postgresql":
        return type_coerce(Asset.tags, JSONB).contains([tag])
    # instr no interpreta comodines y distingue mayúsculas
    return func.instr(cast(Asset.tags, String), json.dumps(tag)) > 0


def search_assets(db: Session, params: AssetSearch, user_id: int) -> Tuple[List[Asset], int]:
    """
    Busca assets del usuario por texto libre (title, description, original_name),
    prefijo de mimetype y tags (al menos uno de los solicitados), con paginación.
    El total se calcula con el mismo conjunto de filtros.
    """
    conditions = [Asset.user_id == user_id]

    if params.query:
        term = f"%{params.query}%"
        conditions.append(
            or_(
                Asset.title.ilike(term),
                Asset.description.ilike(term),
                Asset.original_name.ilike(term),
            )
        )

    if params.mimetype:
        # 'image/' debe coincidir con 'image/png'
        conditions.append(Asset.mimetype.like(f"{params.mimetype}%"))

    if params.tags:
        conditions.append(or_(*[_tag_condition(db, tag) for tag in params.tags]))

    total = db.query(func.count(Asset.id)).filter(*conditions).scalar()

    offset = (params.page - 1) * params.limit
    assets = (
        db.query(Asset)
        .filter(*conditions)
        .order_by(desc(Asset.created_at), desc(Asset.id))
        .offset(offset)
        .limit(params.limit)
        .all()
    )
    return assets, int(total or 0)


def create_asset(db: Session, asset_in: AssetCreate, user_id: int) -> Asset:
    db_asset = Asset(**asset_in.model_dump(), user_id=user_id)
    db.add(db_asset)
    db.commit()
    db.refresh(db_asset)
    return db_asset


def update_asset(db: Session, asset_id: int, asset_update: AssetUpdate) -> Optional[Asset]:
    db_asset = get_asset(db, asset_id)
    if db_asset is None:
        return None
    for field, value in asset_update.model_dump(exclude_unset=True).items():
        setattr(db_asset, field, value)
    db.add(db_asset)
    db.commit()
    db.refresh(db_asset)
    return db_asset


def delete_asset(db: Session, asset_id: int) -> bool:
    db_asset = get_asset(db, asset_id)
    if db_asset is None:
        return False
    db.delete(db_asset)
    db.commit()
    return True
