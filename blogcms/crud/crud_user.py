from typing import List, Optional

from sqlalchemy.orm import Session

from blogcms.core.security import get_password_hash, verify_password
from blogcms.models.user import User, UserRoleEnum
from blogcms.schemas.user import UserProfileUpdate


def get_user(db: Session, user_id: int) -> Optional[User]:
    """
    Obtiene un usuario por su ID.
    """
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """
    Obtiene un usuario por su email.
    """
    return db.query(User).filter(User.email == email.lower()).first()


def get_users_by_ids(db: Session, user_ids: List[int]) -> List[User]:
    if not user_ids:
        return []
    return db.query(User).filter(User.id.in_(user_ids)).all()


def get_authors(db: Session) -> List[User]:
    """
    Lista los usuarios con rol autor, ordenados por nombre.
    """
    return db.query(User).filter(User.role == UserRoleEnum.author).order_by(User.name).all()


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """
    Autentica un usuario verificando email y contraseña.
    """
    user = get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def create_user(
    db: Session,
    *,
    name: str,
    email: str,
    password: str,
    role: UserRoleEnum = UserRoleEnum.author,
    bio: Optional[str] = None,
    can_publish: bool = False,
) -> User:
    """
    Crea un usuario. La contraseña se hashea sólo aquí.
    """
    db_user = User(
        name=name,
        email=email.lower(),
        hashed_password=get_password_hash(password),
        role=role,
        bio=bio,
        can_publish=can_publish,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def update_user_profile(db: Session, user_id: int, profile: UserProfileUpdate) -> Optional[User]:
    """
    Actualiza los campos de perfil enviados. Nunca toca la contraseña.
    """
    db_user = get_user(db, user_id)
    if db_user is None:
        return None
    for field, value in profile.model_dump(exclude_unset=True).items():
        if field == "name" and value is None:
            continue
        setattr(db_user, field, value)
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def set_can_publish(db: Session, user_id: int, can_publish: bool) -> Optional[User]:
    db_user = get_user(db, user_id)
    if db_user is None:
        return None
    db_user.can_publish = can_publish
    db.commit()
    db.refresh(db_user)
    return db_user
