# blogcms/api/v1/endpoints/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from blogcms.core.deps import get_token_service, require_auth
from blogcms.core.security import TokenService
from blogcms.crud import crud_user
from blogcms.db.session import get_db
from blogcms.models.user import User, UserRoleEnum
from blogcms.schemas.token import Token
from blogcms.schemas.user import LoginResponse, Permissions, UserLogin, UserPublic, UserRegister

router = APIRouter()


def _issue_token(token_service: TokenService, user: User) -> str:
    return token_service.create_access_token(
        user_id=user.id, email=user.email, role=UserRoleEnum(user.role).value
    )


@router.post(
    "/auth/register",
    response_model=UserPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar nuevo autor",
)
def register_user(user_data: UserRegister, db: Session = Depends(get_db)):
    """
    Registro público. Las cuentas nuevas siempre son autores; los administradores
    se crean con el script create_admin.
    """
    if crud_user.get_user_by_email(db, email=user_data.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    return crud_user.create_user(
        db,
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
        role=UserRoleEnum.author,
    )


@router.post("/auth/login", response_model=LoginResponse, summary="Autenticación con Email y Contraseña")
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
):
    user = crud_user.authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return {"user": user, "token": _issue_token(token_service, user)}


@router.post("/auth/token", response_model=Token, summary="Login OAuth2 (formulario)")
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
):
    """
    Variante con formulario OAuth2 password, usada por la documentación interactiva.
    """
    user = crud_user.authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"access_token": _issue_token(token_service, user), "token_type": "bearer"}


@router.get("/auth/me", response_model=UserPublic)
def read_me(current_user: User = Depends(require_auth)):
    return current_user


@router.get("/auth/permissions", response_model=Permissions)
def read_permissions(current_user: User = Depends(require_auth)):
    return {"role": current_user.role, "can_publish": current_user.is_admin or current_user.can_publish}
