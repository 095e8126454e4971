from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from blogcms.core.security import TokenError, TokenService
from blogcms.crud.crud_user import get_user
from blogcms.db.session import get_db
from blogcms.models.user import User, UserRoleEnum
from blogcms.schemas.token import TokenPayload

# auto_error=False: la ausencia de token se responde con 401 desde aquí
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    token: str = Depends(oauth2_scheme),
    token_service: TokenService = Depends(get_token_service),
) -> User:
    """
    Dependencia para obtener el usuario actual desde el token JWT.
    Sin token -> 401; token inválido, expirado o de un usuario inexistente -> 403.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    invalid_token = HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Invalid or expired token",
    )
    try:
        token_data = TokenPayload(**token_service.decode_token(token))
        user_id = int(token_data.sub)
    except (TokenError, ValueError):
        raise invalid_token
    user = get_user(db, user_id)
    if user is None:
        raise invalid_token
    request.state.user_id = user.id
    return user


def require_auth(current_user: User = Depends(get_current_user)) -> User:
    """
    Cualquier usuario autenticado.
    """
    return current_user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRoleEnum.admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


def require_author(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRoleEnum.author:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Author access required")
    return current_user
