from typing import Optional

from pydantic import BaseModel


class Token(BaseModel):
    """
    Schema para el token de acceso devuelto por la API (flujo OAuth2 password).
    """
    access_token: str
    token_type: str


class TokenPayload(BaseModel):
    """
    Schema para el payload del token JWT.
    """
    sub: str
    email: Optional[str] = None
    role: str
