from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt


class TokenError(Exception):
    """
    El token JWT es inválido, está mal formado o ha expirado.
    """


class TokenService:
    """
    Emite y valida los tokens de acceso JWT.
    Recibe el secreto y la política de expiración de forma explícita.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def create_access_token(
        self, user_id: int, email: str, role: str, expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Crea un token de acceso JWT con el id, email y rol del usuario.
        """
        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(minutes=self.expire_minutes)
        to_encode = {"exp": expire, "sub": str(user_id), "email": email, "role": role}
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Decodifica y verifica firma y expiración del token.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise TokenError(str(e)) from e
        if payload.get("sub") is None or payload.get("role") is None:
            raise TokenError("Token payload incompleto")
        return payload


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verifica una contraseña contra su hash usando bcrypt directamente.
    Trunca la contraseña a 72 bytes (límite de bcrypt).
    """
    password_bytes = plain_password.encode('utf-8')[:72]
    hashed_bytes = hashed_password.encode('utf-8')

    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # Hash con formato inválido
        return False


def get_password_hash(password: str) -> str:
    """
    Genera el hash de una contraseña usando bcrypt directamente.
    Trunca la contraseña a 72 bytes (límite de bcrypt).
    """
    password_bytes = password.encode('utf-8')[:72]
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')
