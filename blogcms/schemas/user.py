from datetime import datetime
from typing import Dict, Optional

from pydantic import EmailStr, Field, field_validator

from blogcms.models.user import UserRoleEnum
from blogcms.schemas.common import CamelModel, parse_json_field


class UserRegister(CamelModel):
    """
    Schema para el registro público. Siempre crea autores.
    """
    name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)


class UserLogin(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)


class AuthorCreate(UserRegister):
    """
    Schema para que un administrador dé de alta a un autor.
    """
    bio: Optional[str] = None
    can_publish: bool = False


class UserProfileUpdate(CamelModel):
    """
    Schema para actualizar el perfil. Las URLs pueden ser rutas relativas.
    """
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    banner_url: Optional[str] = None
    social_links: Optional[Dict[str, str]] = None

    @field_validator("social_links", mode="before")
    @classmethod
    def parse_social_links(cls, value):
        return parse_json_field(value)


class PermissionsUpdate(CamelModel):
    can_publish: bool


class UserPublic(CamelModel):
    """
    Usuario sin el hash de contraseña.
    """
    id: int
    name: str
    email: str
    role: UserRoleEnum
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    banner_url: Optional[str] = None
    social_links: Optional[Dict[str, str]] = None
    can_publish: bool = False
    created_at: Optional[datetime] = None

    @field_validator("social_links", mode="before")
    @classmethod
    def parse_social_links(cls, value):
        return parse_json_field(value)


class AuthorSummary(CamelModel):
    id: int
    name: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


class Permissions(CamelModel):
    role: UserRoleEnum
    can_publish: bool


class LoginResponse(CamelModel):
    user: UserPublic
    token: str
