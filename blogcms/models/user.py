# blogcms/models/user.py
import enum
from sqlalchemy import (
    Boolean, Column, Integer, String, Text,
    TIMESTAMP, Enum as SAEnum, func, false
)
from sqlalchemy.orm import relationship

from blogcms.db.base import Base, JSONType


class UserRoleEnum(str, enum.Enum):
    admin = "admin"
    author = "author"


class User(Base):
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(
        SAEnum(UserRoleEnum, name='user_role_enum', native_enum=False, length=20),
        nullable=False, server_default=UserRoleEnum.author.value
    )
    bio = Column(Text)
    avatar_url = Column(String(500))
    banner_url = Column(String(500))
    # {"twitter": "https://...", "github": "https://..."}
    social_links = Column(JSONType)
    can_publish = Column(Boolean, server_default=false(), default=False, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)

    articles = relationship("Article", back_populates="author", foreign_keys="Article.author_id")
    assets = relationship("Asset", back_populates="owner")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRoleEnum.admin
