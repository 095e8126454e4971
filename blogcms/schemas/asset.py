from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from blogcms.schemas.common import CamelModel, parse_json_field


class AssetCreate(CamelModel):
    """
    Metadatos de un archivo ya almacenado por el backend de subida.
    """
    filename: str = Field(min_length=1, max_length=255)
    original_name: str = Field(min_length=1, max_length=255)
    path: str = Field(min_length=1, max_length=500)
    url: str = Field(min_length=1, max_length=500)
    mimetype: str = Field(min_length=1, max_length=100)
    size: int = Field(ge=0)
    title: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class AssetUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None


class AssetSearch(CamelModel):
    query: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    mimetype: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class Asset(CamelModel):
    id: int
    filename: str
    original_name: str
    path: str
    url: str
    mimetype: str
    size: int
    user_id: int
    title: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, value):
        return parse_json_field(value) or []


class AssetPage(CamelModel):
    assets: List[Asset]
    total: int
    page: int
    limit: int
