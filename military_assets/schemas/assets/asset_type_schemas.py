import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from military_assets.schemas.common import RequestModel


class AssetTypeCreateSchema(RequestModel):
    name: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    unit_of_measure: str = Field("unit", min_length=1, max_length=50)


class AssetTypeUpdateSchema(RequestModel):
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None


class AssetTypeOutSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    category: str
    description: Optional[str]
    unit_of_measure: str
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime]
