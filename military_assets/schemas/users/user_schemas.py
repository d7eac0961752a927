import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from military_assets.models.enums.role import Role
from military_assets.schemas.common import RequestModel


class UserCreateSchema(RequestModel):
    username: str = Field(min_length=3, max_length=150)
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    password: str = Field(min_length=8, max_length=128)
    role: Role
    base_id: Optional[uuid.UUID] = None


class UserUpdateSchema(RequestModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = Field(None, min_length=8, max_length=128)
    role: Optional[Role] = None
    base_id: Optional[uuid.UUID] = None
    is_active: Optional[bool] = None


class UserOutSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    role: Role
    base_id: Optional[uuid.UUID]
    base_name: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime]
    created_at: datetime
