import uuid
from typing import Optional, Literal

from pydantic import BaseModel, Field

from military_assets.models.enums.role import Role
from military_assets.schemas.common import RequestModel


class LoginRequest(RequestModel):
    username: str = Field(min_length=1, max_length=255, description="Username or email")
    password: str = Field(min_length=1)


class RefreshRequest(RequestModel):
    refresh_token: str = Field(min_length=1)


class TokenSchema(BaseModel):
    access_token: str
    refresh_token: Optional[str]
    token_type: Literal["bearer"] = "bearer"


class ProfileSchema(BaseModel):
    id: uuid.UUID
    username: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Role
    base_id: Optional[uuid.UUID] = None
    base_name: Optional[str] = None


class LoginResponseData(BaseModel):
    auth: TokenSchema
    user: ProfileSchema
