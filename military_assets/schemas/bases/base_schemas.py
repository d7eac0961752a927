import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from military_assets.schemas.common import RequestModel


class BaseCreateSchema(RequestModel):
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=20)
    location: str = Field(min_length=1, max_length=200)
    contact_info: Optional[str] = Field(None, max_length=500)


class BaseUpdateSchema(RequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    location: Optional[str] = Field(None, min_length=1, max_length=200)
    contact_info: Optional[str] = Field(None, max_length=500)


class CommanderHandoverSchema(RequestModel):
    new_commander_id: uuid.UUID
    handover_date: date
    handover_notes: Optional[str] = Field(None, max_length=2000)


class BaseOutSchema(BaseModel):
    id: uuid.UUID
    name: str
    code: str
    location: str
    contact_info: Optional[str]
    commander_id: Optional[uuid.UUID]
    commander_username: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime]


class BaseDetailSchema(BaseOutSchema):
    asset_type_count: int = 0
    total_current_balance: int = 0
    total_available_quantity: int = 0
    total_reserved_quantity: int = 0


class CommanderHandoverOutSchema(BaseModel):
    id: uuid.UUID
    base_id: uuid.UUID
    previous_commander_id: Optional[uuid.UUID]
    previous_commander_username: Optional[str] = None
    new_commander_id: uuid.UUID
    new_commander_username: Optional[str] = None
    handover_date: date
    notes: Optional[str]
    performed_by_id: uuid.UUID
    created_at: datetime
