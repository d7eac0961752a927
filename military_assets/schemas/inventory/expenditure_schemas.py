import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from military_assets.schemas.common import RequestModel


class ExpenditureCreateSchema(RequestModel):
    base_id: uuid.UUID
    asset_type_id: uuid.UUID
    quantity: int = Field(gt=0, strict=True)
    expenditure_date: date
    reason: str = Field(min_length=1, max_length=500)
    operation_name: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None


class ExpenditureOutSchema(BaseModel):
    id: uuid.UUID
    base_id: uuid.UUID
    base_name: str
    asset_type_id: uuid.UUID
    asset_type_name: str
    quantity: int
    expenditure_date: date
    reason: str
    operation_name: Optional[str]
    notes: Optional[str]
    authorized_by_id: uuid.UUID
    authorized_by: Optional[str]
    created_at: datetime
