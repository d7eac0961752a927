import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from military_assets.schemas.common import RequestModel


class PurchaseCreateSchema(RequestModel):
    base_id: uuid.UUID
    asset_type_id: uuid.UUID
    quantity: int = Field(gt=0, strict=True)
    purchase_date: date
    unit_cost: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    total_cost: Optional[Decimal] = Field(None, ge=0, max_digits=16, decimal_places=2)
    vendor: Optional[str] = Field(None, max_length=200)
    delivery_date: Optional[date] = None
    notes: Optional[str] = None


class PurchaseOutSchema(BaseModel):
    id: uuid.UUID
    base_id: uuid.UUID
    base_name: str
    asset_type_id: uuid.UUID
    asset_type_name: str
    quantity: int
    unit_cost: Optional[Decimal]
    total_cost: Optional[Decimal]
    vendor: Optional[str]
    purchase_date: date
    delivery_date: Optional[date]
    notes: Optional[str]
    created_by_id: uuid.UUID
    created_by: Optional[str]
    created_at: datetime
