import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AssetBalanceOutSchema(BaseModel):
    base_id: uuid.UUID
    base_name: str
    base_code: str
    asset_type_id: uuid.UUID
    asset_type_name: str
    category: str
    current_balance: int
    available_quantity: int
    reserved_quantity: int
    last_updated: Optional[datetime]


class AssetMovementOutSchema(BaseModel):
    id: uuid.UUID
    base_id: uuid.UUID
    base_name: str
    asset_type_id: uuid.UUID
    asset_type_name: str
    movement_type: str
    quantity_change: int
    reference_type: str
    reference_id: uuid.UUID
    created_by_id: Optional[uuid.UUID]
    created_by: Optional[str]
    created_at: datetime
