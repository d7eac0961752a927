import uuid
from typing import List, Optional

from pydantic import BaseModel


class MovementTotals(BaseModel):
    purchased: int = 0
    transferred_in: int = 0
    transferred_out: int = 0
    assigned: int = 0
    expended: int = 0
    net_movement: int = 0


class BalanceTotals(BaseModel):
    current_balance: int = 0
    available_quantity: int = 0
    reserved_quantity: int = 0


class BaseMetrics(BaseModel):
    base_id: uuid.UUID
    base_name: str
    base_code: str
    balances: BalanceTotals
    movements: MovementTotals


class DashboardSchema(BaseModel):
    base_id: Optional[uuid.UUID]
    asset_type_id: Optional[uuid.UUID]
    totals: BalanceTotals
    movements: MovementTotals
    bases: List[BaseMetrics]
