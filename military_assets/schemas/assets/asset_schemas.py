import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from military_assets.models.enums.asset_status import AssetCondition, AssetStatus
from military_assets.models.enums.assignment_status import AssignmentStatus
from military_assets.schemas.common import RequestModel


class AssetCreateSchema(RequestModel):
    asset_type_id: uuid.UUID
    base_id: uuid.UUID
    serial_number: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    manufacturer: Optional[str] = Field(None, max_length=100)
    condition_status: AssetCondition = AssetCondition.new
    acquisition_date: Optional[date] = None
    acquisition_cost: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    notes: Optional[str] = None


class AssetUpdateSchema(RequestModel):
    model: Optional[str] = Field(None, max_length=100)
    manufacturer: Optional[str] = Field(None, max_length=100)
    condition_status: Optional[AssetCondition] = None
    current_status: Optional[Literal["available", "maintenance", "disposed"]] = None
    notes: Optional[str] = None


class AssetOutSchema(BaseModel):
    id: uuid.UUID
    asset_type_id: uuid.UUID
    asset_type_name: str
    base_id: uuid.UUID
    base_name: str
    serial_number: Optional[str]
    model: Optional[str]
    manufacturer: Optional[str]
    current_status: AssetStatus
    condition_status: AssetCondition
    acquisition_date: Optional[date]
    acquisition_cost: Optional[Decimal]
    notes: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]


class AssetAssignmentHistorySchema(BaseModel):
    id: uuid.UUID
    assigned_to_user_id: uuid.UUID
    assigned_to_username: str
    assignment_date: date
    expected_return_date: Optional[date]
    actual_return_date: Optional[date]
    status: AssignmentStatus


class AssetDetailSchema(AssetOutSchema):
    recent_assignments: List[AssetAssignmentHistorySchema] = []
