import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from military_assets.models.enums.transfer_status import TransferStatus
from military_assets.schemas.common import RequestModel


class TransferCreateSchema(RequestModel):
    from_base_id: uuid.UUID
    to_base_id: uuid.UUID
    asset_type_id: uuid.UUID
    quantity: int = Field(gt=0, strict=True)
    transfer_date: date
    reason: Optional[str] = Field(None, max_length=500)
    tracking_number: Optional[str] = Field(None, min_length=1, max_length=100)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def bases_must_differ(self):
        if self.from_base_id == self.to_base_id:
            raise ValueError("Source and destination bases must differ")
        return self


class TransferUpdateSchema(RequestModel):
    status: TransferStatus
    approved_by: Optional[uuid.UUID] = None
    received_by: Optional[uuid.UUID] = None
    notes: Optional[str] = None


class TransferOutSchema(BaseModel):
    id: uuid.UUID
    from_base_id: uuid.UUID
    from_base_name: str
    to_base_id: uuid.UUID
    to_base_name: str
    asset_type_id: uuid.UUID
    asset_type_name: str
    quantity: int
    transfer_date: date
    reason: Optional[str]
    status: TransferStatus
    tracking_number: str
    notes: Optional[str]
    requested_by_id: uuid.UUID
    requested_by: Optional[str]
    approved_by_id: Optional[uuid.UUID]
    approved_by: Optional[str]
    completed_by_id: Optional[uuid.UUID]
    completed_by: Optional[str]
    completed_at: Optional[datetime]
    created_at: datetime
    updated_at: Optional[datetime]
