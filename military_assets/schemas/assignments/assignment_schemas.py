import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from military_assets.models.enums.assignment_status import AssignmentStatus
from military_assets.schemas.common import RequestModel


class AssignmentCreateSchema(RequestModel):
    asset_id: uuid.UUID
    assigned_to_user_id: uuid.UUID
    assignment_date: date
    expected_return_date: Optional[date] = None
    purpose: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def return_after_assignment(self):
        if self.expected_return_date and self.expected_return_date < self.assignment_date:
            raise ValueError("expectedReturnDate cannot be before assignmentDate")
        return self


class AssignmentUpdateSchema(RequestModel):
    status: AssignmentStatus
    actual_return_date: Optional[date] = None
    notes: Optional[str] = None


class AssignmentOutSchema(BaseModel):
    id: uuid.UUID
    asset_id: uuid.UUID
    serial_number: Optional[str]
    asset_type_id: uuid.UUID
    asset_type_name: str
    base_id: uuid.UUID
    base_name: str
    assigned_to_user_id: uuid.UUID
    assigned_to_username: str
    assigned_by_id: uuid.UUID
    assigned_by: Optional[str]
    assignment_date: date
    expected_return_date: Optional[date]
    actual_return_date: Optional[date]
    status: AssignmentStatus
    purpose: Optional[str]
    notes: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]
