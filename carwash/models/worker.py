from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from carwash.models.common import CamelModel, OutModel
from carwash.models.enums import WorkerRole


def clean_worker_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Worker name is required")
    return value


class WorkerCreate(CamelModel):
    name: str = Field(..., max_length=100)
    role: WorkerRole = WorkerRole.CARWASH

    @field_validator("name")
    @classmethod
    def clean_name(cls, value):
        return clean_worker_name(value)


class WorkerUpdate(CamelModel):
    name: Optional[str] = Field(None, max_length=100)
    role: Optional[WorkerRole] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def clean_name(cls, value):
        return clean_worker_name(value)


class WorkerOut(OutModel):
    id: str
    name: str
    role: WorkerRole
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
