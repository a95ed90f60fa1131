from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator, model_validator

from carwash.models.common import CamelModel, OutModel, blank_to_none, clean_plate, normalize_digits
from carwash.models.enums import MechanicCategory, MechanicServiceType, OilType, PaymentType
from carwash.models.worker import WorkerOut


def clean_mechanic_plate(value: str) -> str:
    value = clean_plate(normalize_digits(value))
    if not value:
        raise ValueError("Plate number is required")
    return value


class MechanicRecordCreate(CamelModel):
    plate_number: str = Field(..., max_length=50)
    car_type: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=50)
    category: MechanicCategory

    # OIL_SERVICE
    oil_type: Optional[OilType] = None
    service_type: Optional[MechanicServiceType] = None
    filter_price: Optional[float] = Field(None, ge=0)

    # OTHER_SERVICE
    service_name: Optional[str] = Field(None, max_length=255)
    service_price: Optional[float] = Field(None, ge=0)

    payment_type: Optional[PaymentType] = None
    payment_received: bool = False
    worker_id: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("plate_number")
    @classmethod
    def normalize_plate(cls, value):
        return clean_mechanic_plate(value)

    @field_validator("car_type", "phone_number", "service_name", "worker_id", "notes")
    @classmethod
    def strip_text(cls, value):
        return blank_to_none(value)

    @model_validator(mode="after")
    def check_category_fields(self):
        if self.category == MechanicCategory.OIL_SERVICE:
            if self.oil_type is None:
                raise ValueError("Oil type is required for an oil service")
            if self.service_type is None:
                raise ValueError("Service type is required for an oil service")
        else:
            if not self.service_name:
                raise ValueError("Service name is required")
            if not self.service_price or self.service_price <= 0:
                raise ValueError("Service price is required")
        return self


class MechanicRecordUpdate(CamelModel):
    """Descriptive fields only; prices are frozen at creation."""
    plate_number: Optional[str] = Field(None, max_length=50)
    car_type: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=50)
    payment_type: Optional[PaymentType] = None
    payment_received: Optional[bool] = None
    worker_id: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("plate_number")
    @classmethod
    def normalize_plate(cls, value):
        if value is None:
            raise ValueError("Plate number is required")
        return clean_mechanic_plate(value)

    @field_validator("car_type", "phone_number", "worker_id", "notes")
    @classmethod
    def strip_text(cls, value):
        return blank_to_none(value)

    @field_validator("payment_received")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("paymentReceived cannot be null")
        return value


class MechanicRecordOut(OutModel):
    id: str
    plate_number: str
    car_type: Optional[str] = None
    phone_number: Optional[str] = None
    category: MechanicCategory
    oil_type: Optional[OilType] = None
    service_type: Optional[MechanicServiceType] = None
    oil_price: float
    labor_cost: float
    filter_price: float
    service_name: Optional[str] = None
    service_price: float
    total_amount: float
    payment_type: Optional[PaymentType] = None
    payment_received: bool
    notes: Optional[str] = None
    worker_id: Optional[str] = None
    worker: Optional[WorkerOut] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
