from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator, model_validator

from carwash.models.common import CamelModel, OutModel, blank_to_none, clean_plate
from carwash.models.enums import PaymentType, RecordStatus, WashType
from carwash.models.worker import WorkerOut


# ----------------------------------------------------
# Input payloads
# ----------------------------------------------------
class WashRecordCreate(CamelModel):
    """
    Intake of a car.
    FREE washes are forced to amount 0 with no payment type; any other wash
    needs a payment type only once an amount has been paid.
    """
    plate_number: str = Field(..., max_length=50)
    car_type: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=50)
    wash_type: WashType
    payment_type: Optional[PaymentType] = None
    amount_paid: float = Field(0.0, ge=0)
    tip_amount: float = Field(0.0, ge=0)
    payment_received: bool = False
    worker_id: Optional[str] = None
    # Creates the worker on the fly when no worker_id is given
    worker_name: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None

    @field_validator("plate_number")
    @classmethod
    def normalize_plate(cls, value):
        value = clean_plate(value)
        if not value:
            raise ValueError("Plate number is required")
        return value

    @field_validator("car_type", "phone_number", "notes", "worker_id", "worker_name")
    @classmethod
    def strip_text(cls, value):
        return blank_to_none(value)

    @model_validator(mode="after")
    def check_payment(self):
        if self.wash_type == WashType.FREE:
            self.amount_paid = 0.0
            self.payment_type = None
        elif self.amount_paid > 0 and self.payment_type is None:
            raise ValueError("Payment type is required for paid washes")
        return self


# Fields the edit form may send but never as null
_NOT_NULLABLE = ("plate_number", "wash_type", "amount_paid", "tip_amount", "payment_received", "entry_time")


class WashRecordUpdate(CamelModel):
    plate_number: Optional[str] = Field(None, max_length=50)
    car_type: Optional[str] = Field(None, max_length=100)
    phone_number: Optional[str] = Field(None, max_length=50)
    wash_type: Optional[WashType] = None
    payment_type: Optional[PaymentType] = None
    amount_paid: Optional[float] = Field(None, ge=0)
    tip_amount: Optional[float] = Field(None, ge=0)
    payment_received: Optional[bool] = None
    worker_id: Optional[str] = None
    notes: Optional[str] = None
    entry_time: Optional[datetime] = None
    finish_time: Optional[datetime] = None

    @field_validator("plate_number")
    @classmethod
    def normalize_plate(cls, value):
        if value is None:
            return None
        value = clean_plate(value)
        if not value:
            raise ValueError("Plate number is required")
        return value

    @field_validator("car_type", "phone_number", "notes", "worker_id")
    @classmethod
    def strip_text(cls, value):
        return blank_to_none(value)

    @model_validator(mode="after")
    def reject_nulls(self):
        for name in _NOT_NULLABLE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class WashRecordFinish(CamelModel):
    payment_type: Optional[PaymentType] = None
    amount_paid: Optional[float] = Field(None, ge=0)
    tip_amount: Optional[float] = Field(None, ge=0)


class WashRecordCancel(CamelModel):
    amount_paid: Optional[float] = Field(None, ge=0)
    payment_type: Optional[PaymentType] = None
    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, value):
        return blank_to_none(value)


class PaymentStatusUpdate(CamelModel):
    payment_received: bool


class ProofUpload(CamelModel):
    # Base64 image, plain or as a data: URL
    instapay_proof: str = Field(..., min_length=1)


# ----------------------------------------------------
# Output
# ----------------------------------------------------
class WashRecordOut(OutModel):
    id: str
    plate_number: str
    car_type: Optional[str] = None
    phone_number: Optional[str] = None
    wash_type: WashType
    payment_type: Optional[PaymentType] = None
    amount_paid: float
    tip_amount: float
    payment_received: bool
    instapay_proof: Optional[str] = None
    status: RecordStatus
    entry_time: datetime
    finish_time: Optional[datetime] = None
    elapsed_minutes: Optional[int] = None
    notes: Optional[str] = None
    worker_id: Optional[str] = None
    worker: Optional[WorkerOut] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
