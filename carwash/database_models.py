import uuid
from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, TEXT
from sqlalchemy.orm import relationship

from carwash.database import Base
from carwash.date_utils import utcnow
from carwash.models.enums import RecordStatus, WorkerRole


def new_id() -> str:
    return str(uuid.uuid4())


# 1. Staff members
class Worker(Base):
    __tablename__ = "workers"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), unique=True, nullable=False, index=True)
    role = Column(String(20), nullable=False, default=WorkerRole.CARWASH.value)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # A worker is referenced by records, never owns them (no cascade)
    wash_records = relationship("WashRecord", back_populates="worker")
    mechanic_records = relationship("MechanicRecord", back_populates="worker")


# 2. One car wash transaction
class WashRecord(Base):
    __tablename__ = "wash_records"
    id = Column(String(36), primary_key=True, default=new_id)
    plate_number = Column(String(50), nullable=False, index=True)
    car_type = Column(String(100))
    phone_number = Column(String(50))
    wash_type = Column(String(20), nullable=False)
    payment_type = Column(String(20))
    amount_paid = Column(Float, nullable=False, default=0.0)
    tip_amount = Column(Float, nullable=False, default=0.0)
    payment_received = Column(Boolean, nullable=False, default=False)
    instapay_proof = Column(TEXT)
    status = Column(String(20), nullable=False, default=RecordStatus.IN_PROGRESS.value, index=True)
    entry_time = Column(DateTime, nullable=False, default=utcnow, index=True)
    finish_time = Column(DateTime)
    elapsed_minutes = Column(Integer)
    notes = Column(TEXT)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    worker_id = Column(String(36), ForeignKey("workers.id"), nullable=True, index=True)
    worker = relationship("Worker", back_populates="wash_records")


# 3. One mechanic shop transaction (oil change or other service)
class MechanicRecord(Base):
    __tablename__ = "mechanic_records"
    id = Column(String(36), primary_key=True, default=new_id)
    plate_number = Column(String(50), nullable=False, index=True)
    car_type = Column(String(100))
    phone_number = Column(String(50))
    category = Column(String(20), nullable=False)

    # OIL_SERVICE
    oil_type = Column(String(20))
    service_type = Column(String(20))
    oil_price = Column(Float, nullable=False, default=0.0)
    labor_cost = Column(Float, nullable=False, default=0.0)
    filter_price = Column(Float, nullable=False, default=0.0)

    # OTHER_SERVICE
    service_name = Column(String(255))
    service_price = Column(Float, nullable=False, default=0.0)

    # Frozen at creation
    total_amount = Column(Float, nullable=False, default=0.0)
    payment_type = Column(String(20))
    payment_received = Column(Boolean, nullable=False, default=False)
    notes = Column(TEXT)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    worker_id = Column(String(36), ForeignKey("workers.id"), nullable=True, index=True)
    worker = relationship("Worker", back_populates="mechanic_records")
