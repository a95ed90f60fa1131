from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from starlette import status

from carwash import date_utils
from carwash.auth_utils import get_current_user
from carwash.database import get_db
from carwash.models.common import dump, success
from carwash.models.mechanic import MechanicRecordCreate, MechanicRecordOut, MechanicRecordUpdate
from carwash.models.wash_record import PaymentStatusUpdate
from carwash.services import mechanic as service

router = APIRouter(
    prefix="/api/mechanic",
    tags=["mechanic"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", name="list_mechanic_records")
def list_mechanic_records(
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    month: Optional[str] = Query(None, description="YYYY-MM"),
    db: Session = Depends(get_db),
):
    records = service.list_records(db, date_utils.resolve_range(date, month))
    return success(dump(MechanicRecordOut, records))


@router.post("", name="create_mechanic_record", status_code=status.HTTP_201_CREATED)
def create_mechanic_record(payload: MechanicRecordCreate, db: Session = Depends(get_db)):
    """Oil change or other service; the total is computed here and frozen."""
    return success(dump(MechanicRecordOut, service.create_record(db, payload)))


@router.patch("/{record_id}", name="update_mechanic_record")
def update_mechanic_record(record_id: str, payload: MechanicRecordUpdate, db: Session = Depends(get_db)):
    return success(dump(MechanicRecordOut, service.update_record(db, record_id, payload)))


@router.delete("/{record_id}", name="delete_mechanic_record")
def delete_mechanic_record(record_id: str, db: Session = Depends(get_db)):
    service.delete_record(db, record_id)
    return success(None)


@router.patch("/{record_id}/payment", name="mechanic_record_payment")
def update_payment_status(record_id: str, payload: PaymentStatusUpdate, db: Session = Depends(get_db)):
    record = service.set_payment_received(db, record_id, payload.payment_received)
    return success(dump(MechanicRecordOut, record))
