import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session
from starlette import status

from carwash import date_utils
from carwash.auth_utils import get_current_user
from carwash.database import get_db
from carwash.models.common import dump, success
from carwash.models.enums import WASH_PRICES, PaymentType, RecordStatus, WashType
from carwash.models.wash_record import (
    PaymentStatusUpdate,
    ProofUpload,
    WashRecordCancel,
    WashRecordCreate,
    WashRecordFinish,
    WashRecordOut,
    WashRecordUpdate,
)
from carwash.services import wash_records as service
from carwash.services.notifications import NotificationHook, get_notifier

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/wash-records",
    tags=["wash-records"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", name="list_wash_records")
def list_wash_records(
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    month: Optional[str] = Query(None, description="YYYY-MM"),
    status_filter: Optional[RecordStatus] = Query(None, alias="status"),
    wash_type: Optional[WashType] = Query(None, alias="washType"),
    worker_id: Optional[str] = Query(None, alias="workerId"),
    payment_type: Optional[PaymentType] = Query(None, alias="paymentType"),
    db: Session = Depends(get_db),
):
    """Records of one day (default today) or month, newest first."""
    date_range = date_utils.resolve_range(date, month)
    records = service.list_records(
        db,
        date_range,
        status=status_filter,
        wash_type=wash_type,
        worker_id=worker_id,
        payment_type=payment_type,
    )
    return success(dump(WashRecordOut, records))


@router.get("/prices", name="wash_prices")
def wash_prices():
    """List price per wash type, used to prefill the intake form."""
    return success({wash_type.value: price for wash_type, price in WASH_PRICES.items()})


@router.post("", name="create_wash_record", status_code=status.HTTP_201_CREATED)
def create_wash_record(payload: WashRecordCreate, db: Session = Depends(get_db)):
    record = service.create_record(db, payload)
    return success(dump(WashRecordOut, record))


@router.get("/{record_id}", name="show_wash_record")
def show_wash_record(record_id: str, db: Session = Depends(get_db)):
    return success(dump(WashRecordOut, service.get_record(db, record_id)))


@router.patch("/{record_id}", name="update_wash_record")
def update_wash_record(record_id: str, payload: WashRecordUpdate, db: Session = Depends(get_db)):
    record = service.update_record(db, record_id, payload)
    return success(dump(WashRecordOut, record))


@router.delete("/{record_id}", name="delete_wash_record")
def delete_wash_record(record_id: str, db: Session = Depends(get_db)):
    service.delete_record(db, record_id)
    return success(None)


@router.post("/{record_id}/finish", name="finish_wash_record")
def finish_wash_record(
    record_id: str,
    payload: Optional[WashRecordFinish] = Body(None),
    db: Session = Depends(get_db),
    notify: NotificationHook = Depends(get_notifier),
):
    """Marks the car as done; payment may be settled here too."""
    record = service.finish_record(db, record_id, payload)
    data = dump(WashRecordOut, record)

    # The customer is told the car is ready; the finish stands even if that fails
    data["notificationUrl"] = None
    if record.phone_number:
        try:
            data["notificationUrl"] = notify(record.phone_number)
        except Exception:
            logger.exception("Car ready notification failed for record %s", record.id)
    return success(data)


@router.post("/{record_id}/cancel", name="cancel_wash_record")
def cancel_wash_record(
    record_id: str,
    payload: Optional[WashRecordCancel] = Body(None),
    db: Session = Depends(get_db),
):
    """The customer left before the wash was completed."""
    record = service.cancel_record(db, record_id, payload)
    return success(dump(WashRecordOut, record))


@router.patch("/{record_id}/payment", name="wash_record_payment")
def update_payment_status(record_id: str, payload: PaymentStatusUpdate, db: Session = Depends(get_db)):
    record = service.set_payment_received(db, record_id, payload.payment_received)
    return success(dump(WashRecordOut, record))


@router.post("/{record_id}/proof", name="upload_proof")
def upload_proof(record_id: str, payload: ProofUpload, db: Session = Depends(get_db)):
    """Attaches the InstaPay transfer screenshot."""
    record = service.set_proof(db, record_id, payload.instapay_proof)
    return success(dump(WashRecordOut, record))


@router.delete("/{record_id}/proof", name="delete_proof")
def delete_proof(record_id: str, db: Session = Depends(get_db)):
    record = service.clear_proof(db, record_id)
    return success(dump(WashRecordOut, record))
