"""
Lifecycle of a wash record.

    IN_PROGRESS --finish--> FINISHED
    IN_PROGRESS --cancel--> CANCELLED

Both end states are terminal. Finish and cancel are written as a conditional
UPDATE on ``status = IN_PROGRESS`` so that of two concurrent transitions on
the same record exactly one wins; the loser gets ``InvalidStateError``.
"""

import base64
import binascii
import logging
import re
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from carwash import date_utils, errors
from carwash.database_models import WashRecord
from carwash.date_utils import DateRange
from carwash.models.enums import PaymentType, RecordStatus, WashType
from carwash.models.wash_record import (
    WashRecordCancel,
    WashRecordCreate,
    WashRecordFinish,
    WashRecordUpdate,
)
from carwash.services import workers as workers_service

logger = logging.getLogger(__name__)

_DATA_URL = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,(?P<data>.+)$", re.DOTALL)


def _check_payment_rule(record: WashRecord):
    """FREE carries no payment; anything paid must say how it was paid."""
    if record.wash_type == WashType.FREE.value:
        record.amount_paid = 0.0
        record.payment_type = None
        record.instapay_proof = None
    elif record.amount_paid > 0 and record.payment_type is None:
        raise errors.ValidationError("Payment type is required for paid washes")


def _refresh_elapsed(record: WashRecord):
    if record.entry_time and record.finish_time:
        record.elapsed_minutes = date_utils.elapsed_minutes(record.entry_time, record.finish_time)
    else:
        record.elapsed_minutes = None


# ----------------------------------------------------
# Reads
# ----------------------------------------------------
def get_record(db: Session, record_id: str) -> WashRecord:
    record = (
        db.query(WashRecord)
        .options(joinedload(WashRecord.worker))
        .filter(WashRecord.id == record_id)
        .first()
    )
    if not record:
        raise errors.NotFoundError("Record not found")
    return record


def list_records(
    db: Session,
    date_range: DateRange,
    status: Optional[RecordStatus] = None,
    wash_type: Optional[WashType] = None,
    worker_id: Optional[str] = None,
    payment_type: Optional[PaymentType] = None,
    newest_first: bool = True,
) -> List[WashRecord]:
    query = db.query(WashRecord).options(joinedload(WashRecord.worker)).filter(
        WashRecord.entry_time >= date_utils.to_db(date_range.start),
        WashRecord.entry_time <= date_utils.to_db(date_range.end),
    )
    if status is not None:
        query = query.filter(WashRecord.status == status.value)
    if wash_type is not None:
        query = query.filter(WashRecord.wash_type == wash_type.value)
    if worker_id:
        query = query.filter(WashRecord.worker_id == worker_id)
    if payment_type is not None:
        query = query.filter(WashRecord.payment_type == payment_type.value)

    order = WashRecord.entry_time.desc() if newest_first else WashRecord.entry_time.asc()
    return query.order_by(order).all()


# ----------------------------------------------------
# Transitions
# ----------------------------------------------------
def create_record(db: Session, payload: WashRecordCreate) -> WashRecord:
    # 1. Resolve the worker, creating it inline if only a name was given
    worker_id = payload.worker_id
    if worker_id:
        workers_service.get_worker(db, worker_id)
    elif payload.worker_name:
        worker_id = workers_service.get_or_create_worker(db, payload.worker_name).id

    # 2. Build the record; the schema already applied the FREE rule
    record = WashRecord(
        plate_number=payload.plate_number,
        car_type=payload.car_type,
        phone_number=payload.phone_number,
        wash_type=payload.wash_type.value,
        payment_type=payload.payment_type.value if payload.payment_type else None,
        amount_paid=payload.amount_paid,
        tip_amount=payload.tip_amount,
        payment_received=payload.payment_received,
        worker_id=worker_id,
        notes=payload.notes,
        status=RecordStatus.IN_PROGRESS.value,
        entry_time=date_utils.utcnow(),
        finish_time=None,
        elapsed_minutes=None,
    )
    _check_payment_rule(record)

    # 3. Save
    db.add(record)
    db.commit()
    logger.info("Car %s checked in (%s, %s)", record.plate_number, record.wash_type, record.id)
    return get_record(db, record.id)


def _transition(db: Session, record_id: str, values: dict) -> int:
    """Applies ``values`` only if the record is still in progress."""
    return (
        db.query(WashRecord)
        .filter(
            WashRecord.id == record_id,
            WashRecord.status == RecordStatus.IN_PROGRESS.value,
        )
        .update(values, synchronize_session=False)
    )


def finish_record(db: Session, record_id: str, payload: Optional[WashRecordFinish] = None) -> WashRecord:
    payload = payload or WashRecordFinish()
    record = get_record(db, record_id)
    if record.status != RecordStatus.IN_PROGRESS.value:
        raise errors.InvalidStateError(f"Record is already {record.status.lower()}")

    # 1. Work out the final payment on a scratch copy of the fields
    changes = payload.model_dump(exclude_unset=True)
    amount_paid = record.amount_paid if payload.amount_paid is None else payload.amount_paid
    tip_amount = record.tip_amount if payload.tip_amount is None else payload.tip_amount
    payment_type = record.payment_type
    if "payment_type" in changes:
        payment_type = changes["payment_type"].value if changes["payment_type"] else None

    if record.wash_type == WashType.FREE.value:
        amount_paid = 0.0
        payment_type = None
    elif amount_paid > 0 and payment_type is None:
        raise errors.ValidationError("Payment type is required for paid washes")

    # 2. Stamp the finish
    finish_time = date_utils.utcnow()
    values = {
        WashRecord.status: RecordStatus.FINISHED.value,
        WashRecord.finish_time: finish_time,
        WashRecord.elapsed_minutes: date_utils.elapsed_minutes(record.entry_time, finish_time),
        WashRecord.amount_paid: amount_paid,
        WashRecord.tip_amount: tip_amount,
        WashRecord.payment_type: payment_type,
        WashRecord.updated_at: finish_time,
    }
    if payment_type != PaymentType.INSTAPAY.value:
        values[WashRecord.instapay_proof] = None

    # 3. Conditional write; zero rows means someone else got there first
    if _transition(db, record_id, values) == 0:
        db.rollback()
        raise errors.InvalidStateError("Record is already finished")
    db.commit()

    record = get_record(db, record_id)
    logger.info("Car %s finished after %s min (%s)", record.plate_number, record.elapsed_minutes, record.id)
    return record


def cancel_record(db: Session, record_id: str, payload: Optional[WashRecordCancel] = None) -> WashRecord:
    """The customer left before the wash was completed."""
    payload = payload or WashRecordCancel()
    record = get_record(db, record_id)
    if record.status != RecordStatus.IN_PROGRESS.value:
        raise errors.InvalidStateError(f"Record is already {record.status.lower()}")

    amount_paid = payload.amount_paid or 0.0
    payment_type = payload.payment_type.value if payload.payment_type and amount_paid > 0 else None

    now = date_utils.utcnow()
    values = {
        WashRecord.status: RecordStatus.CANCELLED.value,
        WashRecord.finish_time: now,
        WashRecord.amount_paid: amount_paid,
        WashRecord.payment_type: payment_type,
        WashRecord.payment_received: amount_paid > 0,
        WashRecord.notes: payload.notes,
        WashRecord.updated_at: now,
    }
    if payment_type != PaymentType.INSTAPAY.value:
        values[WashRecord.instapay_proof] = None

    if _transition(db, record_id, values) == 0:
        db.rollback()
        raise errors.InvalidStateError("Record is no longer in progress")
    db.commit()

    record = get_record(db, record_id)
    logger.info("Car %s cancelled, %.2f paid (%s)", record.plate_number, record.amount_paid, record.id)
    return record


def update_record(db: Session, record_id: str, payload: WashRecordUpdate) -> WashRecord:
    record = get_record(db, record_id)
    changes = payload.changes()

    # 1. Referenced worker must exist
    if changes.get("worker_id"):
        workers_service.get_worker(db, changes["worker_id"])

    try:
        _apply_changes(record, changes)
    except errors.CarWashError:
        db.rollback()
        raise

    db.commit()
    return get_record(db, record_id)


def _apply_changes(record: WashRecord, changes: dict):
    # 2. Copy the simple fields
    for name in ("plate_number", "car_type", "phone_number", "amount_paid",
                 "tip_amount", "payment_received", "worker_id", "notes"):
        if name in changes:
            setattr(record, name, changes[name])
    if "wash_type" in changes:
        record.wash_type = changes["wash_type"].value
    if "payment_type" in changes:
        record.payment_type = changes["payment_type"].value if changes["payment_type"] else None
        if record.payment_type != PaymentType.INSTAPAY.value:
            record.instapay_proof = None

    # 3. Timestamps keep the status invariant and drive elapsed_minutes
    if "entry_time" in changes or "finish_time" in changes:
        if "entry_time" in changes:
            record.entry_time = date_utils.to_db(changes["entry_time"])
        if "finish_time" in changes:
            finish_time = date_utils.to_db(changes["finish_time"])
            if record.status == RecordStatus.IN_PROGRESS.value and finish_time is not None:
                raise errors.ValidationError("A car still in progress cannot have a finish time")
            if record.status != RecordStatus.IN_PROGRESS.value and finish_time is None:
                raise errors.ValidationError("Finish time is required once a car is finished or cancelled")
            record.finish_time = finish_time
        _refresh_elapsed(record)

    # 4. FREE washes carry no payment
    _check_payment_rule(record)


def delete_record(db: Session, record_id: str):
    record = get_record(db, record_id)
    plate_number = record.plate_number
    db.delete(record)
    db.commit()
    logger.info("Deleted wash record %s (%s)", record_id, plate_number)


# ----------------------------------------------------
# Single-field mutations
# ----------------------------------------------------
def set_payment_received(db: Session, record_id: str, payment_received: bool) -> WashRecord:
    record = get_record(db, record_id)
    record.payment_received = payment_received
    db.commit()
    return get_record(db, record_id)


def decode_proof(image: str) -> bytes:
    """Checks that the proof is a decodable base64 image payload."""
    match = _DATA_URL.match(image.strip())
    data = match.group("data") if match else image.strip()
    try:
        decoded = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise errors.ValidationError("Proof must be a base64 encoded image")
    if not decoded:
        raise errors.ValidationError("Proof image is empty")
    return decoded


def set_proof(db: Session, record_id: str, image: str) -> WashRecord:
    record = get_record(db, record_id)
    if record.payment_type != PaymentType.INSTAPAY.value:
        raise errors.ValidationError("Proof can only be attached to InstaPay payments")
    decode_proof(image)
    record.instapay_proof = image.strip()
    db.commit()
    return get_record(db, record_id)


def clear_proof(db: Session, record_id: str) -> WashRecord:
    record = get_record(db, record_id)
    record.instapay_proof = None
    db.commit()
    return get_record(db, record_id)
