import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from carwash import date_utils, errors
from carwash.database_models import MechanicRecord
from carwash.date_utils import DateRange
from carwash.models.enums import MechanicCategory, MechanicServiceType, OilType
from carwash.models.mechanic import MechanicRecordCreate, MechanicRecordUpdate
from carwash.services import workers as workers_service

logger = logging.getLogger(__name__)

OIL_PRICES = {
    OilType.SHELL_4L: 2200,
    OilType.SHELL_5L: 2700,
    OilType.CUSTOMER_OWN: 0,
}

LABOR_COSTS = {
    MechanicServiceType.OIL_ONLY: 200,
    MechanicServiceType.OIL_AND_FILTER: 300,
}

FILTER_PRICE_MIN = 350
FILTER_PRICE_MAX = 500


def compute_total(
    category: MechanicCategory,
    oil_type: Optional[OilType] = None,
    service_type: Optional[MechanicServiceType] = None,
    filter_price: Optional[float] = None,
    service_price: Optional[float] = None,
) -> dict:
    """
    Price breakdown of a mechanic job.
    Returns oil_price, labor_cost, filter_price, service_price and total_amount.
    """
    if category == MechanicCategory.OTHER_SERVICE:
        price = service_price or 0.0
        return {
            "oil_price": 0.0,
            "labor_cost": 0.0,
            "filter_price": 0.0,
            "service_price": price,
            "total_amount": price,
        }

    if oil_type is None or service_type is None:
        raise errors.ValidationError("Oil type and service type are required for an oil service")

    oil_price = OIL_PRICES[oil_type]
    labor_cost = LABOR_COSTS[service_type]
    if service_type == MechanicServiceType.OIL_AND_FILTER:
        if filter_price is None or not FILTER_PRICE_MIN <= filter_price <= FILTER_PRICE_MAX:
            raise errors.ValidationError(
                f"Filter price must be between {FILTER_PRICE_MIN} and {FILTER_PRICE_MAX}"
            )
    else:
        filter_price = 0.0

    return {
        "oil_price": float(oil_price),
        "labor_cost": float(labor_cost),
        "filter_price": float(filter_price),
        "service_price": 0.0,
        "total_amount": float(oil_price + labor_cost + filter_price),
    }


def get_record(db: Session, record_id: str) -> MechanicRecord:
    record = (
        db.query(MechanicRecord)
        .options(joinedload(MechanicRecord.worker))
        .filter(MechanicRecord.id == record_id)
        .first()
    )
    if not record:
        raise errors.NotFoundError("Mechanic record not found")
    return record


def list_records(db: Session, date_range: DateRange) -> List[MechanicRecord]:
    return (
        db.query(MechanicRecord)
        .options(joinedload(MechanicRecord.worker))
        .filter(
            MechanicRecord.created_at >= date_utils.to_db(date_range.start),
            MechanicRecord.created_at <= date_utils.to_db(date_range.end),
        )
        .order_by(MechanicRecord.created_at.desc())
        .all()
    )


def create_record(db: Session, payload: MechanicRecordCreate) -> MechanicRecord:
    if payload.worker_id:
        workers_service.get_worker(db, payload.worker_id)

    prices = compute_total(
        payload.category,
        oil_type=payload.oil_type,
        service_type=payload.service_type,
        filter_price=payload.filter_price,
        service_price=payload.service_price,
    )
    is_oil = payload.category == MechanicCategory.OIL_SERVICE

    record = MechanicRecord(
        plate_number=payload.plate_number,
        car_type=payload.car_type,
        phone_number=payload.phone_number,
        category=payload.category.value,
        oil_type=payload.oil_type.value if is_oil else None,
        service_type=payload.service_type.value if is_oil else None,
        service_name=None if is_oil else payload.service_name,
        payment_type=payload.payment_type.value if payload.payment_type else None,
        payment_received=payload.payment_received,
        worker_id=payload.worker_id,
        notes=payload.notes,
        created_at=date_utils.utcnow(),
        **prices,
    )
    db.add(record)
    db.commit()
    logger.info("Mechanic job %s for %s, total %.2f", record.category, record.plate_number, record.total_amount)
    return get_record(db, record.id)


def update_record(db: Session, record_id: str, payload: MechanicRecordUpdate) -> MechanicRecord:
    record = get_record(db, record_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("worker_id"):
        workers_service.get_worker(db, changes["worker_id"])

    for name in ("plate_number", "car_type", "phone_number", "payment_received", "worker_id", "notes"):
        if name in changes:
            setattr(record, name, changes[name])
    if "payment_type" in changes:
        record.payment_type = changes["payment_type"].value if changes["payment_type"] else None

    db.commit()
    return get_record(db, record_id)


def set_payment_received(db: Session, record_id: str, payment_received: bool) -> MechanicRecord:
    record = get_record(db, record_id)
    record.payment_received = payment_received
    db.commit()
    return get_record(db, record_id)


def delete_record(db: Session, record_id: str):
    record = get_record(db, record_id)
    db.delete(record)
    db.commit()
    logger.info("Deleted mechanic record %s", record_id)
