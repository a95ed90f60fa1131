from collections import Counter
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from carwash.database_models import WashRecord
from carwash.models.common import normalize_digits, to_arabic_digits
from carwash.models.customer import CustomerProfile, CustomerVisit

MIN_QUERY_LENGTH = 2
SEARCH_LIMIT = 20
RECENT_VISITS = 5
VIP_VISITS = 5


def favorite_wash_type(wash_types):
    """Most frequent wash type; ties go to the one seen first."""
    counts = Counter(wash_types)
    best = None
    for wash_type in wash_types:
        if best is None or counts[wash_type] > counts[best]:
            best = wash_type
    return best


def search_customer(db: Session, plate: Optional[str]) -> Optional[CustomerProfile]:
    """
    Best matching customer for a (partial) plate typed at intake.
    Plates may be stored with Western or Arabic-Indic digits, so both
    renditions of the query are searched.
    """
    if not plate or len(plate.strip()) < MIN_QUERY_LENGTH:
        return None

    western = normalize_digits(plate.strip()).upper()
    arabic = to_arabic_digits(western)

    records = (
        db.query(WashRecord)
        .filter(or_(
            WashRecord.plate_number.contains(western, autoescape=True),
            WashRecord.plate_number.contains(arabic, autoescape=True),
        ))
        .order_by(WashRecord.entry_time.desc())
        .limit(SEARCH_LIMIT)
        .all()
    )
    if not records:
        return None

    # Distinct plates, most recently seen first
    plates = list(dict.fromkeys(record.plate_number for record in records))

    if western in plates:
        best_plate = western
    elif arabic in plates:
        best_plate = arabic
    else:
        best_plate = plates[0]

    # The search window may hold only part of this plate's history
    visits = (
        db.query(WashRecord)
        .filter(WashRecord.plate_number == best_plate)
        .order_by(WashRecord.entry_time.desc())
        .all()
    )
    last_visit = visits[0]

    return CustomerProfile(
        plate_number=best_plate,
        car_type=last_visit.car_type,
        phone_number=last_visit.phone_number,
        total_visits=len(visits),
        total_spent=sum(v.amount_paid for v in visits),
        last_visit=last_visit.entry_time,
        favorite_wash_type=favorite_wash_type([v.wash_type for v in visits]),
        is_vip=len(visits) >= VIP_VISITS,
        recent_visits=[CustomerVisit.model_validate(v) for v in visits[:RECENT_VISITS]],
    )
