from datetime import datetime
from typing import List, Optional

from pydantic import Field

from carwash.models.common import OutModel
from carwash.models.enums import RecordStatus, WashType


class CustomerVisit(OutModel):
    id: str
    plate_number: str
    car_type: Optional[str] = None
    phone_number: Optional[str] = None
    wash_type: WashType
    amount_paid: float
    entry_time: datetime
    status: RecordStatus


class CustomerProfile(OutModel):
    plate_number: str
    car_type: Optional[str] = None
    phone_number: Optional[str] = None
    total_visits: int
    total_spent: float
    last_visit: datetime
    favorite_wash_type: WashType
    is_vip: bool = Field(..., alias="isVIP")
    recent_visits: List[CustomerVisit]
