from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from carwash.auth_utils import get_current_user
from carwash.database import get_db
from carwash.models.common import success
from carwash.services import wash_records, workers
from carwash.services import worker_stats as service

router = APIRouter(
    prefix="/api/worker-stats",
    tags=["worker-stats"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", name="worker_stats")
def worker_stats(
    period: str = Query("day", description="day, week or month"),
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    month: Optional[str] = Query(None, description="YYYY-MM"),
    db: Session = Depends(get_db),
):
    date_range = service.resolve_period(period, date, month)

    # Fresh read of the window, aggregated in memory
    records = wash_records.list_records(db, date_range)
    result = service.aggregate(records, workers.list_workers_by_name(db))
    return success(service.serialize(result, period, date_range))
