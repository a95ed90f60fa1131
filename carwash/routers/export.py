from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from starlette.responses import Response

from carwash import date_utils
from carwash.auth_utils import get_current_user
from carwash.database import get_db
from carwash.services import export as service
from carwash.services import wash_records

router = APIRouter(
    prefix="/api/export",
    tags=["export"],
    dependencies=[Depends(get_current_user)],
)


def _download(db: Session, date_range, report_type: str, label: str) -> Response:
    records = wash_records.list_records(db, date_range, newest_first=False)
    content = service.generate_report(records, report_type, label)
    return Response(
        content=content,
        media_type=service.CONTENT_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{service.export_filename(label)}"'},
    )


@router.get("/daily", name="export_daily")
def export_daily(date: Optional[str] = Query(None, description="YYYY-MM-DD"), db: Session = Depends(get_db)):
    label = date or date_utils.business_today().isoformat()
    return _download(db, date_utils.day_range(label), "daily", label)


@router.get("/monthly", name="export_monthly")
def export_monthly(month: Optional[str] = Query(None, description="YYYY-MM"), db: Session = Depends(get_db)):
    label = month or date_utils.current_month()
    return _download(db, date_utils.month_range(label), "monthly", label)
