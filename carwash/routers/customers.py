from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from carwash.auth_utils import get_current_user
from carwash.database import get_db
from carwash.models.common import success
from carwash.services import customers as service

router = APIRouter(
    prefix="/api/customers",
    tags=["customers"],
    dependencies=[Depends(get_current_user)],
)


@router.get("/search", name="search_customer")
def search_customer(plate: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Returning-customer lookup while the plate is being typed."""
    profile = service.search_customer(db, plate)
    if profile is None:
        return success(None)
    return success(profile.model_dump(by_alias=True, mode="json"))
