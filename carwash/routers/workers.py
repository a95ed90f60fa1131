from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from starlette import status

from carwash.auth_utils import get_current_user
from carwash.database import get_db
from carwash.models.common import dump, success
from carwash.models.worker import WorkerCreate, WorkerOut, WorkerUpdate
from carwash.services import workers as service

router = APIRouter(
    prefix="/api/workers",
    tags=["workers"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", name="list_workers")
def list_workers(db: Session = Depends(get_db)):
    return success(dump(WorkerOut, service.list_workers(db)))


@router.post("", name="create_worker", status_code=status.HTTP_201_CREATED)
def create_worker(payload: WorkerCreate, db: Session = Depends(get_db)):
    return success(dump(WorkerOut, service.create_worker(db, payload)))


@router.patch("/{worker_id}", name="update_worker")
def update_worker(worker_id: str, payload: WorkerUpdate, db: Session = Depends(get_db)):
    """Rename, change role, or retire/reactivate a worker."""
    return success(dump(WorkerOut, service.update_worker(db, worker_id, payload)))


@router.delete("/{worker_id}", name="delete_worker")
def delete_worker(worker_id: str, db: Session = Depends(get_db)):
    """Hard delete when unused, otherwise the worker is only deactivated."""
    deleted = service.delete_worker(db, worker_id)
    return success({"deleted": deleted, "deactivated": not deleted})
