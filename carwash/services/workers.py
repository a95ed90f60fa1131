import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from carwash import errors
from carwash.database_models import MechanicRecord, WashRecord, Worker
from carwash.models.enums import WorkerRole
from carwash.models.worker import WorkerCreate, WorkerUpdate

logger = logging.getLogger(__name__)


def list_workers(db: Session) -> List[Worker]:
    """Active workers first, then by name."""
    return db.query(Worker).order_by(Worker.is_active.desc(), Worker.name).all()


def list_workers_by_name(db: Session) -> List[Worker]:
    return db.query(Worker).order_by(Worker.name).all()


def get_worker(db: Session, worker_id: str) -> Worker:
    worker = db.query(Worker).filter(Worker.id == worker_id).first()
    if not worker:
        raise errors.NotFoundError("Worker not found")
    return worker


def find_by_name(db: Session, name: str) -> Optional[Worker]:
    return db.query(Worker).filter(Worker.name == name).first()


def _ensure_name_free(db: Session, name: str, worker_id: Optional[str] = None):
    existing = find_by_name(db, name)
    if existing and existing.id != worker_id:
        raise errors.ConflictError("Worker with this name already exists")


def create_worker(db: Session, payload: WorkerCreate) -> Worker:
    _ensure_name_free(db, payload.name)

    worker = Worker(name=payload.name, role=payload.role.value, is_active=True)
    db.add(worker)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against another insert with the same name
        db.rollback()
        raise errors.ConflictError("Worker with this name already exists")
    db.refresh(worker)
    logger.info("Created worker %s (%s)", worker.name, worker.id)
    return worker


def get_or_create_worker(db: Session, name: str) -> Worker:
    """Used by intake when a new worker is typed in next to the car."""
    worker = find_by_name(db, name)
    if worker:
        return worker
    return create_worker(db, WorkerCreate(name=name, role=WorkerRole.CARWASH))


def update_worker(db: Session, worker_id: str, payload: WorkerUpdate) -> Worker:
    worker = get_worker(db, worker_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("name") is not None:
        _ensure_name_free(db, changes["name"], worker.id)
        worker.name = changes["name"]
    if changes.get("role") is not None:
        worker.role = changes["role"].value
    if changes.get("is_active") is not None:
        worker.is_active = changes["is_active"]

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise errors.ConflictError("Worker with this name already exists")
    db.refresh(worker)
    return worker


def count_records(db: Session, worker_id: str) -> int:
    wash_count = db.query(WashRecord).filter(WashRecord.worker_id == worker_id).count()
    mechanic_count = db.query(MechanicRecord).filter(MechanicRecord.worker_id == worker_id).count()
    return wash_count + mechanic_count


def delete_worker(db: Session, worker_id: str) -> bool:
    """
    Removes a worker. Workers referenced by any record are only retired
    (is_active=False) so their history stays intact.
    Returns True when the row was really deleted.
    """
    worker = get_worker(db, worker_id)

    if count_records(db, worker_id) > 0:
        worker.is_active = False
        db.commit()
        logger.info("Retired worker %s (%s), records kept", worker.name, worker.id)
        return False

    db.delete(worker)
    db.commit()
    logger.info("Deleted worker %s (%s)", worker.name, worker_id)
    return True


def seed_default_workers(db: Session, names: List[str]) -> int:
    """Creates the default staff the first time the app starts."""
    created = 0
    for name in names:
        if find_by_name(db, name) is None:
            db.add(Worker(name=name, role=WorkerRole.CARWASH.value, is_active=True))
            created += 1
    if created:
        db.commit()
        logger.info("Seeded %d default workers", created)
    return created
