import logging
from functools import lru_cache
from typing import Optional

from fastapi import Request
from passlib.context import CryptContext

from carwash import errors
from carwash.config import settings

logger = logging.getLogger(__name__)

# scrypt needs no native backend
pwd_context = CryptContext(schemes=["scrypt"], deprecated="auto")

SESSION_KEY = "carwash_auth"


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


@lru_cache(maxsize=None)
def _admin_password_hash(password: str) -> Optional[str]:
    if not password:
        return None
    return get_password_hash(password)


def verify_password(plain_password: str) -> bool:
    """Checks the shared staff password."""
    hashed = _admin_password_hash(settings.admin_password)
    if hashed is None:
        logger.warning("ADMIN_PASSWORD is not set; every login will be rejected")
        return False
    return pwd_context.verify(plain_password, hashed)


def login(request: Request):
    request.session[SESSION_KEY] = True


def logout(request: Request):
    request.session.clear()


def get_current_user(request: Request) -> bool:
    """Dependency guarding every /api route except login."""
    if not request.session.get(SESSION_KEY):
        raise errors.AuthError()
    return True
