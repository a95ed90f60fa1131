import logging

from fastapi import APIRouter, Request

from carwash import errors
from carwash.auth_utils import login, logout, verify_password
from carwash.models.auth import LoginRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", name="login")
def login_process(request: Request, payload: LoginRequest):
    """Checks the shared password and opens a session."""
    if not payload.password:
        raise errors.ValidationError("Password is required")

    if not verify_password(payload.password):
        logger.warning("Rejected login from %s", request.client.host if request.client else "unknown")
        raise errors.AuthError("Invalid password")

    login(request)
    return {"success": True}


@router.post("/logout", name="logout")
def logout_process(request: Request):
    """Clears the session."""
    logout(request)
    return {"success": True}
