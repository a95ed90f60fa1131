import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette import status as status_codes
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import JSONResponse

from carwash import errors
from carwash.config import settings

# --- Database ---
from carwash.database import Base, SessionLocal, engine
from carwash import database_models  # noqa: F401  (registers the tables)
from carwash.services.workers import seed_default_workers

# --- Routers ---
from carwash.routers import auth
from carwash.routers.customers import router as customers_router
from carwash.routers.export import router as export_router
from carwash.routers.mechanic import router as mechanic_router
from carwash.routers.wash_records import router as wash_records_router
from carwash.routers.worker_stats import router as worker_stats_router
from carwash.routers.workers import router as workers_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("carwash")


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    if settings.seed_workers:
        db = SessionLocal()
        try:
            seed_default_workers(db, settings.default_worker_names)
        finally:
            db.close()
    yield


app = FastAPI(title="Car Wash - Operations", lifespan=lifespan)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=settings.https_only,
)

app.include_router(auth.router)
app.include_router(wash_records_router)
app.include_router(workers_router)
app.include_router(worker_stats_router)
app.include_router(mechanic_router)
app.include_router(export_router)
app.include_router(customers_router)


# --- Error envelope: {"success": false, "error": "..."} ---
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(errors.CarWashError)
async def carwash_error_handler(request: Request, exc: errors.CarWashError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg", "Invalid input data")).removeprefix("Value error, ")
    return _error(status_codes.HTTP_400_BAD_REQUEST, f"{field}: {message}" if field else message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(status_codes.HTTP_500_INTERNAL_SERVER_ERROR, errors.UnexpectedError.default_message)


@app.get("/status")
def status(request: Request):
    return {
        "status": "ok",
        "host": request.client.host if request.client else None,
        "path": request.url.path,
    }


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
