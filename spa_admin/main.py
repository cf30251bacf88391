import logging
import os
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from google.cloud import exceptions as gexc
from sqlalchemy.orm import Session

from .config import ALLOWED_ORIGINS, API_PREFIX, STATIC_DIR
from .database import engine, get_db
from .domain.bookings.public_router import router as public_booking_router
from .domain.bookings.router import router as bookings_router
from .domain.inventory.router import router as inventory_router
from .domain.overview.router import router as overview_router
from .domain.services.router import router as services_router
from .domain.settings.router import router as settings_router
from .domain.staff.router import router as staff_router
from .domain.suppliers.router import router as suppliers_router
from .domain.transactions.router import router as transactions_router
from .fetcher import RequestCancelledError
from .mirror import LocalMirror
from .models import init_mirror
from .pagination import InvalidCursorError
from .static import SPAStaticFiles

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("google").setLevel(logging.WARNING)
logging.getLogger("grpc").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        init_mirror(engine)
        logger.info("Mirror tables ready")
    except Exception as e:
        # The API still works without the mirror; every read goes to Firestore
        logger.error(f"Failed to prepare mirror tables: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Spa Admin API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.exception_handler(InvalidCursorError)
async def invalid_cursor_handler(request: Request, exc: InvalidCursorError):
    logger.warning(f"Invalid cursor for {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"detail": "Invalid cursor"})


@app.exception_handler(gexc.NotFound)
async def firestore_not_found_handler(request: Request, exc: gexc.NotFound):
    logger.warning(f"Firestore document missing for {request.url.path}: {exc}")
    return JSONResponse(status_code=404, content={"detail": "Not found"})


@app.exception_handler(gexc.GoogleCloudError)
async def firestore_error_handler(request: Request, exc: gexc.GoogleCloudError):
    logger.error(f"❌ Firestore request failed for {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=502,
        content={"detail": "Failed to reach the data store. Please try again."},
    )


@app.exception_handler(RequestCancelledError)
async def cancelled_request_handler(request: Request, exc: RequestCancelledError):
    logger.info(f"Request for {request.url.path} cancelled before completion")
    return JSONResponse(status_code=499, content={"detail": "Request cancelled"})


# Log CORS configuration for debugging
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes

api = APIRouter()
api.include_router(public_booking_router)
api.include_router(bookings_router)
api.include_router(inventory_router)
api.include_router(staff_router)
api.include_router(suppliers_router)
api.include_router(services_router)
api.include_router(transactions_router)
api.include_router(overview_router)
api.include_router(settings_router)


@api.get("/health")
def health():
    return {"status": "healthy"}


@api.post("/mirror/reset")
def reset_mirror(db: Session = Depends(get_db)):
    """Drop and recreate the local mirror; the next reads go to Firestore"""
    LocalMirror(db).reset()
    return {"message": "Mirror reset"}


app.include_router(api, prefix=API_PREFIX)

if STATIC_DIR and os.path.isdir(STATIC_DIR):
    app.mount("/", SPAStaticFiles(directory=STATIC_DIR, html=True, excluded_prefix=API_PREFIX), name="static")
    logger.info(f"Serving static bundle from {STATIC_DIR}")
