import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__, config
from .domain.customers import router as customers_router
from .domain.scheduling import router as appointments_router
from .errors import (
    FormValidationError,
    NotFoundError,
    OrderingError,
    OverlapError,
    StoreError,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application starting up (storage backend: {config.STORAGE_BACKEND})...")
    if config.STORAGE_BACKEND == "sql":
        from . import models  # noqa: F401
        from .database import Base, engine

        try:
            Base.metadata.create_all(bind=engine, checkfirst=True)
            logger.info("Database tables created successfully")
        except Exception as e:
            # Ignore "already exists" errors from race conditions between workers
            error_msg = str(e)
            if "already exists" in error_msg or "duplicate key" in error_msg:
                logger.info("Database tables already exist (created by another worker)")
            else:
                logger.error(f"Failed to create database tables: {e}")
                raise

    if config.APPOINTMENT_EDIT_CHECKS == "skip":
        logger.warning("Appointment edits are saved without ordering/overlap checks")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Terminplaner API", version=__version__, lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


@app.exception_handler(FormValidationError)
async def form_validation_handler(request: Request, exc: FormValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "errors": exc.errors.model_dump(exclude_none=True)},
    )


@app.exception_handler(OrderingError)
async def ordering_error_handler(request: Request, exc: OrderingError):
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc), "error": "ordering"})


@app.exception_handler(OverlapError)
async def overlap_error_handler(request: Request, exc: OverlapError):
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "error": "overlap", "conflicts": exc.conflicting_ids},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"{request.method} {request.url.path} - Storage error: {exc}")
    return JSONResponse(
        status_code=502, content={"detail": f"Saving failed: {exc}", "error": "storage"}
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


# Log CORS configuration for debugging
logger.info(f"CORS allowed origins: {config.ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Routes
app.include_router(appointments_router)
app.include_router(customers_router)


@app.get("/")
def root():
    return {"message": "Terminplaner API is running"}


@app.get("/health")
def health():
    return {"status": "healthy", "storage": config.STORAGE_BACKEND}
