import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import models  # noqa: F401 - registers tables on Base
from .config import get_settings
from .database import Base, engine
from .domain.accounts.router import router as accounts_router
from .domain.formulas.router import router as formulas_router
from .domain.scheduling.router import router as appointments_router
from .errors import AppError, InternalError

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("passlib").setLevel(logging.ERROR)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Salon Booking API", version="1.0.0", lifespan=lifespan)
app.state.settings = settings


def _error_body(message: str) -> dict:
    return {"success": False, "message": message}


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} - {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} - {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Aggregate schema failures into a single 400 message"""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))

    logger.warning(f"Validation error for {request.url.path}: {messages}")
    return JSONResponse(status_code=400, content=_error_body(", ".join(messages)))


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"❌ {request.method} {request.url.path} - Database error: {exc}")
    return JSONResponse(status_code=500, content=_error_body(InternalError.default_message))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"❌ {request.method} {request.url.path} - Error: {exc}")
    return JSONResponse(status_code=500, content=_error_body(InternalError.default_message))


# CORS Configuration
# Session cookies require explicit origins
logger.info(f"CORS allowed origins: {settings.allowed_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Routes
api_router = APIRouter(prefix="/api/v1")
api_router.include_router(accounts_router)
api_router.include_router(formulas_router)
api_router.include_router(appointments_router)
app.include_router(api_router)


@app.get("/")
def root():
    return {"message": "Salon Booking API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
