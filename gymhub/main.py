import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import models  # noqa: F401  registers tables on Base.metadata
from .config import ALLOWED_ORIGINS, LOG_LEVEL
from .database import Base, engine
from .domain.attendance import router as attendance_router
from .domain.classes import router as classes_router
from .domain.discounts import router as discounts_router
from .domain.members import router as members_router
from .domain.memberships import router as memberships_router
from .domain.plans import router as plans_router
from .domain.reports import router as reports_router
from .shared.errors import GymError

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Another worker may have created the tables first
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="GymHub API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(GymError)
async def gym_error_handler(request: Request, exc: GymError):
    """Map business-rule rejections to their HTTP status"""
    logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Plans first: /memberships/plans must not be captured by /memberships/{subscription_id}
app.include_router(plans_router)
app.include_router(memberships_router)
app.include_router(members_router)
app.include_router(discounts_router)
app.include_router(attendance_router)
app.include_router(classes_router)
app.include_router(reports_router)


@app.get("/")
def root():
    return {"message": "GymHub API", "status": "running"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
