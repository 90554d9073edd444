# /marksheet-backend/app/main.py

# --- Core FastAPI Imports ---
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

# --- Application-specific Imports ---
from .core import config
from .core.deps import require_admin
from .db.base import Base
from .db.database import engine
from .routers import (
    import_router,
    students_router,
    marksheets_router,
    subjects_router,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Runs once at startup: make sure every table exists.
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")
    yield


# --- FastAPI Application Instance Creation ---
app = FastAPI(
    title="Marksheet Backend API",
    description="Bulk student/marks import and marksheet computation for the college admin panel.",
    version="1.0.0",
    lifespan=lifespan,
)

# --- Middleware Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Router Inclusion ---
# Every /api route requires the admin bearer token.
admin_only = [Depends(require_admin)]
app.include_router(import_router.router, prefix="/api/import", tags=["Import"], dependencies=admin_only)
app.include_router(students_router.router, prefix="/api/students", tags=["Students"], dependencies=admin_only)
app.include_router(marksheets_router.router, prefix="/api/marksheets", tags=["Marksheets"], dependencies=admin_only)
app.include_router(subjects_router.router, prefix="/api/subjects", tags=["Subjects"], dependencies=admin_only)


# --- Root / Health Check Endpoint ---
@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the API is online."""
    return {"status": "Marksheet Backend is running!", "version": app.version}
