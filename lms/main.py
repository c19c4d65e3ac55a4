# /lms-backend/lms/main.py

import logging
import os

# --- Core FastAPI Imports ---
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

# --- Application-specific Imports ---
from .core.logging_config import configure_logging
from .db.database import init_db
from .routers import grades_router
from .services.grade_helpers.decimal_parsing import GradeValueError

configure_logging()
logger = logging.getLogger(__name__)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Runs once at startup: make sure every table exists.
    init_db()
    logger.info("LMS grade service started")
    yield


# --- FastAPI Application Instance Creation ---
app = FastAPI(
    title="LMS Backend API",
    description="Grade recording and grade statistics for the school LMS.",
    version="1.0.0",
    lifespan=lifespan
)

# --- Middleware Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Exception Handlers ---
@app.exception_handler(GradeValueError)
async def grade_value_error_handler(request: Request, exc: GradeValueError):
    """A stored grade that is not a number is a data error, not a server crash."""
    logger.error("Malformed grade value on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": str(exc)})


# --- API Router Inclusion ---
app.include_router(grades_router.router, prefix="/api/grades", tags=["Grades"])


# --- Root / Health Check Endpoint ---
@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the API is online."""
    return {"status": "LMS Backend is running!", "version": app.version}
