from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.routers import documents, match, reports

# Import logging and middleware
from app.utils.logging_config import configure_for_environment, get_logger
from app.utils.exceptions import MatcherBaseException
from app.middleware.error_handlers import (
    ExceptionHandlerMiddleware,
    PerformanceMiddleware,
    matcher_exception_handler,
)
from app.utils.utils import get_settings

# Configure logging first
configure_for_environment()
logger = get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager"""
    logger.info("Resume Matcher API starting up...")
    settings = get_settings()
    logger.info(
        f"LLM {settings.llm_settings.model_name} at {settings.llm_settings.base_url}; "
        f"batch size {settings.processing_settings.batch_size}"
    )
    yield
    logger.info("Resume Matcher API shutting down...")


app = FastAPI(title="Resume Matcher API", version=VERSION, lifespan=lifespan)

# Add middleware in order (LIFO - Last In, First Out)
app.add_middleware(ExceptionHandlerMiddleware)
app.add_middleware(PerformanceMiddleware, slow_request_threshold=2.0)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allows all origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(MatcherBaseException, matcher_exception_handler)


@app.get("/")
@app.head("/")
async def root():
    """Root endpoint - handles both GET and HEAD requests for health checks"""
    logger.debug("Root endpoint accessed")
    return {"message": "Welcome to the Resume Matcher API", "version": VERSION, "status": "ok"}


@app.get("/health")
@app.head("/health")
async def health_check():
    """Health check endpoint - handles both GET and HEAD requests"""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


app.include_router(documents.router, prefix="/api")
app.include_router(match.router, prefix="/api")
app.include_router(reports.router, prefix="/api")

logger.info("Resume Matcher API initialized successfully")
