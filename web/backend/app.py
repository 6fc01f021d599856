#!/usr/bin/env python3
"""
Screening API - FastAPI Application

Bulk resume screening: upload a batch of resumes against a job posting, then
page through ranked results, manage the shortlist and export.

Usage:
    python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from core.screening.errors import ScreeningError
from .config import get_config
from .dependencies import close_app_context
from .exceptions import (
    screening_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from .routers import screening_router
from .routers.screening import add_rate_limit_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Load configuration
config = get_config()

# Create FastAPI app
app = FastAPI(
    title="Screening API",
    description="API for bulk resume screening",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.web.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Configure rate limiting
add_rate_limit_handlers(app)

# Register exception handlers
app.add_exception_handler(ScreeningError, screening_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include routers
app.include_router(screening_router)


@app.on_event("shutdown")
def shutdown():
    close_app_context()


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "screening-api"}


def main():
    """Run the web server."""
    import uvicorn

    logger.info(f"Starting Screening API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
