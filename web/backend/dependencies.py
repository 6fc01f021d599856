#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

import logging
import threading
from typing import Optional

from core.app_context import AppContext
from core.screening.service import ScreeningService
from database.init_db import init_db
from .config import get_config

logger = logging.getLogger(__name__)

_context: Optional[AppContext] = None
_context_lock = threading.Lock()


def get_app_context() -> AppContext:
    """Build the application context on first use and reuse it afterwards."""
    global _context
    with _context_lock:
        if _context is None:
            _context = AppContext.build(get_config())
            init_db(_context.session_factory.kw["bind"])
        return _context


def get_screening_service() -> ScreeningService:
    """
    FastAPI dependency that returns the process-wide screening service.

    Usage:
        @router.get("/endpoint")
        def my_endpoint(service: ScreeningService = Depends(get_screening_service)):
            ...

    Tests replace it through app.dependency_overrides.
    """
    return get_app_context().screening_service


def close_app_context() -> None:
    global _context
    with _context_lock:
        if _context is not None:
            _context.close()
            _context = None
