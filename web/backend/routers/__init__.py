"""API route handlers."""

from .screening import router as screening_router
