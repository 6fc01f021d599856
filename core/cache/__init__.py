"""Cache Module - Caching services."""
from core.cache.screening_cache import (
    ScreeningCacheService,
    make_results_key,
    RESULTS_TTL_SECONDS,
    REQUIREMENTS_TTL_SECONDS
)

__all__ = [
    'ScreeningCacheService',
    'make_results_key',
    'RESULTS_TTL_SECONDS',
    'REQUIREMENTS_TTL_SECONDS'
]
