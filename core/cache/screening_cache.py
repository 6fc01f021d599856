"""Screening Cache Service - Redis caching for ranked result pages."""
import hashlib
import json
import logging
import re
from typing import Optional, Dict, Any, Tuple
from datetime import datetime, timezone
from urllib.parse import urlparse

from redis import Redis

from core.screening.models import JobRequirements, RankedView

logger = logging.getLogger(__name__)

KEY_PREFIX = "screening:"

# 1 hour for result pages, 24 hours for job requirements
RESULTS_TTL_SECONDS = 60 * 60
REQUIREMENTS_TTL_SECONDS = 24 * 60 * 60


def _sanitize_url(url: str) -> str:
    """Remove credentials from URL for safe logging."""
    try:
        parsed = urlparse(url)
        if parsed.password:
            sanitized = parsed._replace(
                netloc=f"{parsed.username or ''}:*@{parsed.hostname}:{parsed.port or 6379}"
            )
            return sanitized.geturl()
        return url
    except Exception:
        return url


def make_results_key(screening_job_id: str, normalized_params: Tuple, generation: int = 0) -> str:
    """
    Build the cache key for one ranked view.

    normalized_params must already be canonical (filter, sort, offset, limit)
    so that distinct queries never share a key. generation is the job's
    invalidation counter at the time the view was read.
    """
    digest = hashlib.sha256(json.dumps(normalized_params, sort_keys=True).encode("utf-8")).hexdigest()
    return f"{KEY_PREFIX}results:{screening_job_id}:{generation}:{digest[:32]}"


def _generation_key(screening_job_id: str) -> str:
    return f"{KEY_PREFIX}gen:{screening_job_id}"


def _escape_glob(value: str) -> str:
    return re.sub(r"([*?\[\]\\])", r"\\\1", value)


class ScreeningCacheService:
    """
    Read-through cache in front of the ranking service.

    Never a source of truth: when Redis is down or errors, reads are misses
    and writes are no-ops. All entries of a job are dropped together on
    invalidation.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        password: Optional[str] = None,
        ttl_seconds: int = RESULTS_TTL_SECONDS,
        requirements_ttl_seconds: int = REQUIREMENTS_TTL_SECONDS,
        client: Optional[Redis] = None,
    ):
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.requirements_ttl_seconds = requirements_ttl_seconds
        self._redis: Optional[Redis] = None
        self._available = False

        try:
            self._redis = client or Redis.from_url(
                redis_url,
                password=password,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )
            self._redis.ping()
            self._available = True
            logger.info(f"Screening cache connected to Redis at {_sanitize_url(redis_url)}")
        except Exception as e:
            logger.warning(f"Screening cache Redis unavailable: {e}")
            self._redis = None
            self._available = False

    @property
    def is_available(self) -> bool:
        if not self._available or not self._redis:
            return False
        try:
            return bool(self._redis.ping())
        except Exception:
            return False

    def get(self, key: str) -> Optional[RankedView]:
        """Return the cached view for key, or None on a miss."""
        if not self.is_available:
            return None

        try:
            data = self._redis.get(key)
            if data:
                entry = json.loads(data)
                logger.debug(f"Screening cache hit {key}")
                return RankedView.from_dict(entry["data"])
            logger.debug(f"Screening cache miss {key}")
            return None
        except Exception as e:
            logger.warning(f"Error reading from screening cache: {e}")
            return None

    def put(self, key: str, view: RankedView, ttl_seconds: Optional[int] = None) -> bool:
        if not self.is_available:
            return False

        try:
            ttl = ttl_seconds or self.ttl_seconds
            entry = {
                "data": view.to_dict(),
                "cached_at": datetime.now(timezone.utc).isoformat(),
                "ttl_seconds": ttl
            }
            self._redis.setex(key, ttl, json.dumps(entry))
            return True
        except Exception as e:
            logger.warning(f"Error writing to screening cache: {e}")
            return False

    def generation(self, screening_job_id: str) -> int:
        """
        Current invalidation counter of a job, 0 if it was never invalidated.

        Read it before computing a view and build the view's key from it: a
        view computed across an invalidation lands under a key no reader uses.
        """
        if not self.is_available:
            return 0

        try:
            value = self._redis.get(_generation_key(screening_job_id))
            return int(value) if value else 0
        except Exception as e:
            logger.warning(f"Error reading cache generation for {screening_job_id}: {e}")
            return 0

    def invalidate(self, screening_job_id: str) -> int:
        """Bump the job's generation and drop its cached result pages."""
        if not self.is_available:
            return 0

        try:
            generation_key = _generation_key(screening_job_id)
            self._redis.incr(generation_key)
            # Outlives any page written under the previous generation
            self._redis.expire(generation_key, self.ttl_seconds * 2)
            return self._delete_matching(f"{KEY_PREFIX}results:{_escape_glob(screening_job_id)}:*")
        except Exception as e:
            logger.warning(f"Error invalidating screening cache for {screening_job_id}: {e}")
            return 0

    def drop_job(self, screening_job_id: str) -> int:
        """Remove everything cached for a deleted job, generation included."""
        if not self.is_available:
            return 0

        try:
            self._redis.delete(_generation_key(screening_job_id))
            return self._delete_matching(f"{KEY_PREFIX}results:{_escape_glob(screening_job_id)}:*")
        except Exception as e:
            logger.warning(f"Error dropping screening cache for {screening_job_id}: {e}")
            return 0

    def _delete_matching(self, pattern: str) -> int:
        deleted = 0
        cursor = 0
        while True:
            cursor, keys = self._redis.scan(cursor=cursor, match=pattern, count=100)
            if keys:
                self._redis.delete(*keys)
                deleted += len(keys)
            if cursor == 0:
                break

        if deleted:
            logger.info(f"Invalidated {deleted} cache entries matching {pattern}")
        return deleted

    def get_job_requirements(self, job_post_id: str) -> Optional[JobRequirements]:
        if not self.is_available:
            return None

        try:
            data = self._redis.get(f"{KEY_PREFIX}job:{job_post_id}")
            if data:
                return JobRequirements.from_dict(json.loads(data))
            return None
        except Exception as e:
            logger.warning(f"Error reading job requirements from cache: {e}")
            return None

    def set_job_requirements(self, requirements: JobRequirements) -> bool:
        if not self.is_available:
            return False

        try:
            self._redis.setex(
                f"{KEY_PREFIX}job:{requirements.job_post_id}",
                self.requirements_ttl_seconds,
                json.dumps(requirements.to_dict())
            )
            return True
        except Exception as e:
            logger.warning(f"Error caching job requirements: {e}")
            return False

    def get_cache_stats(self) -> Dict[str, Any]:
        if not self.is_available:
            return {"available": False}

        try:
            info = self._redis.info()
            key_count = 0
            cursor = 0
            while True:
                cursor, keys = self._redis.scan(cursor=cursor, match=f"{KEY_PREFIX}*", count=1000)
                key_count += len(keys)
                if cursor == 0:
                    break
            return {
                "available": True,
                "used_memory_human": info.get("used_memory_human", "unknown"),
                "screening_cache_keys": key_count,
                "ttl_seconds": self.ttl_seconds,
            }
        except Exception as e:
            logger.warning(f"Error getting cache stats: {e}")
            return {"available": False, "error": str(e)}

    def clear_all(self) -> bool:
        """Clear every screening cache entry. Use with caution."""
        if not self.is_available:
            return False

        try:
            cursor = 0
            deleted = 0
            while True:
                cursor, keys = self._redis.scan(cursor=cursor, match=f"{KEY_PREFIX}*", count=100)
                if keys:
                    self._redis.delete(*keys)
                    deleted += len(keys)
                if cursor == 0:
                    break

            logger.info(f"Cleared {deleted} screening cache entries")
            return True
        except Exception as e:
            logger.warning(f"Error clearing screening cache: {e}")
            return False
