import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import sessionmaker

from core.cache.screening_cache import ScreeningCacheService
from core.config_loader import AppConfig, CacheConfig, ScreeningConfig
from core.llm.interfaces import ScoringOracle
from core.llm.openai_service import OpenAIScoringOracle
from core.screening.engine import ScreeningEngine
from core.screening.service import ScreeningService
from core.screening.skill_oracle import SkillMatchOracle
from database.database import build_session_factory
from database.store import SqlJobCatalog, SqlResultStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    Single source of truth for service instantiation. Every store call opens
    its own session from session_factory.
    """
    config: AppConfig
    session_factory: sessionmaker
    store: SqlResultStore
    catalog: SqlJobCatalog
    oracle: ScoringOracle
    engine: ScreeningEngine
    screening_service: ScreeningService
    cache: Optional[ScreeningCacheService] = None

    @classmethod
    def build(cls, config: AppConfig, session_factory: Optional[sessionmaker] = None) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            session_factory: Optional pre-built factory (tests pass a SQLite one)

        Returns:
            Fully wired AppContext instance
        """
        if session_factory is None:
            session_factory = build_session_factory(
                config.database.url,
                pool_size=config.database.pool_size,
                max_overflow=config.database.max_overflow,
                echo=config.database.echo,
            )

        store = SqlResultStore(session_factory)
        catalog = SqlJobCatalog(session_factory)
        cache = cls._build_cache(config.cache)
        oracle = cls._build_oracle(config.screening)

        engine = ScreeningEngine(
            store,
            catalog,
            oracle,
            cache=cache,
            max_workers=config.screening.max_workers,
        )

        return cls(
            config=config,
            session_factory=session_factory,
            store=store,
            catalog=catalog,
            oracle=oracle,
            engine=engine,
            screening_service=ScreeningService(store, engine, cache=cache),
            cache=cache,
        )

    @staticmethod
    def _build_cache(cache_config: CacheConfig) -> Optional[ScreeningCacheService]:
        if not cache_config.enabled:
            logger.info("Screening cache disabled by configuration")
            return None

        return ScreeningCacheService(
            redis_url=cache_config.redis_url,
            password=cache_config.password,
            ttl_seconds=cache_config.results_ttl_seconds,
            requirements_ttl_seconds=cache_config.requirements_ttl_seconds,
        )

    @staticmethod
    def _build_oracle(screening_config: ScreeningConfig) -> ScoringOracle:
        """Build the scoring oracle selected in configuration."""
        if screening_config.oracle == "openai":
            llm_config = screening_config.llm
            logger.info(f"Using OpenAI scoring oracle with model {llm_config.model}")
            return OpenAIScoringOracle(
                api_key=llm_config.api_key,
                base_url=llm_config.base_url,
                model=llm_config.model,
                temperature=llm_config.temperature,
                timeout_seconds=llm_config.timeout_seconds,
            )

        logger.info("Using skill match scoring oracle")
        return SkillMatchOracle()

    def close(self) -> None:
        self.screening_service.shutdown()
