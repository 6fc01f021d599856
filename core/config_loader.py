import yaml
import os
from typing import List, Optional, Literal
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    url: str
    pool_size: int = 5
    max_overflow: int = 10
    echo: bool = False


class CacheConfig(BaseModel):
    enabled: bool = True
    redis_url: str = "redis://localhost:6379/0"
    password: Optional[str] = None
    results_ttl_seconds: int = 3600  # 1 hour
    requirements_ttl_seconds: int = 86400  # 24 hours


class LlmConfig(BaseModel):
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    model: str = "gpt-4o-mini"
    temperature: float = 0.0  # 0.0 = deterministic
    timeout_seconds: float = 60.0


class ScreeningConfig(BaseModel):
    """
    Configuration for bulk resume screening.

    max_workers bounds concurrent oracle calls and DB sessions per process.
    """
    max_workers: int = Field(default=5, ge=1)
    max_batch_size: int = Field(default=500, ge=1)
    max_file_size_bytes: int = Field(default=50 * 1024 * 1024, ge=1)  # 50MB
    allowed_content_types: List[str] = Field(
        default_factory=lambda: ["application/pdf", "application/x-pdf"]
    )
    oracle: Literal["skills", "openai"] = "skills"
    llm: LlmConfig = Field(default_factory=LlmConfig)


class WebConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    upload_rate_limit: str = "10/minute"


class AppConfig(BaseModel):
    database: DatabaseConfig
    cache: CacheConfig = Field(default_factory=CacheConfig)
    screening: ScreeningConfig = Field(default_factory=ScreeningConfig)
    web: WebConfig = Field(default_factory=WebConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from a subdirectory), try the repo root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        data.setdefault('database', {})
        data['database']['url'] = env_db_url

    # Allow env var override for Redis URL
    env_redis_url = os.environ.get("REDIS_URL")
    if env_redis_url:
        if not data.get('cache'):
            data['cache'] = {}
        data['cache']['redis_url'] = env_redis_url

    # Allow env var override for worker pool size
    env_workers = os.environ.get("SCREENING_MAX_WORKERS")
    if env_workers:
        if not data.get('screening'):
            data['screening'] = {}
        data['screening']['max_workers'] = int(env_workers)

    # Allow env var override for LLM Base URL
    env_llm_base_url = os.environ.get("OPENAI_BASE_URL")
    if env_llm_base_url:
        if not data.get('screening'):
            data['screening'] = {}
        if not data['screening'].get('llm'):
            data['screening']['llm'] = {}
        data['screening']['llm']['base_url'] = env_llm_base_url

    return AppConfig(**data)
