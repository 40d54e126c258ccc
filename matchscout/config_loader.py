import yaml
import os
import logging
from typing import Optional, Dict, Any, Literal
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ScoringWeights(BaseModel):
    """
    Points awarded per match dimension.

    Roles, skills and sector share a combined cap (core_cap); the other four
    dimensions are added on top, and the total is clamped to 0-100.
    """
    role_exact: int = 50
    role_related: int = 25
    role_ai: int = 15

    skill_required: int = 6  # per matched required skill
    skill_ai: int = 3  # per admitted AI-suggested skill
    skills_cap: int = 30

    sector: int = 30
    core_cap: int = 80  # roles + skills + sector

    location: int = 10
    experience: int = 5
    salary: int = 5
    employment_type: int = 5


class MatchCacheConfig(BaseModel):
    """Configuration for the per-user match score cache."""
    backend: Literal["redis", "memory"] = "redis"
    redis_url: str = "redis://localhost:6379/0"
    password: Optional[str] = None
    key_prefix: str = Field(default="match_cache_", min_length=1)
    expiry_days: int = 7
    max_bytes: Optional[int] = None  # Quota for the memory backend


class AppConfig(BaseModel):
    cache: MatchCacheConfig = Field(default_factory=MatchCacheConfig)
    scoring: ScoringWeights = Field(default_factory=ScoringWeights)


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to the raw config dict."""
    cache = data.get('cache') or {}

    env_redis_url = os.environ.get("REDIS_URL")
    if env_redis_url:
        cache['redis_url'] = env_redis_url

    env_redis_password = os.environ.get("REDIS_PASSWORD")
    if env_redis_password:
        cache['password'] = env_redis_password

    env_backend = os.environ.get("MATCH_CACHE_BACKEND")
    if env_backend:
        cache['backend'] = env_backend.strip().lower()

    env_prefix = os.environ.get("MATCH_CACHE_PREFIX")
    if env_prefix:
        cache['key_prefix'] = env_prefix

    env_expiry = os.environ.get("MATCH_CACHE_EXPIRY_DAYS")
    if env_expiry:
        try:
            cache['expiry_days'] = int(env_expiry)
        except ValueError:
            logger.warning(f"Ignoring non-integer MATCH_CACHE_EXPIRY_DAYS={env_expiry!r}")

    if cache:
        data['cache'] = cache
    return data


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from root), try the project root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data: Dict[str, Any] = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    else:
        logger.info("No config.yaml found, using defaults")

    return AppConfig(**_apply_env_overrides(data))
