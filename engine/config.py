"""
Configuration settings for the PromptSite engine
"""
import os
import logging
from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

# Configure basic logger for config module
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings"""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Language model provider (OpenAI-compatible chat completions)
    OPENROUTER_API_KEY: str = os.getenv("OPENROUTER_API_KEY", "")
    LLM_API_URL: str = os.getenv(
        "LLM_API_URL",
        "https://openrouter.ai/api/v1/chat/completions"
    )
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
    TEMPERATURE: float = 0.7
    DEFAULT_MODEL: str = os.getenv("DEFAULT_MODEL", "google/gemini-2.5-flash")

    # Hosted auth service
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_ANON_KEY: str = os.getenv("SUPABASE_ANON_KEY", "")
    AUTH_TIMEOUT_SECONDS: float = float(os.getenv("AUTH_TIMEOUT_SECONDS", "10"))

    # Redis holds the credits ledger
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    REDIS_ENABLED: bool = os.getenv("REDIS_ENABLED", "true").lower() == "true"

    # Credits
    CREDITS_KEY_PREFIX: str = os.getenv("CREDITS_KEY_PREFIX", "user_credits:")
    DEFAULT_DAILY_CREDITS: int = int(os.getenv("DEFAULT_DAILY_CREDITS", "10"))

    # Per-address request throttling on the generation endpoint
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    GENERATION_RATE_LIMIT: str = os.getenv("GENERATION_RATE_LIMIT", "10/minute")

    # Monitoring
    SENTRY_DSN: Optional[str] = os.getenv("SENTRY_DSN")
    SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "development")
    SENTRY_TRACES_SAMPLE_RATE: float = float(
        os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")
    )

    # CORS - comma-separated list of allowed origins
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()


def get_redis_client():
    """Get Redis client with error handling"""
    if not settings.REDIS_ENABLED:
        return None

    try:
        import redis
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2
        )
        # Test connection
        client.ping()
        return client
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Credits ledger unavailable.")
        return None


@lru_cache(maxsize=1)
def get_ledger_redis_client():
    """
    Process-wide Redis client for the credits ledger.

    Connects lazily on first command, so an unreachable server surfaces as a
    RedisError inside the ledger instead of blocking every request on a ping.
    """
    if not settings.REDIS_ENABLED:
        return None

    import redis
    return redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        socket_connect_timeout=2,
        socket_timeout=2
    )


def validate_required_config():
    """Validate required configuration on startup"""
    errors = []

    if not settings.OPENROUTER_API_KEY:
        errors.append("OPENROUTER_API_KEY must be configured")
    if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
        errors.append("SUPABASE_URL and SUPABASE_ANON_KEY must be configured")

    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        if settings.ENVIRONMENT == "production":
            raise ValueError(f"Missing required configuration: {', '.join(errors)}")

    return len(errors) == 0
