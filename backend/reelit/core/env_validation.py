"""
Environment variable validation and security checks.

This module validates that all required environment variables are properly
configured before the application starts.
"""

import sys
from typing import List, Optional, Tuple

from reelit.core.config import settings
from reelit.core.logging import get_logger

logger = get_logger(__name__)


def validate_secret_key(key_name: str, key_value: Optional[str], min_length: int = 32) -> List[str]:
    """
    Validate that a secret key meets security requirements.

    Args:
        key_name: Name of the key (for error messages)
        key_value: The key value to validate
        min_length: Minimum required length

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not key_value:
        errors.append(f"{key_name} is not set")
        return errors

    if len(key_value) < min_length:
        errors.append(
            f"{key_name} is too short (must be at least {min_length} characters)"
        )

    lowered = key_value.lower()
    if "replace" in lowered or "change" in lowered or "your-" in lowered or "example" in lowered:
        errors.append(
            f"{key_name} appears to be a placeholder value - update with a real secret key"
        )

    return errors


def validate_database_url() -> List[str]:
    """
    Validate database URL configuration.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")
        return errors

    # Only async drivers work with the async engine
    if not settings.DATABASE_URL.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
        errors.append(
            "DATABASE_URL must use an async driver (postgresql+asyncpg:// or sqlite+aiosqlite://)"
        )

    if settings.is_production and "reelit_password" in settings.DATABASE_URL:
        errors.append(
            "DATABASE_URL contains default password - update with a secure password in production"
        )

    return errors


def validate_redis_url() -> List[str]:
    """
    Validate Redis URL configuration (only when Redis backs the cache).

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if settings.CACHE_BACKEND != "redis":
        return errors

    if not settings.REDIS_URL:
        errors.append("REDIS_URL is not set")
        return errors

    if not settings.REDIS_URL.startswith(("redis://", "rediss://")):
        errors.append(
            "REDIS_URL must start with redis:// (format: redis://host:port/db)"
        )

    return errors


def validate_production_settings() -> List[str]:
    """
    Validate production-specific settings.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not settings.is_production:
        return errors

    if settings.DEBUG:
        errors.append("DEBUG must be false in production")

    if settings.CACHE_BACKEND == "memory":
        logger.warning(
            "memory_cache_in_production",
            message="CACHE_BACKEND=memory keeps a separate feed cache per worker process",
        )

    if "localhost" in ",".join(settings.ALLOWED_ORIGINS):
        logger.warning(
            "localhost_in_allowed_origins",
            message="ALLOWED_ORIGINS includes localhost in production - may be insecure",
        )

    if settings.LOG_FORMAT != "json":
        logger.warning(
            "log_format_not_json",
            message="LOG_FORMAT should be 'json' in production for better log aggregation",
        )

    return errors


def validate_environment() -> Tuple[bool, List[str]]:
    """
    Validate all environment variables.

    Returns:
        (is_valid, list_of_errors)
    """
    all_errors = []

    logger.info(
        "validating_environment",
        app_env=settings.APP_ENV,
        app_name=settings.APP_NAME,
    )

    all_errors.extend(validate_secret_key("SECRET_KEY", settings.SECRET_KEY))
    all_errors.extend(validate_database_url())
    all_errors.extend(validate_redis_url())

    if settings.is_production:
        all_errors.extend(validate_production_settings())

    if all_errors:
        logger.error(
            "environment_validation_failed",
            errors=all_errors,
            error_count=len(all_errors),
        )
        return False, all_errors

    logger.info(
        "environment_validation_successful",
        app_env=settings.APP_ENV,
        features_enabled={
            "commerce": settings.COMMERCE_ENABLED,
            "rate_limit": settings.RATE_LIMIT_ENABLED,
            "cache_backend": settings.CACHE_BACKEND,
        },
    )
    return True, []


def validate_or_exit():
    """
    Validate environment and exit if validation fails.

    Called during application startup outside development.
    """
    is_valid, errors = validate_environment()

    if not is_valid:
        logger.critical(
            "startup_aborted_invalid_environment",
            errors=errors,
        )
        print("\nENVIRONMENT VALIDATION FAILED\n")
        print("The following configuration errors were found:\n")
        for i, error in enumerate(errors, 1):
            print(f"  {i}. {error}")
        print("\nPlease fix these errors and restart the application.\n")
        sys.exit(1)

    logger.info("environment_validation_passed")
