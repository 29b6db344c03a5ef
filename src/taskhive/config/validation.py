"""Configuration validation for startup checks.

Validates that required configuration is present and valid before the
application starts accepting requests.

Usage:
    from taskhive.config.validation import validate_or_raise

    # During startup
    validate_or_raise(settings)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from taskhive.config.settings import DEFAULT_JWT_SECRET, Settings, get_settings
from taskhive.utils.exceptions import ConfigurationError

logger = structlog.get_logger("taskhive.config")

# HS256 keys shorter than this are trivially brute-forced
MIN_JWT_SECRET_LENGTH = 32


class ValidationSeverity(str, Enum):
    """Severity of configuration validation issues."""

    ERROR = "error"  # Must be fixed, app cannot start
    WARNING = "warning"  # Should be fixed, app can start but may have issues


@dataclass
class ValidationResult:
    """Result of a configuration validation check."""

    field: str
    severity: ValidationSeverity
    message: str
    suggestion: str | None = None

    def __str__(self) -> str:
        prefix = "ERROR" if self.severity == ValidationSeverity.ERROR else "WARNING"
        result = f"[{prefix}] {self.field}: {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result


def validate_configuration(settings: Settings | None = None) -> list[ValidationResult]:
    """Validate application configuration.

    Args:
        settings: Settings to validate (default: global settings)

    Returns:
        List of validation results (empty if all checks pass)
    """
    if settings is None:
        settings = get_settings()

    results: list[ValidationResult] = []
    results.extend(_validate_database(settings))
    results.extend(_validate_security(settings))
    results.extend(_validate_quotas(settings))
    results.extend(_validate_environment(settings))
    return results


def validate_or_raise(settings: Settings | None = None) -> None:
    """Validate configuration and raise if errors found.

    Args:
        settings: Settings to validate

    Raises:
        ConfigurationError: If any validation errors are found
    """
    results = validate_configuration(settings)
    errors = [r for r in results if r.severity == ValidationSeverity.ERROR]

    if errors:
        error_messages = "\n".join(str(e) for e in errors)
        raise ConfigurationError(f"Configuration validation failed:\n{error_messages}")

    for warning in results:
        logger.warning("configuration_warning", detail=str(warning))


# =============================================================================
# Validators
# =============================================================================


def _validate_database(settings: Settings) -> list[ValidationResult]:
    results: list[ValidationResult] = []

    if not settings.DATABASE_URL:
        results.append(
            ValidationResult(
                field="DATABASE_URL",
                severity=ValidationSeverity.ERROR,
                message="Database URL is not configured",
                suggestion="Set DATABASE_URL environment variable",
            )
        )
    elif not settings.DATABASE_URL.startswith(("postgresql", "sqlite")):
        results.append(
            ValidationResult(
                field="DATABASE_URL",
                severity=ValidationSeverity.ERROR,
                message=f"Unexpected database type in URL: {settings.DATABASE_URL[:20]}...",
                suggestion="Use a postgresql+asyncpg:// or sqlite+aiosqlite:// URL",
            )
        )
    elif settings.is_sqlite and settings.ENVIRONMENT == "production":
        results.append(
            ValidationResult(
                field="DATABASE_URL",
                severity=ValidationSeverity.WARNING,
                message="SQLite serializes every transaction on one write lock",
                suggestion="Use PostgreSQL in production",
            )
        )

    return results


def _validate_security(settings: Settings) -> list[ValidationResult]:
    results: list[ValidationResult] = []
    secret = settings.JWT_SECRET.get_secret_value()

    if settings.ENVIRONMENT == "production" and secret == DEFAULT_JWT_SECRET:
        results.append(
            ValidationResult(
                field="JWT_SECRET",
                severity=ValidationSeverity.ERROR,
                message="Default JWT secret must not be used in production",
                suggestion="Set JWT_SECRET to a random value of at least 32 characters",
            )
        )
    elif len(secret) < MIN_JWT_SECRET_LENGTH and secret != DEFAULT_JWT_SECRET:
        results.append(
            ValidationResult(
                field="JWT_SECRET",
                severity=ValidationSeverity.WARNING,
                message=f"JWT secret is shorter than {MIN_JWT_SECRET_LENGTH} characters",
            )
        )

    if not 4 <= settings.BCRYPT_ROUNDS <= 31:
        results.append(
            ValidationResult(
                field="BCRYPT_ROUNDS",
                severity=ValidationSeverity.ERROR,
                message="bcrypt cost factor must be between 4 and 31",
            )
        )

    if settings.JWT_EXPIRES_MINUTES <= 0:
        results.append(
            ValidationResult(
                field="JWT_EXPIRES_MINUTES",
                severity=ValidationSeverity.ERROR,
                message="Token lifetime must be positive",
            )
        )

    return results


def _validate_quotas(settings: Settings) -> list[ValidationResult]:
    results: list[ValidationResult] = []

    for field in ("DEFAULT_MAX_USERS", "DEFAULT_MAX_PROJECTS"):
        if getattr(settings, field) < 1:
            results.append(
                ValidationResult(
                    field=field,
                    severity=ValidationSeverity.ERROR,
                    message="Default quota ceiling must be at least 1",
                    suggestion="A registered tenant always has its first admin user",
                )
            )

    return results


def _validate_environment(settings: Settings) -> list[ValidationResult]:
    results: list[ValidationResult] = []

    if settings.ENVIRONMENT == "production" and settings.DEBUG:
        results.append(
            ValidationResult(
                field="DEBUG",
                severity=ValidationSeverity.ERROR,
                message="DEBUG mode must be disabled in production",
                suggestion="Set DEBUG=false for production",
            )
        )

    if settings.ENVIRONMENT == "production" and settings.log_level == "DEBUG":
        results.append(
            ValidationResult(
                field="log_level",
                severity=ValidationSeverity.WARNING,
                message="DEBUG log level in production may expose sensitive data",
                suggestion="Use INFO or WARNING for production",
            )
        )

    return results


def get_configuration_summary(settings: Settings | None = None) -> dict[str, Any]:
    """Get a summary of current configuration (safe for logging).

    Excludes secrets and connection strings.
    """
    if settings is None:
        settings = get_settings()

    return {
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "log_level": settings.log_level,
        "database_backend": "sqlite" if settings.is_sqlite else "postgresql",
        "database_pool_size": settings.DATABASE_POOL_SIZE,
        "jwt_algorithm": settings.JWT_ALGORITHM,
        "jwt_expires_minutes": settings.JWT_EXPIRES_MINUTES,
        "default_plan": settings.DEFAULT_PLAN,
        "default_max_users": settings.DEFAULT_MAX_USERS,
        "default_max_projects": settings.DEFAULT_MAX_PROJECTS,
    }
