"""Configuration management for TaskHive."""

from .settings import Settings, get_settings
from .validation import ValidationResult, ValidationSeverity, validate_configuration, validate_or_raise

__all__ = [
    "Settings",
    "get_settings",
    "ValidationResult",
    "ValidationSeverity",
    "validate_configuration",
    "validate_or_raise",
]
