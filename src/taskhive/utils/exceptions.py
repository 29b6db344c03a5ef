"""Custom exceptions for TaskHive."""


class TaskHiveError(Exception):
    """Base exception for all TaskHive errors."""

    pass


class ConfigurationError(TaskHiveError):
    """Error in configuration or settings."""

    pass
