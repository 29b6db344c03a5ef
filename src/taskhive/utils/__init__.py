"""Utility modules for TaskHive."""

from taskhive.utils.exceptions import ConfigurationError, TaskHiveError

__all__ = [
    "TaskHiveError",
    "ConfigurationError",
]
