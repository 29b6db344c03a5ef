"""HTTP API for TaskHive."""

from .app import create_app

__all__ = ["create_app"]
