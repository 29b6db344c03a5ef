"""TaskHive: multi-tenant projects and tasks backend."""

__version__ = "0.1.0"
