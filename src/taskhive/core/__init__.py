"""Tenant-scoped authorization, quota and mutation core."""
