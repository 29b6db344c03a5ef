"""Persistence layer: models, repositories and schemas."""
