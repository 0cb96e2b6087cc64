"""Persistence layer - SQLAlchemy models, repositories and unit of work."""
