"""Notebox SQLAlchemy models."""
