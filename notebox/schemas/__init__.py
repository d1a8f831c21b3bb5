"""Notebox Pydantic schemas."""
