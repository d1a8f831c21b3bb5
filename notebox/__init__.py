"""
Notebox — Application Package
===============================

A minimal CRUD HTTP service for notes.

    ┌─────────────────────────────────────┐
    │        Routes (API Layer)           │  ← HTTP concerns, envelope mapping
    ├─────────────────────────────────────┤
    │        Services (Note Store)        │  ← SQL statements, StorageError
    ├─────────────────────────────────────┤
    │      Models & Schemas (Data)        │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │       Database (Persistence)        │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
