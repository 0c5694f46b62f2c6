"""
Venue Directory Backend: Application Package Initializer
==========================================================

What: Marks the `venuedir` directory as a Python package.
Who:  Imported by uvicorn (`venuedir.main:app`), Alembic, pytest and the
      admin setup script.

Architecture Note:
    The backend is layered:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependency
    ├─────────────────────────────────────┤
    │   Services (Repository / Store)     │  ← Validation, parameterized SQL
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async engine + session factory
    └─────────────────────────────────────┘

    Routes never touch SQL directly; services never touch HTTP objects.
"""

__version__ = "1.0.0"
