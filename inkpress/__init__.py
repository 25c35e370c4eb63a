"""
Inkpress Backend - Application Package Initializer
==================================================

What: Marks the `inkpress` directory as a Python package.
Who:  Used by Alembic, pytest, and uvicorn (`uvicorn inkpress.main:app`).

Architecture Note:
    The backend is layered:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, cookies, status codes
    ├─────────────────────────────────────┤
    │     Services (Content API logic)    │  ← auth, ownership, uploads, hashing, tokens
    ├─────────────────────────────────────┤
    │     Stores, Models & Schemas        │  ← SQLAlchemy ORM + Pydantic contracts
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the ORM directly; services never build HTTP responses.
"""

__version__ = "1.0.0"
