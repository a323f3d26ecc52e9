"""
Cocktail Catalog Backend: Application Package
===============================================

What: REST backend for the cocktail catalog (users, spirits, cocktails, comments).
Who:  Imported by uvicorn (`cocktail_api.main:app`), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │    Routes + Dependencies (API)      │  ← HTTP concerns, Auth Gate
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Orchestration, images, tokens
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
