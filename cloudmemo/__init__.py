"""
CloudMemo - Application Package Initializer
=============================================

What: Single-user memo and cloud-clipboard service plus its editor client.
Who:  Imported by uvicorn (cloudmemo.main:app), Alembic, pytest and the client.

Architecture Note:
    The backend follows the same layering top to bottom:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependency
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← CRUD, cache fill/invalidate
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │  Database + Key-Value Store (I/O)   │  ← memos durable, sessions/cache/clip ephemeral
    └─────────────────────────────────────┘

    The `cloudmemo.client` subpackage is the other half of the system: the
    editor state machine that debounces writes against this API.
"""

__version__ = "1.0.0"
