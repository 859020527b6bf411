"""
CloudMemo Backend - Memo SQLAlchemy Model
===========================================

What:  ORM model representing the `memos` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by MemoService for CRUD operations and by Alembic for schema management.

Table Design:
    - Integer primary key assigned by the store on insert. AUTOINCREMENT on
      SQLite (a sequence on PostgreSQL) so a deleted id is never handed out again.
    - content: TEXT, no length limit.
    - created_at / updated_at: UTC with timezone; updated_at >= created_at.

    Index on updated_at DESC:
        The list endpoint always orders by most recently updated first.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from cloudmemo.database import Base


def utc_now() -> datetime:
    """Timezone-aware current time; the only clock the backend uses."""
    return datetime.now(timezone.utc)


class Memo(Base):
    """
    One persisted note.

    Lifecycle:
        1. Created on the first save of a non-empty draft (created_at == updated_at)
        2. content and updated_at rewritten on every later save
        3. Deleted on explicit, user-confirmed deletion

    Query Patterns:
        - List: SELECT ... ORDER BY updated_at DESC, id DESC
        - Get single memo: SELECT ... WHERE id = :id (primary key lookup)
    """

    __tablename__ = "memos"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Store-assigned identifier, immutable and never reused",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Memo body as typed by the user",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        comment="When this memo was first saved (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        comment="When this memo was last saved (UTC)",
    )

    __table_args__ = (
        Index("idx_memos_updated_at", updated_at.desc()),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Memo(id={self.id}, updated_at='{self.updated_at}')>"
