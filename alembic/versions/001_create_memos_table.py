"""Create memos table

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  Creates the `memos` table and its updated_at index.
How:   Integer identity key; AUTOINCREMENT on SQLite so deleted ids are
       never reissued (PostgreSQL sequences never reissue either).

Rollback: downgrade() drops the table and every memo in it.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the memos table, see cloudmemo/models/memo.py."""
    op.create_table(
        "memos",
        sa.Column(
            "id",
            sa.Integer(),
            autoincrement=True,
            nullable=False,
            comment="Store-assigned identifier, immutable and never reused",
        ),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            comment="Memo body as typed by the user",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this memo was first saved (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this memo was last saved (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )

    # The list endpoint orders by updated_at DESC on every cache miss
    op.create_index(
        "idx_memos_updated_at",
        "memos",
        [sa.text("updated_at DESC")],
    )


def downgrade() -> None:
    """Drop the memos table. Destructive: all memo data is lost."""
    op.drop_index("idx_memos_updated_at", table_name="memos")
    op.drop_table("memos")
