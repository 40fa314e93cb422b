"""Create records table with unique natural key.

Revision ID: 001_create_records
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_create_records"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "records",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("height", sa.Integer, nullable=False),
        sa.Column("weight", sa.Integer, nullable=False),
        sa.UniqueConstraint("name", name="uq_records_name"),
    )


def downgrade() -> None:
    op.drop_table("records")
