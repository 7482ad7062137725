"""Add claim_record key-value table.

Revision ID: f1a2b3c4d5e6
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "f1a2b3c4d5e6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "claim_record",
        sa.Column("company_id", sa.String(128), nullable=False),
        sa.Column("timesheet_id", sa.String(128), nullable=False),
        sa.Column("document", postgresql.JSONB(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint(
            "company_id", "timesheet_id", name="pk_claim_record"
        ),
    )
    op.create_index(
        "idx_claim_record_company",
        "claim_record",
        ["company_id"],
    )


def downgrade() -> None:
    op.drop_index("idx_claim_record_company", table_name="claim_record")
    op.drop_table("claim_record")
