"""Initial schema with job_queue table

Revision ID: 001
Revises: 
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        DO $$ BEGIN
            CREATE TYPE job_status AS ENUM ('available', 'claimed');
        EXCEPTION
            WHEN duplicate_object THEN null;
        END $$;
    """)

    op.create_table(
        "job_queue",
        sa.Column("id", sa.BigInteger, autoincrement=True, nullable=False),
        sa.Column(
            "status",
            postgresql.ENUM("available", "claimed", name="job_status", create_type=False),
            nullable=False,
            server_default="available",
        ),
        sa.Column("payload", sa.Text, nullable=False),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Partial index walked by claim scans
    op.execute("""
        CREATE INDEX ix_job_queue_available
        ON job_queue (id)
        WHERE status = 'available'
    """)


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS ix_job_queue_available")
    op.drop_table("job_queue")
    op.execute("DROP TYPE IF EXISTS job_status")
