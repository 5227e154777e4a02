"""create_patients_table

Revision ID: 001_create_patients_table
Revises:
Create Date: 2026-10-19 09:12:44.318502

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_create_patients_table"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create patients table."""
    op.create_table(
        "patients",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("identifier_system", sa.String(255), nullable=True),
        sa.Column("identifier_value", sa.String(255), nullable=True),
        sa.Column("active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("family_name", sa.String(255), server_default="", nullable=False),
        sa.Column("given_name", sa.String(255), server_default="", nullable=False),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_patients_identifier",
        "patients",
        ["identifier_system", "identifier_value"],
        unique=False,
    )
    op.create_index(
        "idx_patients_name",
        "patients",
        ["family_name", "given_name"],
        unique=False,
    )


def downgrade() -> None:
    """Drop patients table."""
    op.drop_index("idx_patients_name", table_name="patients")
    op.drop_index("idx_patients_identifier", table_name="patients")
    op.drop_table("patients")
