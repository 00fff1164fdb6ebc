"""Organizations, truck entries and other expenses

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_organizations_name"),
    )

    op.create_table(
        "truck_entries",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("organization_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("entry_type", sa.String(20), nullable=False),
        sa.Column("truck_number", sa.String(50), nullable=False),
        sa.Column("truck_name", sa.String(200), nullable=True),
        sa.Column("material_type", sa.String(100), nullable=True),
        sa.Column("units", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("rate_per_unit", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("total_amount", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("entry_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.CheckConstraint("entry_type IN ('Sales', 'RawStone')", name="ck_truck_entries_entry_type"),
    )
    op.create_index("ix_truck_entries_organization_id", "truck_entries", ["organization_id"])
    op.create_index("ix_truck_entries_entry_type", "truck_entries", ["entry_type"])
    op.create_index("ix_truck_entries_org_entry_date", "truck_entries", ["organization_id", "entry_date"])

    op.create_table(
        "other_expenses",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("organization_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("expenses_name", sa.String(100), nullable=False),
        sa.Column("others", sa.String(255), nullable=True),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
    )
    op.create_index("ix_other_expenses_organization_id", "other_expenses", ["organization_id"])
    op.create_index("ix_other_expenses_org_date", "other_expenses", ["organization_id", "date"])


def downgrade() -> None:
    op.drop_index("ix_other_expenses_org_date", table_name="other_expenses")
    op.drop_index("ix_other_expenses_organization_id", table_name="other_expenses")
    op.drop_table("other_expenses")
    op.drop_index("ix_truck_entries_org_entry_date", table_name="truck_entries")
    op.drop_index("ix_truck_entries_entry_type", table_name="truck_entries")
    op.drop_index("ix_truck_entries_organization_id", table_name="truck_entries")
    op.drop_table("truck_entries")
    op.drop_table("organizations")
