"""component overhaul tracking

Revision ID: 0002_component_overhaul
Revises: 0001_initial
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

revision = "0002_component_overhaul"
down_revision = "0001_initial"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.add_column("components", sa.Column("last_overhaul_airframe", sa.Numeric(10, 1), nullable=True))
    op.add_column("components", sa.Column("last_overhaul_date", sa.DateTime(), nullable=True))
    op.add_column("components", sa.Column("overhaul_notes", sa.Text(), nullable=True))


def downgrade() -> None:
    op.drop_column("components", "overhaul_notes")
    op.drop_column("components", "last_overhaul_date")
    op.drop_column("components", "last_overhaul_airframe")
