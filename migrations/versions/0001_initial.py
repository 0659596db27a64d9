"""initial users and admin allow-list

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("google_id", sa.Text(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("role", sa.String(length=30), nullable=False, server_default="admin"),
        sa.Column("created_at", sa.String(length=32), nullable=False),
        sa.UniqueConstraint("google_id"),
        sa.UniqueConstraint("email"),
    )
    op.create_table(
        "admin_users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("is_base_admin", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.String(length=32), nullable=False),
        sa.UniqueConstraint("email"),
    )
    op.create_index("idx_admin_users_base_admin", "admin_users", ["is_base_admin"])


def downgrade() -> None:
    op.drop_index("idx_admin_users_base_admin", table_name="admin_users")
    op.drop_table("admin_users")
    op.drop_table("users")
