"""Initial schema for users, user groups and user states."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("login", sa.Text(), nullable=False),
        sa.Column("password", sa.Text(), nullable=False),
        sa.Column("created_date", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_login", "users", ["login"], unique=False)

    op.create_table(
        "user_groups",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.CheckConstraint("code IN ('Admin', 'User')", name="ck_user_groups_code"),
        sa.UniqueConstraint("user_id", name="uq_user_groups_user_id"),
    )
    op.create_index("ix_user_groups_code", "user_groups", ["code"], unique=False)

    op.create_table(
        "user_states",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.CheckConstraint("code IN ('Active', 'Blocked')", name="ck_user_states_code"),
        sa.UniqueConstraint("user_id", name="uq_user_states_user_id"),
    )


def downgrade() -> None:
    op.drop_table("user_states")
    op.drop_index("ix_user_groups_code", table_name="user_groups")
    op.drop_table("user_groups")
    op.drop_index("ix_users_login", table_name="users")
    op.drop_table("users")
