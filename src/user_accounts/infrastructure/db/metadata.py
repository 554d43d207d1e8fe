"""SQLAlchemy metadata definitions for user account tables."""

from __future__ import annotations

import sqlalchemy as sa

metadata = sa.MetaData()

users = sa.Table(
    "users",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("login", sa.Text(), nullable=False),
    sa.Column("password", sa.Text(), nullable=False),
    sa.Column("created_date", sa.DateTime(timezone=True), nullable=True),
)

# Non-unique: login uniqueness is enforced by the user creation protocol.
sa.Index("ix_users_login", users.c.login)

user_groups = sa.Table(
    "user_groups",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
    sa.Column("code", sa.Text(), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.CheckConstraint("code IN ('Admin', 'User')", name="ck_user_groups_code"),
    sa.UniqueConstraint("user_id", name="uq_user_groups_user_id"),
)

sa.Index("ix_user_groups_code", user_groups.c.code)

user_states = sa.Table(
    "user_states",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
    sa.Column("code", sa.Text(), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.CheckConstraint("code IN ('Active', 'Blocked')", name="ck_user_states_code"),
    sa.UniqueConstraint("user_id", name="uq_user_states_user_id"),
)
