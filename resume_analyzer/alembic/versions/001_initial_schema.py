"""Initial schema - users, sessions, resumes, kv_store and payments tables

Tables that already exist are left alone so a database created by hand
(or by create_all) can be brought under migration control.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _create_index_if_missing(inspector, name: str, table: str, columns: list[str], unique: bool = False) -> None:
    existing = {ix["name"] for ix in inspector.get_indexes(table)}
    if name not in existing:
        op.create_index(name, table, columns, unique=unique)


def upgrade() -> None:
    bind = op.get_bind()
    tables = set(sa.inspect(bind).get_table_names())

    if "users" not in tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("uuid", sa.String(length=255), nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column("subscription_tier", sa.String(length=50), nullable=True, server_default="free"),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )

    if "sessions" not in tables:
        op.create_table(
            "sessions",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("session_token", sa.String(length=500), nullable=False),
            sa.Column("expires_at", sa.DateTime(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )

    if "resumes" not in tables:
        op.create_table(
            "resumes",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("file_name", sa.String(length=500), nullable=False),
            sa.Column("file_path", sa.String(length=1000), nullable=False),
            sa.Column("file_size", sa.Integer(), nullable=True),
            sa.Column("mime_type", sa.String(length=100), nullable=True),
            sa.Column("storage_url", sa.Text(), nullable=True),
            sa.Column("analysis_data", _JSON, nullable=True),
            sa.Column("ats_score", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )

    if "kv_store" not in tables:
        op.create_table(
            "kv_store",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("key", sa.String(length=500), nullable=False),
            sa.Column("value", sa.Text(), nullable=True),
            sa.Column("user_id", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("key", "user_id", name="uq_kv_store_key_user"),
        )

    if "payments" not in tables:
        op.create_table(
            "payments",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("user_id", sa.Integer(), nullable=False),
            sa.Column("razorpay_order_id", sa.String(length=100), nullable=False),
            sa.Column("razorpay_payment_id", sa.String(length=100), nullable=True),
            sa.Column("razorpay_signature", sa.String(length=256), nullable=True),
            sa.Column("amount", sa.Integer(), nullable=False),
            sa.Column("currency", sa.String(length=10), nullable=True),
            sa.Column("payment_status", sa.String(length=50), nullable=True),
            sa.Column("plan_id", sa.String(length=100), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )

    inspector = sa.inspect(bind)
    _create_index_if_missing(inspector, "ix_users_id", "users", ["id"])
    _create_index_if_missing(inspector, "ix_users_uuid", "users", ["uuid"], unique=True)
    _create_index_if_missing(inspector, "ix_users_email", "users", ["email"], unique=True)
    _create_index_if_missing(inspector, "ix_sessions_id", "sessions", ["id"])
    _create_index_if_missing(inspector, "ix_sessions_user_id", "sessions", ["user_id"])
    _create_index_if_missing(inspector, "ix_sessions_session_token", "sessions", ["session_token"], unique=True)
    _create_index_if_missing(inspector, "ix_sessions_expires_at", "sessions", ["expires_at"])
    _create_index_if_missing(inspector, "ix_resumes_id", "resumes", ["id"])
    _create_index_if_missing(inspector, "ix_resumes_user_id", "resumes", ["user_id"])
    _create_index_if_missing(inspector, "ix_resumes_created_at", "resumes", ["created_at"])
    _create_index_if_missing(inspector, "ix_kv_store_id", "kv_store", ["id"])
    _create_index_if_missing(inspector, "ix_kv_store_key", "kv_store", ["key"])
    _create_index_if_missing(inspector, "ix_kv_store_user_id", "kv_store", ["user_id"])
    _create_index_if_missing(inspector, "ix_payments_id", "payments", ["id"])
    _create_index_if_missing(inspector, "ix_payments_user_id", "payments", ["user_id"])
    _create_index_if_missing(inspector, "ix_payments_razorpay_order_id", "payments", ["razorpay_order_id"], unique=True)


def downgrade() -> None:
    op.drop_table("payments")
    op.drop_table("kv_store")
    op.drop_table("resumes")
    op.drop_table("sessions")
    op.drop_table("users")
