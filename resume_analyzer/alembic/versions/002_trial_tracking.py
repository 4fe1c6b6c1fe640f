"""Trial tracking - trial_uses / max_trial_uses / trial_expires_at on users

Revision ID: 002_trial_tracking
Revises: 001_initial
Create Date: 2026-10-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "002_trial_tracking"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    inspector = sa.inspect(op.get_bind())
    columns = {c["name"] for c in inspector.get_columns("users")}

    with op.batch_alter_table("users") as batch_op:
        if "trial_uses" not in columns:
            batch_op.add_column(sa.Column("trial_uses", sa.Integer(), nullable=False, server_default="0"))
        if "max_trial_uses" not in columns:
            batch_op.add_column(sa.Column("max_trial_uses", sa.Integer(), nullable=False, server_default="3"))
        if "trial_expires_at" not in columns:
            batch_op.add_column(sa.Column("trial_expires_at", sa.DateTime(), nullable=True))

    indexes = {ix["name"] for ix in sa.inspect(op.get_bind()).get_indexes("users")}
    if "ix_users_trial_uses" not in indexes:
        op.create_index("ix_users_trial_uses", "users", ["trial_uses"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_users_trial_uses", table_name="users")
    with op.batch_alter_table("users") as batch_op:
        batch_op.drop_column("trial_expires_at")
        batch_op.drop_column("max_trial_uses")
        batch_op.drop_column("trial_uses")
