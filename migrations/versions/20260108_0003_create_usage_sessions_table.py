"""Record individual metered usage sessions."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20260108_0003"
down_revision: Union[str, None] = "20260106_0002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "usage_sessions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("session_type", sa.String(length=32), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("lesson_id", sa.Integer(), nullable=True),
        sa.Column("logged_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ("user_id",),
            ("users.id",),
            name="fk_usage_sessions_user_id_users",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_usage_sessions_user_id", "usage_sessions", ("user_id",))


def downgrade() -> None:
    op.drop_index("ix_usage_sessions_user_id", table_name="usage_sessions")
    op.drop_table("usage_sessions")
