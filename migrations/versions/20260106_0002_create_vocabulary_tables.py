"""Create vocabulary tables and the per-user review schedule."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20260106_0002"
down_revision: Union[str, None] = "20260105_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "vocabulary",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("word", sa.String(length=255), nullable=False),
        sa.Column("definition", sa.Text(), nullable=False),
        sa.Column("example", sa.Text(), nullable=True),
        sa.Column("level", sa.String(length=8), server_default=sa.text("'A1'"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("word", "level", name="uq_vocabulary_word_level"),
    )

    op.create_table(
        "user_vocabulary",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("vocabulary_id", sa.Integer(), nullable=False),
        sa.Column("ease_factor", sa.Integer(), server_default=sa.text("250"), nullable=False),
        sa.Column("interval", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("repetitions", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column(
            "next_review_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("last_reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=16), server_default=sa.text("'new'"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            server_onupdate=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ("user_id",),
            ("users.id",),
            name="fk_user_vocabulary_user_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ("vocabulary_id",),
            ("vocabulary.id",),
            name="fk_user_vocabulary_vocabulary_id",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("user_id", "vocabulary_id", name="uq_user_vocabulary_user_item"),
    )
    op.create_index(
        "ix_user_vocabulary_user_id_next_review_at",
        "user_vocabulary",
        ("user_id", "next_review_at"),
    )

    op.create_table(
        "vocabulary_reviews",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("user_vocabulary_id", sa.Integer(), nullable=False),
        sa.Column("quality", sa.Integer(), nullable=False),
        sa.Column(
            "reviewed_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ("user_vocabulary_id",),
            ("user_vocabulary.id",),
            name="fk_vocabulary_reviews_user_vocabulary_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_vocabulary_reviews_user_vocabulary_id",
        "vocabulary_reviews",
        ("user_vocabulary_id",),
    )


def downgrade() -> None:
    op.drop_index("ix_vocabulary_reviews_user_vocabulary_id", table_name="vocabulary_reviews")
    op.drop_table("vocabulary_reviews")
    op.drop_index("ix_user_vocabulary_user_id_next_review_at", table_name="user_vocabulary")
    op.drop_table("user_vocabulary")
    op.drop_table("vocabulary")
