"""add event feedback

Revision ID: c81f4d2b6e30
Revises: a3d5c8e1f907
Create Date: 2026-10-18 16:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "c81f4d2b6e30"
down_revision: Union[str, None] = "a3d5c8e1f907"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the event_feedback table."""
    op.create_table(
        "event_feedback",
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("submitted_by_id", sa.Integer(), nullable=True),
        sa.Column("first_name", sa.String(length=50), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.String(length=1000), nullable=False),
        sa.Column("is_approved", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_event_feedback_rating"),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["submitted_by_id"], ["persons.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_event_feedback_id"), "event_feedback", ["id"], unique=False)
    op.create_index(op.f("ix_event_feedback_event_id"), "event_feedback", ["event_id"], unique=False)
    op.create_index(op.f("ix_event_feedback_rating"), "event_feedback", ["rating"], unique=False)
    op.create_index("ix_event_feedback_event_created", "event_feedback", ["event_id", "created_at"], unique=False)


def downgrade() -> None:
    """Drop the event_feedback table."""
    op.drop_index("ix_event_feedback_event_created", table_name="event_feedback")
    op.drop_index(op.f("ix_event_feedback_rating"), table_name="event_feedback")
    op.drop_index(op.f("ix_event_feedback_event_id"), table_name="event_feedback")
    op.drop_index(op.f("ix_event_feedback_id"), table_name="event_feedback")
    op.drop_table("event_feedback")
