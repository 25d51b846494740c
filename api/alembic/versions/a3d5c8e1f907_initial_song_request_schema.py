"""initial song request schema

Revision ID: a3d5c8e1f907
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a3d5c8e1f907"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    """Create persons, events, rosters, guests, song requests and likes."""
    op.create_table(
        "persons",
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_persons_id"), "persons", ["id"], unique=False)
    op.create_index(op.f("ix_persons_email"), "persons", ["email"], unique=True)
    op.create_index(op.f("ix_persons_role"), "persons", ["role"], unique=False)
    op.create_index(op.f("ix_persons_is_active"), "persons", ["is_active"], unique=False)

    op.create_table(
        "events",
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("venue_name", sa.String(), nullable=True),
        sa.Column("venue_city", sa.String(), nullable=True),
        sa.Column("manager_id", sa.Integer(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), nullable=True),
        sa.Column("max_members", sa.Integer(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("requires_approval", sa.Boolean(), nullable=False),
        sa.Column("max_songs_per_user", sa.Integer(), nullable=False),
        sa.Column("allow_duplicates", sa.Boolean(), nullable=False),
        sa.Column("time_bomb_enabled", sa.Boolean(), nullable=False),
        sa.Column("time_bomb_duration", sa.Integer(), nullable=True),
        sa.Column("queue_sequence", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_song_requests", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_likes", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
        sa.CheckConstraint("start_date < end_date", name="ck_events_date_range"),
        sa.ForeignKeyConstraint(["manager_id"], ["persons.id"]),
        sa.ForeignKeyConstraint(["created_by_id"], ["persons.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_events_id"), "events", ["id"], unique=False)
    op.create_index(op.f("ix_events_status"), "events", ["status"], unique=False)
    op.create_index(op.f("ix_events_start_date"), "events", ["start_date"], unique=False)
    op.create_index(op.f("ix_events_manager_id"), "events", ["manager_id"], unique=False)
    op.create_index(op.f("ix_events_is_public"), "events", ["is_public"], unique=False)
    op.create_index("ix_events_manager_status", "events", ["manager_id", "status"], unique=False)

    op.create_table(
        "event_members",
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_approved", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["person_id"], ["persons.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_id", "person_id", name="uq_event_member"),
    )
    op.create_index(op.f("ix_event_members_id"), "event_members", ["id"], unique=False)
    op.create_index(op.f("ix_event_members_event_id"), "event_members", ["event_id"], unique=False)
    op.create_index(op.f("ix_event_members_person_id"), "event_members", ["person_id"], unique=False)

    op.create_table(
        "event_participants",
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_approved", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_id", "email", "last_name", name="uq_event_participant_identity"),
    )
    op.create_index(op.f("ix_event_participants_id"), "event_participants", ["id"], unique=False)
    op.create_index(op.f("ix_event_participants_event_id"), "event_participants", ["event_id"], unique=False)
    op.create_index(op.f("ix_event_participants_email"), "event_participants", ["email"], unique=False)

    op.create_table(
        "song_requests",
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("artist", sa.String(), nullable=False),
        sa.Column("album", sa.String(), nullable=True),
        sa.Column("genre", sa.String(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("spotify_id", sa.String(), nullable=True),
        sa.Column("youtube_id", sa.String(), nullable=True),
        sa.Column("apple_music_id", sa.String(), nullable=True),
        sa.Column("request_note", sa.String(), nullable=True),
        sa.Column("dj_note", sa.String(), nullable=True),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("requested_by_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("priority", sa.Integer(), server_default="0", nullable=False),
        sa.Column("queue_position", sa.Integer(), nullable=True),
        sa.Column("like_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_time_bomb", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("time_bomb_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("time_bomb_amount", sa.Float(), nullable=True),
        sa.Column("approved_by_id", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_by_id", sa.Integer(), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.String(), nullable=True),
        sa.Column("played_by_id", sa.Integer(), nullable=True),
        sa.Column("played_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("play_duration", sa.Integer(), nullable=True),
        sa.Column("skipped_by_id", sa.Integer(), nullable=True),
        sa.Column("skipped_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_by_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["requested_by_id"], ["persons.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["approved_by_id"], ["persons.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["rejected_by_id"], ["persons.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["played_by_id"], ["persons.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["skipped_by_id"], ["persons.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["updated_by_id"], ["persons.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_song_requests_id"), "song_requests", ["id"], unique=False)
    op.create_index(op.f("ix_song_requests_event_id"), "song_requests", ["event_id"], unique=False)
    op.create_index(op.f("ix_song_requests_requested_by_id"), "song_requests", ["requested_by_id"], unique=False)
    op.create_index(op.f("ix_song_requests_status"), "song_requests", ["status"], unique=False)
    op.create_index("ix_song_requests_event_status", "song_requests", ["event_id", "status"], unique=False)
    op.create_index(
        "ix_song_requests_event_queue_position",
        "song_requests",
        ["event_id", "queue_position"],
        unique=False,
    )
    op.create_index(
        "ix_song_requests_event_priority_likes",
        "song_requests",
        ["event_id", "priority", "like_count"],
        unique=False,
    )
    op.create_index(
        "ix_song_requests_time_bomb",
        "song_requests",
        ["is_time_bomb", "time_bomb_expires_at"],
        unique=False,
    )
    op.create_index(
        "ix_song_requests_event_title_artist",
        "song_requests",
        ["event_id", "title", "artist"],
        unique=False,
    )

    op.create_table(
        "song_request_likes",
        sa.Column("song_request_id", sa.Integer(), nullable=False),
        sa.Column("person_id", sa.Integer(), nullable=False),
        sa.Column("liked_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["song_request_id"], ["song_requests.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["person_id"], ["persons.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("song_request_id", "person_id", name="uq_song_request_like"),
    )
    op.create_index(op.f("ix_song_request_likes_id"), "song_request_likes", ["id"], unique=False)
    op.create_index(
        op.f("ix_song_request_likes_song_request_id"),
        "song_request_likes",
        ["song_request_id"],
        unique=False,
    )
    op.create_index(op.f("ix_song_request_likes_person_id"), "song_request_likes", ["person_id"], unique=False)


def downgrade() -> None:
    """Drop the song request schema."""
    op.drop_table("song_request_likes")
    op.drop_table("song_requests")
    op.drop_table("event_participants")
    op.drop_table("event_members")
    op.drop_table("events")
    op.drop_table("persons")
