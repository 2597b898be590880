"""initial tripsync schema: users, friendships, groups, chat, schedules, votes

Revision ID: 20261019_initial_tripsync_schema
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_initial_tripsync_schema"
down_revision = None
branch_labels = None
depends_on = None

_UUID = postgresql.UUID(as_uuid=True)

_ENUMS = (
    ("friendship_status", ("pending", "accepted")),
    ("group_visibility", ("public", "private")),
    ("group_member_role", ("leader", "member")),
    ("group_invite_status", ("pending", "accepted", "declined")),
    ("chat_room_type", ("dm", "group", "schedule")),
    ("schedule_type", ("personal", "group")),
)


def _enum(name: str) -> postgresql.ENUM:
    values = dict(_ENUMS)[name]
    return postgresql.ENUM(*values, name=name, create_type=False)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in _ENUMS:
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("uuid", _UUID, primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        _created_at(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "user_profiles",
        sa.Column("uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=50)),
        sa.Column("gender", sa.String(length=16)),
        sa.Column("birthdate", sa.Date()),
        sa.Column("paradox_flag", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("profile_picture", sa.String(length=512)),
    )

    op.create_table(
        "friendships",
        sa.Column("uuid", _UUID, primary_key=True, nullable=False),
        sa.Column("user1_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("user2_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("requester_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("status", _enum("friendship_status"), nullable=False, server_default="pending"),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("user1_uuid", "user2_uuid", name="uq_friendship_pair"),
        sa.CheckConstraint("user1_uuid <> user2_uuid", name="ck_friendship_distinct"),
    )
    op.create_index("ix_friendships_user1_uuid", "friendships", ["user1_uuid"])
    op.create_index("ix_friendships_user2_uuid", "friendships", ["user2_uuid"])

    op.create_table(
        "group_info",
        sa.Column("uuid", _UUID, primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("group_icon", sa.String(length=512)),
        sa.Column("group_picture", sa.String(length=512)),
        sa.Column("visibility", _enum("group_visibility"), nullable=False, server_default="public"),
        sa.Column("group_leader_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_group_info_group_leader_uuid", "group_info", ["group_leader_uuid"])

    op.create_table(
        "group_members",
        sa.Column("group_uuid", _UUID, sa.ForeignKey("group_info.uuid", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), primary_key=True),
        sa.Column("role", _enum("group_member_role"), nullable=False, server_default="member"),
        _created_at(),
    )

    op.create_table(
        "group_surveys",
        sa.Column("group_uuid", _UUID, sa.ForeignKey("group_info.uuid", ondelete="CASCADE"), primary_key=True),
        sa.Column("activity_type", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("budget_type", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("trip_duration", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "group_invites",
        sa.Column("uuid", _UUID, primary_key=True, nullable=False),
        sa.Column("group_uuid", _UUID, sa.ForeignKey("group_info.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("inviter_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("invited_user_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("status", _enum("group_invite_status"), nullable=False, server_default="pending"),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("group_uuid", "invited_user_uuid", name="uq_group_invite_target"),
    )
    op.create_index("ix_group_invites_group_uuid", "group_invites", ["group_uuid"])
    op.create_index("ix_group_invites_invited_user_uuid", "group_invites", ["invited_user_uuid"])

    op.create_table(
        "schedules",
        sa.Column("uuid", _UUID, primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("location", sa.String(length=255)),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("type", _enum("schedule_type"), nullable=False, server_default="personal"),
        sa.Column("owner_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("group_uuid", _UUID, sa.ForeignKey("group_info.uuid", ondelete="CASCADE")),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_schedules_owner_uuid", "schedules", ["owner_uuid"])
    op.create_index("ix_schedules_group_uuid", "schedules", ["group_uuid"])

    op.create_table(
        "schedule_members",
        sa.Column("schedule_uuid", _UUID, sa.ForeignKey("schedules.uuid", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), primary_key=True),
        _created_at(),
    )

    op.create_table(
        "chat_rooms",
        sa.Column("uuid", _UUID, primary_key=True, nullable=False),
        sa.Column("type", _enum("chat_room_type"), nullable=False),
        sa.Column("group_uuid", _UUID, sa.ForeignKey("group_info.uuid", ondelete="CASCADE")),
        sa.Column("schedule_uuid", _UUID, sa.ForeignKey("schedules.uuid", ondelete="CASCADE")),
        sa.Column("dm_key", sa.String(length=80)),
        _created_at(),
        sa.UniqueConstraint("schedule_uuid", name="uq_chat_rooms_schedule_uuid"),
        sa.UniqueConstraint("dm_key", name="uq_chat_rooms_dm_key"),
    )
    op.create_index("ix_chat_rooms_group_uuid", "chat_rooms", ["group_uuid"])

    op.create_table(
        "chat_room_members",
        sa.Column("room_uuid", _UUID, sa.ForeignKey("chat_rooms.uuid", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), primary_key=True),
        _created_at(),
    )

    op.create_table(
        "chat_messages",
        sa.Column("uuid", _UUID, primary_key=True, nullable=False),
        sa.Column("room_uuid", _UUID, sa.ForeignKey("chat_rooms.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("sender_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_chat_messages_room_uuid", "chat_messages", ["room_uuid"])

    op.create_table(
        "travel_votes",
        sa.Column("uuid", _UUID, primary_key=True, nullable=False),
        sa.Column("group_uuid", _UUID, sa.ForeignKey("group_info.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("creator_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=100)),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("headcount", sa.Integer()),
        sa.Column("description", sa.Text()),
        sa.Column("vote_deadline", sa.DateTime(timezone=True), nullable=False),
        sa.Column("schedule_uuid", _UUID, sa.ForeignKey("schedules.uuid", ondelete="SET NULL")),
        _created_at(),
    )
    op.create_index("ix_travel_votes_group_uuid", "travel_votes", ["group_uuid"])

    op.create_table(
        "travel_vote_participants",
        sa.Column("vote_uuid", _UUID, sa.ForeignKey("travel_votes.uuid", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), primary_key=True),
        _created_at(),
    )

    op.create_table(
        "user_travel_surveys",
        sa.Column("uuid", _UUID, primary_key=True, nullable=False),
        sa.Column("user_uuid", _UUID, sa.ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("activity_type", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("budget_type", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("trip_duration", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
    )
    op.create_index("ix_user_travel_surveys_user_uuid", "user_travel_surveys", ["user_uuid"])


def downgrade() -> None:
    for table in (
        "user_travel_surveys",
        "travel_vote_participants",
        "travel_votes",
        "chat_messages",
        "chat_room_members",
        "chat_rooms",
        "schedule_members",
        "schedules",
        "group_invites",
        "group_surveys",
        "group_members",
        "group_info",
        "friendships",
        "user_profiles",
        "users",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for name, values in reversed(_ENUMS):
        postgresql.ENUM(*values, name=name).drop(bind, checkfirst=True)
