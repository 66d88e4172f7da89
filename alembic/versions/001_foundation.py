"""Foundation: users, volunteer activities/registrations and posts.

Revision ID: 001_foundation
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001_foundation"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table(
        "users",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("nickname", sa.Text, nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("employee_id", sa.Text, nullable=True),
        sa.Column("gender", sa.Text, nullable=True),
        sa.Column("profile_icon_url", sa.Text, nullable=True),
        sa.Column(
            "is_admin", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("nickname", name="uq_users_nickname"),
    )

    op.create_table(
        "volunteer_activities",
        sa.Column("id", sa.BigInteger, sa.Identity(), primary_key=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("date", sa.Date, nullable=True),
        sa.Column("deadline", sa.Date, nullable=True),
        sa.Column(
            "max_participants", sa.Integer, nullable=False, server_default="0"
        ),
        sa.Column("status", sa.Text, nullable=False, server_default="open"),
        sa.Column(
            "is_published", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("location", sa.Text, nullable=False, server_default=""),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint(
            "status IN ('open', 'closed')", name="ck_volunteer_activities_status"
        ),
        sa.CheckConstraint(
            "max_participants >= 0", name="ck_volunteer_activities_max_participants"
        ),
    )
    op.create_index(
        "ix_volunteer_activities_status_deadline",
        "volunteer_activities",
        ["status", "deadline"],
    )

    op.create_table(
        "volunteer_registrations",
        sa.Column("id", sa.BigInteger, sa.Identity(), primary_key=True),
        sa.Column(
            "activity_id",
            sa.BigInteger,
            sa.ForeignKey("volunteer_activities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("employee_id", sa.Text, nullable=False, server_default=""),
        sa.Column("user_name", sa.Text, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("status", sa.Text, nullable=False, server_default="pending"),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'rejected')",
            name="ck_volunteer_registrations_status",
        ),
        sa.UniqueConstraint(
            "activity_id",
            "employee_id",
            name="uq_volunteer_registrations_activity_employee",
        ),
    )
    op.create_index(
        "ix_volunteer_registrations_activity_status",
        "volunteer_registrations",
        ["activity_id", "status"],
    )
    op.create_index(
        "ix_volunteer_registrations_employee_status",
        "volunteer_registrations",
        ["employee_id", "status", "created_at"],
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.BigInteger, sa.Identity(), primary_key=True),
        sa.Column("author_nickname", sa.Text, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column(
            "is_admin", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column("post_type", sa.Text, nullable=False, server_default="general"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )


def downgrade() -> None:
    op.drop_table("posts")
    op.drop_index(
        "ix_volunteer_registrations_employee_status",
        table_name="volunteer_registrations",
    )
    op.drop_index(
        "ix_volunteer_registrations_activity_status",
        table_name="volunteer_registrations",
    )
    op.drop_table("volunteer_registrations")
    op.drop_index(
        "ix_volunteer_activities_status_deadline", table_name="volunteer_activities"
    )
    op.drop_table("volunteer_activities")
    op.drop_table("users")
