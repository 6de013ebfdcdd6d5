from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "challenges",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=160), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("category", sa.String(length=80), nullable=False),
        sa.Column("week", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("start_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("end_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("points > 0", name="ck_challenge_points_positive"),
        sa.CheckConstraint("week >= 1", name="ck_challenge_week_positive"),
    )
    op.create_index("ix_challenges_category", "challenges", ["category"])
    op.create_index("ix_challenges_week", "challenges", ["week"])

    op.create_table(
        "user_challenge_submissions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("challenge_id", sa.String(length=36), sa.ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("photo_key", sa.Text(), nullable=True),
        sa.Column("caption", sa.String(length=200), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("points_awarded", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("submitted_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("reviewed_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(length=128), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.UniqueConstraint("user_id", "challenge_id", name="uq_submission_one_per_user_challenge"),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="ck_submission_status"),
        sa.CheckConstraint("status = 'approved' OR points_awarded = 0", name="ck_submission_points_only_when_approved"),
    )
    op.create_index("ix_user_challenge_submissions_user_id", "user_challenge_submissions", ["user_id"])
    op.create_index("ix_user_challenge_submissions_challenge_id", "user_challenge_submissions", ["challenge_id"])
    op.create_index("ix_user_challenge_submissions_status", "user_challenge_submissions", ["status"])

    op.create_table(
        "student_profiles",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("full_name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("school_name", sa.String(length=160), nullable=False),
        sa.Column("grade", sa.String(length=32), nullable=False),
        sa.Column("class", sa.String(length=32), nullable=True),
        sa.Column("student_id", sa.String(length=64), nullable=True),
        sa.Column("eco_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_student_profiles_user_id", "student_profiles", ["user_id"], unique=True)
    op.create_index("ix_student_profiles_school_name", "student_profiles", ["school_name"])

    op.create_table(
        "admin_users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=120), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="admin"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_admin_users_username", "admin_users", ["username"], unique=True)

def downgrade() -> None:
    op.drop_index("ix_admin_users_username", table_name="admin_users")
    op.drop_table("admin_users")
    op.drop_index("ix_student_profiles_school_name", table_name="student_profiles")
    op.drop_index("ix_student_profiles_user_id", table_name="student_profiles")
    op.drop_table("student_profiles")
    op.drop_index("ix_user_challenge_submissions_status", table_name="user_challenge_submissions")
    op.drop_index("ix_user_challenge_submissions_challenge_id", table_name="user_challenge_submissions")
    op.drop_index("ix_user_challenge_submissions_user_id", table_name="user_challenge_submissions")
    op.drop_table("user_challenge_submissions")
    op.drop_index("ix_challenges_week", table_name="challenges")
    op.drop_index("ix_challenges_category", table_name="challenges")
    op.drop_table("challenges")
