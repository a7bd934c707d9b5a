"""Users, profiles and the university / scholarship / resource catalog

Revision ID: 001
Revises:
Create Date: (run alembic upgrade head)

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.String(16), nullable=False, server_default="student"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("full_name", sa.String(128), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("current_city", sa.String(128), nullable=True),
        sa.Column("highest_education", sa.String(16), nullable=False, server_default=""),
        sa.Column("gpa_or_cgpa", sa.String(16), nullable=True),
        sa.Column("english_test", sa.String(16), nullable=False, server_default=""),
        sa.Column("english_score", sa.String(16), nullable=True),
        sa.Column("target_degree", sa.String(16), nullable=False, server_default=""),
        sa.Column("target_countries", JSONB, nullable=False, server_default="[]"),
        sa.Column("budget_monthly_bdt", sa.Float(), nullable=True),
        sa.Column("onboarding_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email_alerts", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("onsite_alerts", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("alert_days", JSONB, nullable=False, server_default="[30, 14, 7, 1]"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_user_profiles_user_id", "user_profiles", ["user_id"], unique=True)

    op.create_table(
        "universities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("country", sa.String(128), nullable=False),
        sa.Column("city", sa.String(128), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("established_year", sa.Integer(), nullable=True),
        sa.Column("world_ranking", sa.Integer(), nullable=True),
        sa.Column("national_ranking", sa.Integer(), nullable=True),
        sa.Column("logo_url", sa.String(512), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("costs", JSONB, nullable=False, server_default="{}"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_universities_name", "universities", ["name"], unique=False)
    op.create_index("ix_universities_country", "universities", ["country"], unique=False)

    op.create_table(
        "programs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("university_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("level", sa.String(16), nullable=False),
        sa.Column("duration", sa.String(64), nullable=False),
        sa.Column("application_deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rolling", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("min_gpa", sa.Float(), nullable=True),
        sa.Column("english_test", sa.String(16), nullable=True),
        sa.Column("english_min_score", sa.Float(), nullable=True),
    )
    op.create_index("ix_programs_university_id", "programs", ["university_id"], unique=False)

    op.create_table(
        "scholarships",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("university", sa.String(255), nullable=False),
        sa.Column("country", sa.String(128), nullable=False),
        sa.Column("city", sa.String(128), nullable=False),
        sa.Column("degree_level", sa.String(16), nullable=False),
        sa.Column("field_of_study", sa.String(255), nullable=False),
        sa.Column("merit_based", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("need_based", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("min_gpa", sa.Float(), nullable=True),
        sa.Column("income_max_bdt", sa.Float(), nullable=True),
        sa.Column("ielts_min", sa.Float(), nullable=True),
        sa.Column("toefl_min", sa.Float(), nullable=True),
        sa.Column("gre_min", sa.Float(), nullable=True),
        sa.Column("coverage_percent", sa.Float(), nullable=True),
        sa.Column("amount_bdt", sa.Float(), nullable=True),
        sa.Column("stipend_monthly_bdt", sa.Float(), nullable=True),
        sa.Column("application_fee_bdt", sa.Float(), nullable=True),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rolling", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_scholarships_country", "scholarships", ["country"], unique=False)
    op.create_index("ix_scholarships_degree_level", "scholarships", ["degree_level"], unique=False)

    op.create_table(
        "resources",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(64), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("file_url", sa.String(512), nullable=True),
        sa.Column("target_audience", sa.String(16), nullable=False, server_default="All"),
        sa.Column("difficulty", sa.String(16), nullable=False, server_default="Beginner"),
        sa.Column("author", sa.String(128), nullable=True),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_resources_category", "resources", ["category"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_resources_category", table_name="resources")
    op.drop_table("resources")
    op.drop_index("ix_scholarships_degree_level", table_name="scholarships")
    op.drop_index("ix_scholarships_country", table_name="scholarships")
    op.drop_table("scholarships")
    op.drop_index("ix_programs_university_id", table_name="programs")
    op.drop_table("programs")
    op.drop_index("ix_universities_country", table_name="universities")
    op.drop_index("ix_universities_name", table_name="universities")
    op.drop_table("universities")
    op.drop_index("ix_user_profiles_user_id", table_name="user_profiles")
    op.drop_table("user_profiles")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
