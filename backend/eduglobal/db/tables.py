"""
Single source of truth for database tables that exist after migrations.

Use these names when writing raw SQL (e.g. TRUNCATE) and in alembic/env.py to
check that models and migrations agree.
"""
ALL_TABLE_NAMES = (
    "users",
    "user_profiles",
    "saved_programs",
    "deadline_notifications",
    "notifications",
    "universities",
    "programs",
    "scholarships",
    "resources",
    "applications",
    "application_status_history",
)

# Per-user notification tables (both homes of the notification ledger).
NOTIFICATION_TABLE_NAMES = (
    "notifications",
    "deadline_notifications",
)
