"""
Centralized constants for applications, notifications and the deadline scheduler.

Change job IDs, closed sets and day counts here instead of scattering literals
across models, services and routes. Lifetimes that operators tune live in config.
"""
# Scheduler job IDs (must match ids registered in scheduler/deadline_jobs.py)
DEADLINE_SWEEP_JOB_ID = "deadline_sweep"
DEADLINE_CLEANUP_JOB_ID = "deadline_cleanup"

# Application status machine
APPLICATION_STATUSES = (
    "pending",
    "under_review",
    "interview_scheduled",
    "final_review",
    "accepted",
    "declined",
    "waitlisted",
)
INITIAL_APPLICATION_STATUS = "pending"
TERMINAL_APPLICATION_STATUSES = frozenset({"accepted", "declined"})
# Forward path used for the progress bar (waitlisted/declined are off-path)
APPLICATION_PROGRESS_STAGES = ("pending", "under_review", "interview_scheduled", "final_review", "accepted")
SEMESTERS = ("Fall", "Spring", "Summer", "Winter")
SCHOLARSHIP_TYPES = ("Merit-based", "Need-based", "Athletic", "Academic Excellence", "Research", "Other")

# Global notification ledger (status category)
NOTIFICATION_TYPES = (
    "application_status_update",
    "deadline_reminder",
    "interview_scheduled",
    "document_required",
    "acceptance",
    "rejection",
    "waitlist",
    "scholarship_update",
    "system_announcement",
)
NOTIFICATION_PRIORITIES = ("low", "medium", "high", "urgent")
NOTIFICATION_TITLE_MAX = 200
NOTIFICATION_MESSAGE_MAX = 500

# Per-profile deadline sub-ledger (deadline category)
DEADLINE_ALERT = "deadline_alert"
DEADLINE_OVERDUE = "deadline_overdue"
DEADLINE_NOTIFICATION_KINDS = (DEADLINE_ALERT, DEADLINE_OVERDUE)

# Ledger categories: which physical home a notification lives in
CATEGORY_STATUS = "status"
CATEGORY_DEADLINE = "deadline"
LEDGER_CATEGORIES = (CATEGORY_STATUS, CATEGORY_DEADLINE)

# Alert preferences
DEFAULT_ALERT_DAYS = (30, 14, 7, 1)

# Listing urgency buckets (days left, inclusive upper bounds)
URGENT_WITHIN_DAYS = 7
WARNING_WITHIN_DAYS = 30

# Paging
DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100

# Catalog closed sets
USER_ROLES = ("student", "admin")
UNIVERSITY_TYPES = ("Public", "Private", "Community")
PROGRAM_LEVELS = ("Bachelor", "Master", "PhD", "Diploma", "Certificate")
ENGLISH_TESTS = ("IELTS", "TOEFL", "PTE", "Duolingo")
SCHOLARSHIP_DEGREE_LEVELS = ("UG", "Masters", "PhD")
RESOURCE_CATEGORIES = (
    "Application Guides",
    "Test Preparation",
    "Visa Information",
    "Financial Planning",
    "Country Guides",
    "Document Templates",
    "Interview Preparation",
    "Scholarship Resources",
    "Academic Writing",
    "Cultural Adaptation",
)
RESOURCE_TYPES = ("PDF", "Article", "Video", "Template", "Checklist", "Guide")
RESOURCE_AUDIENCES = ("Undergraduate", "Graduate", "PhD", "All")
RESOURCE_DIFFICULTIES = ("Beginner", "Intermediate", "Advanced")
PROFILE_EDUCATION_LEVELS = ("HSC", "Bachelor", "Masters", "PhD", "")
PROFILE_ENGLISH_TESTS = ("IELTS", "TOEFL", "PTE", "None", "")
PROFILE_TARGET_DEGREES = ("UG", "Masters", "PhD", "")
MAX_TARGET_COUNTRIES = 3
