from eduglobal.models.application import Application, ApplicationStatusHistory
from eduglobal.models.deadline_notification import DeadlineNotification
from eduglobal.models.notification import Notification
from eduglobal.models.resource import Resource
from eduglobal.models.saved_program import SavedProgram
from eduglobal.models.scholarship import Scholarship
from eduglobal.models.university import Program, University
from eduglobal.models.user import User
from eduglobal.models.user_profile import UserProfile

__all__ = [
    "Application",
    "ApplicationStatusHistory",
    "DeadlineNotification",
    "Notification",
    "Program",
    "Resource",
    "SavedProgram",
    "Scholarship",
    "University",
    "User",
    "UserProfile",
]
