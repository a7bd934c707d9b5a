from eduglobal.db.base import Base, JSONType
from eduglobal.db.session import get_db, engine, SessionLocal
from eduglobal.db.tables import ALL_TABLE_NAMES, NOTIFICATION_TABLE_NAMES

__all__ = ["get_db", "engine", "SessionLocal", "Base", "JSONType", "ALL_TABLE_NAMES", "NOTIFICATION_TABLE_NAMES"]
