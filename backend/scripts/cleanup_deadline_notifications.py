#!/usr/bin/env python3
"""
Weekly cleanup, on demand: delete read deadline notifications older than the retention window
(DEADLINE_NOTIFICATION_RETENTION_DAYS, default 30) and purge expired notifications.
Run: cd backend && python scripts/cleanup_deadline_notifications.py [--days N]
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from eduglobal.config import settings
from eduglobal.scheduler.deadline_jobs import build_sweep_service


def main():
    parser = argparse.ArgumentParser(description="Delete old read deadline notifications")
    parser.add_argument(
        "--days",
        type=int,
        default=settings.deadline_notification_retention_days,
        help="Retention window in days for read deadline notifications",
    )
    args = parser.parse_args()
    result = build_sweep_service().cleanup(args.days)
    print(
        f"Done. deadline_notifications removed={result.deadline_removed}, "
        f"expired notifications removed={result.expired_removed}"
    )


if __name__ == "__main__":
    main()
