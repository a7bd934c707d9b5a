#!/usr/bin/env python3
"""
Run the daily deadline sweep once, now, and print the summary.
Same work as the 09:00 scheduled job (sweep, then purge expired notifications).
Run: cd backend && python scripts/run_deadline_sweep.py
"""
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from eduglobal.scheduler.deadline_jobs import build_sweep_service


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    service = build_sweep_service()
    print("Running deadline sweep...")
    result = service.run_sweep()
    purged = service.purge_expired()
    print(
        f"Done. users={result.users}, skipped={result.skipped}, failed={result.failed}, "
        f"created={result.created}, expired_purged={purged}"
    )
    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
