#!/usr/bin/env python3
"""CLI script run by cron to create court date, follow-up and payment reminders."""
import logging
import os
import sys

# Ensure the project root is on the path when running as a script
directory = os.path.dirname(os.path.abspath(__file__))
if directory not in sys.path:
    sys.path.insert(0, directory)

from dotenv import load_dotenv

# Settings read os.environ at import time
load_dotenv()

from lawdesk.config.database import SessionLocal
from lawdesk.config.logging import setup_logging
from lawdesk.services.reminder_service import run_reminder_job

logger = logging.getLogger("notification_scheduler")

PASS_LABELS = {
    "court_dates": "Court date",
    "follow_up_dates": "Follow-up date",
    "promised_payments": "Promised payment",
}


def main() -> int:
    setup_logging()
    logger.info("Starting notification scheduler")
    session = SessionLocal()
    try:
        results = run_reminder_job(session)
        for name, result in results.items():
            label = PASS_LABELS[name]
            if result.error:
                logger.error("%s notifications failed: %s", label, result.error)
                continue
            logger.info(
                "%s notifications: %s created, %s skipped, %s duplicates, %s failed (candidates=%s)",
                label,
                result.created,
                result.skipped,
                result.duplicates,
                result.failed,
                result.candidates,
            )
            if result.failed_ids:
                logger.warning("%s failed candidate IDs: %s", label, ", ".join(result.failed_ids))
        total = sum(result.created for result in results.values())
        logger.info("Notification scheduler completed: %s notifications created", total)
    finally:
        session.close()
        logger.info("Database session closed")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception:
        logger.exception("Notification scheduler aborted")
        sys.exit(1)
