#!/usr/bin/env python3
"""CLI script run by cron to email each advocate and legal head a daily summary."""
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
from lawdesk.services.daily_summary_service import run_daily_summary_job

logger = logging.getLogger("daily_summary_script")


def main() -> int:
    setup_logging()
    logger.info("Starting daily summary job")
    session = SessionLocal()
    try:
        result = run_daily_summary_job(session)
        logger.info(
            "Daily summary job complete: %s sent, %s skipped, %s failed (recipients=%s)",
            result.sent,
            result.skipped,
            result.failed,
            result.recipients,
        )
        if result.failed_user_ids:
            logger.warning("Failed user IDs: %s", ", ".join(result.failed_user_ids))
    finally:
        session.close()
        logger.info("Daily summary job finished")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception:
        logger.exception("Daily summary job aborted")
        sys.exit(1)
