"""Daily summary emails for advocates and legal heads."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from ..config.settings import settings
from ..models import LegalCase, LegalCaseStatus, User, UserRole
from .email_service import DAILY_SUMMARY_TEMPLATE, EmailServiceError, get_email_service
from .urgency import Clock, resolve_clock

logger = logging.getLogger(__name__)

RECENT_CASES_LIMIT = 5
PENDING_TASK_STATUSES = (LegalCaseStatus.ASSIGNED, LegalCaseStatus.UNDER_REVIEW)


@dataclass
class CaseSummary:
    today_events: List[LegalCase] = field(default_factory=list)
    tomorrow_events: List[LegalCase] = field(default_factory=list)
    pending_tasks: List[LegalCase] = field(default_factory=list)
    recent_cases: List[LegalCase] = field(default_factory=list)

    @property
    def is_worth_sending(self) -> bool:
        return bool(self.today_events or self.tomorrow_events or self.pending_tasks)


@dataclass
class SummaryResult:
    recipients: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0
    failed_user_ids: List[str] = field(default_factory=list)


def _has_event_on(legal_case: LegalCase, day: date) -> bool:
    return any(event.date() == day for _, event in legal_case.court_events)


def _most_recent(cases: List[LegalCase]) -> List[LegalCase]:
    return sorted(cases, key=lambda c: c.updated_at, reverse=True)[:RECENT_CASES_LIMIT]


class DailySummaryService:
    """Builds and emails each advocate's and legal head's daily summary."""

    def __init__(self, db: Session, email_service=None, clock: Optional[Clock] = None):
        self.db = db
        self.email_service = email_service
        self.clock = resolve_clock(clock)

    def send_daily_summaries(self) -> SummaryResult:
        result = SummaryResult()
        today = self.clock().date()

        users = (
            self.db.query(User)
            .filter(
                User.role.in_([UserRole.ADVOCATE, UserRole.LEGAL_HEAD]),
                User.is_active.is_(True),
            )
            .all()
        )
        result.recipients = len(users)

        for user in users:
            summary = self.build_summary(user, today)
            if not summary.is_worth_sending:
                result.skipped += 1
                continue

            try:
                self._send(user, summary, today)
            except EmailServiceError:
                logger.exception("Failed to send daily summary to %s", user.email)
                result.failed += 1
                result.failed_user_ids.append(user.id)
                continue

            result.sent += 1

        logger.info("Sent daily summary emails to %s of %s users", result.sent, result.recipients)
        return result

    def build_summary(self, user: User, today: date) -> CaseSummary:
        summary = CaseSummary()

        if user.role == UserRole.ADVOCATE:
            cases = self.db.query(LegalCase).filter(LegalCase.assigned_to_id == user.id).all()
            tomorrow = today + timedelta(days=1)
            summary.today_events = [c for c in cases if _has_event_on(c, today)]
            summary.tomorrow_events = [c for c in cases if _has_event_on(c, tomorrow)]
            summary.pending_tasks = [c for c in cases if c.status in PENDING_TASK_STATUSES]
            summary.recent_cases = _most_recent(cases)
        elif user.role == UserRole.LEGAL_HEAD:
            cases = (
                self.db.query(LegalCase)
                .options(joinedload(LegalCase.assigned_to))
                .filter(LegalCase.law_firm_id == user.law_firm_id)
                .all()
            )
            summary.pending_tasks = [c for c in cases if not c.assigned_to_id]
            summary.recent_cases = _most_recent(cases)

        return summary

    def _send(self, user: User, summary: CaseSummary, today: date) -> None:
        summary_date = today.strftime("%B %d, %Y")
        context = {
            "subject": f"Daily Summary - {summary_date}",
            "user_name": user.full_name,
            "summary_date": summary_date,
            "today_events": summary.today_events,
            "tomorrow_events": summary.tomorrow_events,
            "pending_tasks": summary.pending_tasks,
            "recent_cases": summary.recent_cases,
            "dashboard_url": f"{settings.frontend_url.rstrip('/')}/legal",
        }
        service = self.email_service or get_email_service()
        service.send_template_email([user.email], DAILY_SUMMARY_TEMPLATE, context)
        logger.info("Sent daily summary email to %s", user.email)


def run_daily_summary_job(db: Session, email_service=None) -> SummaryResult:
    """Convenience function to run the daily summary with an existing DB session."""
    return DailySummaryService(db, email_service=email_service).send_daily_summaries()
