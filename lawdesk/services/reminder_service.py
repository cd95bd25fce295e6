"""Scan cases for upcoming court dates, follow-ups and promised payments."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from ..config.settings import settings
from ..models import (
    CaseNote,
    CreditCase,
    LegalCase,
    Notification,
    NotificationType,
    PaymentStatus,
    PromisedPayment,
    User,
)
from .notification_metadata import (
    CaseEventMetadata,
    FollowUpMetadata,
    PaymentDueMetadata,
    build_metadata,
    note_preview,
)
from .notification_service import create_notification
from .urgency import Clock, classify_urgency, days_until, reminder_window, resolve_clock

logger = logging.getLogger(__name__)

DATE_FORMAT = "%B %d, %Y"

# Court detail field -> (notification type, title label, message label)
COURT_EVENT_TYPES = {
    "court_date": (NotificationType.COURT_DATE, "Court Date", "Court date"),
    "next_hearing_date": (NotificationType.HEARING_DATE, "Next Hearing", "Next hearing"),
    "mentioning_date": (NotificationType.MENTIONING_DATE, "Mentioning Date", "Mentioning date"),
}


@dataclass
class ScanResult:
    """Summary of one scan pass."""

    candidates: int = 0
    created: int = 0
    skipped: int = 0
    failed: int = 0
    duplicates: int = 0
    skipped_ids: List[str] = field(default_factory=list)
    failed_ids: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def has_activity(self) -> bool:
        return self.created > 0


def _day_phrase(days: int) -> str:
    return f"{days} day{'' if days == 1 else 's'}"


class ReminderService:
    """Creates reminder notifications for events inside the lookahead window.

    Each pass can be run on its own. A candidate whose case has no assignee
    is skipped, and a candidate that fails to persist is counted and does
    not stop the rest of the pass.
    """

    def __init__(self, db: Session, clock: Optional[Clock] = None, dedupe: Optional[bool] = None):
        self.db = db
        self.clock = resolve_clock(clock)
        self.dedupe = settings.reminder_dedupe if dedupe is None else dedupe

    def scan_court_dates(self) -> ScanResult:
        """Notify assignees of court, hearing and mentioning dates."""
        result = ScanResult()
        now = self.clock()
        start, end = reminder_window(now)

        cases = (
            self.db.query(LegalCase)
            .options(joinedload(LegalCase.assigned_to))
            .filter(
                or_(
                    and_(LegalCase.court_date >= start, LegalCase.court_date < end),
                    and_(LegalCase.next_hearing_date >= start, LegalCase.next_hearing_date < end),
                    and_(LegalCase.mentioning_date >= start, LegalCase.mentioning_date < end),
                )
            )
            .all()
        )

        result.candidates = len(cases)
        logger.info("Found %s legal cases with court dates between %s and %s", len(cases), start, end)

        for legal_case in cases:
            assignee = self._resolve_assignee(legal_case, result)
            if assignee is None:
                continue

            for field_name, event_date in legal_case.court_events:
                if not (start <= event_date < end):
                    continue

                notification_type, title_label, message_label = COURT_EVENT_TYPES[field_name]
                days = days_until(event_date, now)
                metadata = CaseEventMetadata(
                    case_number=legal_case.case_number,
                    case_title=legal_case.title,
                    days_until=days,
                    court_name=legal_case.court_name,
                )
                self._notify(
                    result,
                    candidate_id=legal_case.id,
                    recipient_id=assignee.id,
                    title=f"{title_label} Reminder: {legal_case.case_number}",
                    message=(
                        f'{message_label} for case "{legal_case.title}" is in {_day_phrase(days)}. '
                        f"Date: {event_date.strftime(DATE_FORMAT)}"
                    ),
                    type=notification_type,
                    days=days,
                    related_legal_case_id=legal_case.id,
                    event_date=event_date,
                    action_url=f"/legal/cases/{legal_case.id}",
                    data=build_metadata(metadata),
                )

        logger.info(
            "Court date pass complete: %s created, %s skipped, %s failed",
            result.created, result.skipped, result.failed,
        )
        return result

    def scan_follow_up_dates(self) -> ScanResult:
        """Notify credit case assignees of note follow-ups, one per note."""
        result = ScanResult()
        now = self.clock()
        start, end = reminder_window(now)

        notes = (
            self.db.query(CaseNote)
            .join(CaseNote.credit_case)
            .options(joinedload(CaseNote.credit_case).joinedload(CreditCase.assigned_to))
            .filter(CaseNote.follow_up_date >= start, CaseNote.follow_up_date < end)
            .all()
        )

        result.candidates = len(notes)
        logger.info("Found %s follow-up notes between %s and %s", len(notes), start, end)

        for note in notes:
            credit_case = note.credit_case
            assignee = self._resolve_assignee(credit_case, result, candidate_id=note.id)
            if assignee is None:
                continue

            days = days_until(note.follow_up_date, now)
            metadata = FollowUpMetadata(
                case_number=credit_case.case_number,
                case_title=credit_case.title,
                days_until=days,
                debtor_name=credit_case.debtor_name,
                note_content=note_preview(note.content),
            )
            self._notify(
                result,
                candidate_id=note.id,
                recipient_id=assignee.id,
                title=f"Follow-up Reminder: {credit_case.case_number}",
                message=(
                    f'Follow-up for case "{credit_case.title}" is due in {_day_phrase(days)}. '
                    f"Date: {note.follow_up_date.strftime(DATE_FORMAT)}"
                ),
                type=NotificationType.FOLLOW_UP_REMINDER,
                days=days,
                related_credit_case_id=credit_case.id,
                event_date=note.follow_up_date,
                action_url=f"/credit-collection/cases/{credit_case.id}",
                data=build_metadata(metadata),
            )

        logger.info(
            "Follow-up pass complete: %s created, %s skipped, %s failed",
            result.created, result.skipped, result.failed,
        )
        return result

    def scan_promised_payments(self) -> ScanResult:
        """Notify credit case assignees of pending promised payments."""
        result = ScanResult()
        now = self.clock()
        start, end = reminder_window(now)

        payments = (
            self.db.query(PromisedPayment)
            .join(PromisedPayment.credit_case)
            .options(joinedload(PromisedPayment.credit_case).joinedload(CreditCase.assigned_to))
            .filter(
                PromisedPayment.promised_date >= start,
                PromisedPayment.promised_date < end,
                PromisedPayment.status == PaymentStatus.PENDING,
            )
            .all()
        )

        result.candidates = len(payments)
        logger.info("Found %s pending promised payments between %s and %s", len(payments), start, end)

        for payment in payments:
            credit_case = payment.credit_case
            assignee = self._resolve_assignee(credit_case, result, candidate_id=payment.id)
            if assignee is None:
                continue

            days = days_until(payment.promised_date, now)
            amount = float(payment.amount)
            currency = payment.currency.value
            metadata = PaymentDueMetadata(
                case_number=credit_case.case_number,
                case_title=credit_case.title,
                days_until=days,
                debtor_name=credit_case.debtor_name,
                payment_amount=amount,
                payment_currency=currency,
                payment_notes=payment.notes,
            )
            self._notify(
                result,
                candidate_id=payment.id,
                recipient_id=assignee.id,
                title=f"Payment Due Reminder: {credit_case.case_number}",
                message=(
                    f'A payment of {currency} {amount:,.2f} for case "{credit_case.title}" '
                    f"is due in {_day_phrase(days)}. "
                    f"Date: {payment.promised_date.strftime(DATE_FORMAT)}"
                ),
                type=NotificationType.PAYMENT_DUE_REMINDER,
                days=days,
                related_credit_case_id=credit_case.id,
                event_date=payment.promised_date,
                action_url=f"/credit-collection/cases/{credit_case.id}",
                data=build_metadata(metadata),
            )

        logger.info(
            "Promised payment pass complete: %s created, %s skipped, %s failed",
            result.created, result.skipped, result.failed,
        )
        return result

    def run_all(self) -> Dict[str, ScanResult]:
        """Run every pass in order; one pass failing does not stop the next."""
        passes = (
            ("court_dates", self.scan_court_dates),
            ("follow_up_dates", self.scan_follow_up_dates),
            ("promised_payments", self.scan_promised_payments),
        )

        results = {}
        for name, run_pass in passes:
            try:
                results[name] = run_pass()
            except Exception as exc:
                logger.exception("Reminder pass %s failed", name)
                self.db.rollback()
                results[name] = ScanResult(error=str(exc))
        return results

    def _resolve_assignee(self, case, result: ScanResult, candidate_id: Optional[str] = None) -> Optional[User]:
        candidate_id = candidate_id or case.id
        if not case.assigned_to_id:
            logger.debug("Skipping %s: case %s has no assignee", candidate_id, case.case_number)
            result.skipped += 1
            result.skipped_ids.append(candidate_id)
            return None

        assignee = case.assigned_to
        if assignee is None:
            logger.warning(
                "Skipping %s: assignee %s of case %s not found",
                candidate_id, case.assigned_to_id, case.case_number,
            )
            result.skipped += 1
            result.skipped_ids.append(candidate_id)
        return assignee

    def _already_notified(self, recipient_id, type, event_date, related_legal_case_id, related_credit_case_id) -> bool:
        return (
            self.db.query(Notification.id)
            .filter(
                Notification.recipient_id == recipient_id,
                Notification.type == type,
                Notification.event_date == event_date,
                Notification.related_legal_case_id == related_legal_case_id,
                Notification.related_credit_case_id == related_credit_case_id,
            )
            .first()
            is not None
        )

    def _notify(
        self,
        result: ScanResult,
        candidate_id: str,
        recipient_id: str,
        title: str,
        message: str,
        type: NotificationType,
        days: int,
        event_date: datetime,
        action_url: str,
        data: dict,
        related_legal_case_id: Optional[str] = None,
        related_credit_case_id: Optional[str] = None,
    ) -> None:
        if self.dedupe and self._already_notified(
            recipient_id, type, event_date, related_legal_case_id, related_credit_case_id
        ):
            logger.debug("Skipping %s: %s already notified for %s", candidate_id, type.value, event_date)
            result.duplicates += 1
            return

        try:
            create_notification(
                self.db,
                recipient_id=recipient_id,
                title=title,
                message=message,
                type=type,
                priority=classify_urgency(days),
                related_legal_case_id=related_legal_case_id,
                related_credit_case_id=related_credit_case_id,
                event_date=event_date,
                action_url=action_url,
                data=data,
            )
        except Exception:
            # create_notification has already logged and rolled back
            result.failed += 1
            result.failed_ids.append(candidate_id)
            return

        result.created += 1


def run_reminder_job(db: Session, clock: Optional[Clock] = None) -> Dict[str, ScanResult]:
    """Convenience function to run every pass with an existing DB session."""
    service = ReminderService(db, clock=clock)
    return service.run_all()
