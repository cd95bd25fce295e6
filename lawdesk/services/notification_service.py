"""Notification persistence, read-state operations and assignment emails."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..config.settings import settings
from ..models import (
    CreditCase,
    LegalCase,
    Notification,
    NotificationPriority,
    NotificationType,
    User,
)
from .email_service import CASE_ASSIGNED_TEMPLATE, get_email_service

logger = logging.getLogger(__name__)

ASSIGNMENT_EMAIL_TYPES = (NotificationType.CASE_ASSIGNED, NotificationType.CASE_REASSIGNED)
DEFAULT_PAGE_SIZE = 20


@dataclass
class NotificationPage:
    """One page of a user's notifications, newest first."""

    items: List[Notification] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit) if self.limit else 0


def create_notification(
    db: Session,
    recipient_id: str,
    title: str,
    message: str,
    type: NotificationType = NotificationType.SYSTEM,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    related_legal_case_id: Optional[str] = None,
    related_credit_case_id: Optional[str] = None,
    event_date: Optional[datetime] = None,
    action_url: Optional[str] = None,
    data: Optional[dict] = None,
    send_email: bool = False,
    email_service=None,
) -> Notification:
    """Persist a notification and, for assignments, optionally email it.

    The record is always inserted; there is no check for an existing
    notification about the same event. Email delivery failures never affect
    the returned record.
    """
    notification = Notification(
        recipient_id=recipient_id,
        title=title,
        message=message,
        type=type,
        priority=priority,
        related_legal_case_id=related_legal_case_id,
        related_credit_case_id=related_credit_case_id,
        event_date=event_date,
        action_url=action_url,
        data=data or {},
    )

    try:
        db.add(notification)
        db.commit()
        db.refresh(notification)
    except Exception:
        logger.exception("Error creating %s notification for user %s", type.value, recipient_id)
        db.rollback()
        raise

    if send_email and type in ASSIGNMENT_EMAIL_TYPES:
        send_case_assignment_email(db, notification, email_service=email_service)

    return notification


def send_case_assignment_email(db: Session, notification: Notification, email_service=None) -> bool:
    """Email the recipient about the case referenced by ``notification``.

    Returns True when the email went out. Every failure is logged and
    reported as False.
    """
    try:
        user = db.get(User, notification.recipient_id)
        if not user:
            logger.error("User not found for notification %s", notification.id)
            return False

        frontend_url = settings.frontend_url.rstrip("/")
        case = None
        if notification.related_legal_case_id:
            case = db.get(LegalCase, notification.related_legal_case_id)
            case_type = "Legal Case"
            case_url = f"{frontend_url}/legal/cases/{notification.related_legal_case_id}"
        elif notification.related_credit_case_id:
            case = db.get(CreditCase, notification.related_credit_case_id)
            case_type = "Credit Collection Case"
            case_url = f"{frontend_url}/credit-collection/cases/{notification.related_credit_case_id}"

        if case is None:
            logger.error("Case not found for notification %s", notification.id)
            return False

        metadata = notification.data or {}
        firm_name = user.law_firm.firm_name if user.law_firm else settings.default_firm_name
        context = {
            "subject": f"{case_type} Assigned: {case.case_number}",
            "user_name": user.full_name,
            "case_type": case_type,
            "case_number": case.case_number,
            "case_title": case.title,
            "case_status": case.status.value.replace("_", " ").title(),
            "case_priority": case.priority.value.title() if case.priority else None,
            "case_description": case.description,
            "assigned_by": metadata.get("assigned_by"),
            "reassigned": notification.type == NotificationType.CASE_REASSIGNED,
            "case_url": case_url,
            "firm_name": firm_name,
        }

        service = email_service or get_email_service()
        service.send_template_email([user.email], CASE_ASSIGNED_TEMPLATE, context)

        notification.is_email_sent = True
        notification.email_sent_at = datetime.utcnow()
        db.commit()

        logger.info("Case assignment email sent to %s for case %s", user.email, case.case_number)
        return True
    except Exception:
        logger.exception("Error sending case assignment email for notification %s", notification.id)
        db.rollback()
        return False


def mark_as_read(db: Session, notification_id: str, user_id: str) -> Optional[Notification]:
    """Mark one notification read if ``user_id`` owns it."""
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.recipient_id == user_id)
        .first()
    )
    if not notification:
        return None

    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_as_read(db: Session, user_id: str) -> int:
    """Mark every unread notification of ``user_id`` read; returns the count."""
    updated = (
        db.query(Notification)
        .filter(Notification.recipient_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return updated


def get_unread_count(db: Session, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.recipient_id == user_id, Notification.is_read.is_(False))
        .count()
    )


def delete_notification(db: Session, notification_id: str, user_id: str) -> bool:
    """Delete a notification owned by ``user_id``; False when missing or not owned."""
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.recipient_id == user_id)
        .first()
    )
    if not notification:
        return False

    db.delete(notification)
    db.commit()
    return True


def list_notifications(
    db: Session,
    user_id: str,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    unread_only: bool = False,
) -> NotificationPage:
    query = db.query(Notification).filter(Notification.recipient_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))

    total = query.count()
    items = (
        query.order_by(Notification.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return NotificationPage(items=items, total_count=total, page=page, limit=limit)
