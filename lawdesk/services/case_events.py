"""Notifications raised by user actions on cases."""
from __future__ import annotations

import logging
from typing import Optional, Union

from sqlalchemy.orm import Session

from ..models import (
    CreditCase,
    LegalCase,
    Notification,
    NotificationPriority,
    NotificationType,
    PromisedPayment,
    User,
)
from .notification_metadata import (
    CaseAssignedMetadata,
    PaymentStatusUpdatedMetadata,
    PromisedPaymentAddedMetadata,
    build_metadata,
)
from .notification_service import create_notification

logger = logging.getLogger(__name__)

DATE_FORMAT = "%B %d, %Y"


def _case_links(case: Union[LegalCase, CreditCase]) -> dict:
    if isinstance(case, LegalCase):
        return {
            "related_legal_case_id": case.id,
            "action_url": f"/legal/cases/{case.id}",
        }
    return {
        "related_credit_case_id": case.id,
        "action_url": f"/credit-collection/cases/{case.id}",
    }


def notify_case_assigned(
    db: Session,
    case: Union[LegalCase, CreditCase],
    assigned_by: User,
    reassigned: bool = False,
    email_service=None,
) -> Optional[Notification]:
    """Tell the assignee about a (re)assignment and email them."""
    if not case.assigned_to_id:
        logger.warning("Case %s has no assignee, not sending assignment notification", case.case_number)
        return None

    is_credit = isinstance(case, CreditCase)
    label = "Credit Case" if is_credit else "Case"
    kind = "credit collection case" if is_credit else "legal case"
    verb = "reassigned" if reassigned else "assigned"

    metadata = CaseAssignedMetadata(
        case_number=case.case_number,
        case_title=case.title,
        assigned_by=assigned_by.full_name,
        debtor_name=case.debtor_name if is_credit else None,
        debt_amount=float(case.debt_amount) if is_credit and case.debt_amount is not None else None,
        currency=case.currency.value if is_credit else None,
    )

    return create_notification(
        db,
        recipient_id=case.assigned_to_id,
        title=f"{label} {verb.title()}: {case.case_number}",
        message=f'You have been {verb} {kind} "{case.title}" by {assigned_by.full_name}.',
        type=NotificationType.CASE_REASSIGNED if reassigned else NotificationType.CASE_ASSIGNED,
        priority=NotificationPriority.HIGH,
        data=build_metadata(metadata),
        send_email=True,
        email_service=email_service,
        **_case_links(case),
    )


def notify_promised_payment_added(
    db: Session,
    case: CreditCase,
    payment: PromisedPayment,
    acting_user: User,
) -> Notification:
    """Record a new payment promise for the assignee (or the acting user)."""
    currency = payment.currency.value
    metadata = PromisedPaymentAddedMetadata(
        case_number=case.case_number,
        case_title=case.title,
        promised_amount=float(payment.amount),
        promised_date=payment.promised_date,
        currency=currency,
        scheduled_by=acting_user.full_name,
    )

    return create_notification(
        db,
        recipient_id=case.assigned_to_id or acting_user.id,
        title=f"Promised Payment Added: {case.case_number}",
        message=(
            f"A payment of {currency} {float(payment.amount):,.2f} has been promised for case "
            f'"{case.title or case.case_number}" on {payment.promised_date.strftime(DATE_FORMAT)}'
        ),
        type=NotificationType.PROMISED_PAYMENT_ADDED,
        priority=NotificationPriority.HIGH,
        event_date=payment.promised_date,
        data=build_metadata(metadata),
        **_case_links(case),
    )


def notify_payment_status_updated(
    db: Session,
    case: CreditCase,
    payment: PromisedPayment,
    acting_user: User,
) -> Notification:
    currency = payment.currency.value
    status = payment.status.value
    metadata = PaymentStatusUpdatedMetadata(
        case_number=case.case_number,
        case_title=case.title,
        payment_amount=float(payment.amount),
        payment_status=status,
        currency=currency,
        updated_by=acting_user.full_name,
    )

    return create_notification(
        db,
        recipient_id=case.assigned_to_id or acting_user.id,
        title=f"Payment Status Updated: {case.case_number}",
        message=(
            f"Payment of {currency} {float(payment.amount):,.2f} for case "
            f'"{case.title or case.case_number}" has been marked as {status}'
        ),
        type=NotificationType.PAYMENT_STATUS_UPDATED,
        priority=NotificationPriority.MEDIUM,
        data=build_metadata(metadata),
        **_case_links(case),
    )
