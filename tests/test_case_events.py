from datetime import datetime
from decimal import Decimal

from lawdesk.models import (
    Currency,
    Notification,
    NotificationPriority,
    NotificationType,
    PaymentStatus,
    UserRole,
)
from lawdesk.services.case_events import (
    notify_case_assigned,
    notify_payment_status_updated,
    notify_promised_payment_added,
)


def test_legal_case_assignment_notifies_and_emails(db_session, make_user, make_legal_case, email_service):
    head = make_user(role=UserRole.LEGAL_HEAD, first_name="Grace", last_name="Njeri")
    advocate = make_user()
    legal_case = make_legal_case(assigned_to=advocate, title="Kamau v. Hardware Ltd")

    notification = notify_case_assigned(db_session, legal_case, assigned_by=head, email_service=email_service)

    assert notification.recipient_id == advocate.id
    assert notification.type == NotificationType.CASE_ASSIGNED
    assert notification.priority == NotificationPriority.HIGH
    assert notification.title == f"Case Assigned: {legal_case.case_number}"
    assert notification.message == 'You have been assigned legal case "Kamau v. Hardware Ltd" by Grace Njeri.'
    assert notification.related_legal_case_id == legal_case.id
    assert notification.action_url == f"/legal/cases/{legal_case.id}"
    assert notification.data["assigned_by"] == "Grace Njeri"
    assert notification.data["debtor_name"] is None
    assert len(email_service.calls) == 1
    assert email_service.calls[0]["context"]["assigned_by"] == "Grace Njeri"
    assert notification.is_email_sent is True


def test_credit_case_reassignment(db_session, make_user, make_credit_case, email_service):
    head = make_user(role=UserRole.CREDIT_HEAD, first_name="Peter", last_name="Mutua")
    collector = make_user(role=UserRole.DEBT_COLLECTOR)
    credit_case = make_credit_case(
        assigned_to=collector, debt_amount=Decimal("75000.50"), currency=Currency.USD
    )

    notification = notify_case_assigned(
        db_session, credit_case, assigned_by=head, reassigned=True, email_service=email_service
    )

    assert notification.type == NotificationType.CASE_REASSIGNED
    assert notification.title == f"Credit Case Reassigned: {credit_case.case_number}"
    assert "reassigned credit collection case" in notification.message
    assert notification.related_credit_case_id == credit_case.id
    assert notification.action_url == f"/credit-collection/cases/{credit_case.id}"
    assert notification.data["debt_amount"] == 75000.5
    assert notification.data["currency"] == "USD"
    assert email_service.calls[0]["context"]["reassigned"] is True


def test_assignment_without_assignee_does_nothing(db_session, make_user, make_legal_case, email_service):
    head = make_user(role=UserRole.LEGAL_HEAD)
    legal_case = make_legal_case()

    assert notify_case_assigned(db_session, legal_case, assigned_by=head, email_service=email_service) is None
    assert db_session.query(Notification).count() == 0
    assert email_service.calls == []


def test_assignment_survives_email_failure(db_session, make_user, make_legal_case, failing_email_service):
    head = make_user(role=UserRole.LEGAL_HEAD)
    advocate = make_user()
    legal_case = make_legal_case(assigned_to=advocate)

    notification = notify_case_assigned(
        db_session, legal_case, assigned_by=head, email_service=failing_email_service
    )

    assert notification is not None
    assert db_session.get(Notification, notification.id).is_email_sent is False


def test_promised_payment_added_goes_to_assignee(db_session, make_user, make_credit_case):
    collector = make_user()
    clerk = make_user(role=UserRole.ACCOUNTANT, first_name="Joy", last_name="Achieng")
    credit_case = make_credit_case(
        assigned_to=collector,
        payments=[{"amount": Decimal("12500.00"), "promised_date": datetime(2024, 3, 20, 12, 0)}],
    )
    payment = credit_case.promised_payments[0]

    notification = notify_promised_payment_added(db_session, credit_case, payment, acting_user=clerk)

    assert notification.recipient_id == collector.id
    assert notification.type == NotificationType.PROMISED_PAYMENT_ADDED
    assert notification.priority == NotificationPriority.HIGH
    assert notification.event_date == datetime(2024, 3, 20, 12, 0)
    assert "KES 12,500.00" in notification.message
    assert "March 20, 2024" in notification.message
    assert notification.data["promised_amount"] == 12500.0
    assert notification.data["scheduled_by"] == "Joy Achieng"
    assert notification.data["promised_date"].startswith("2024-03-20")


def test_payment_status_update_falls_back_to_acting_user(db_session, make_user, make_credit_case):
    accountant = make_user(role=UserRole.ACCOUNTANT)
    credit_case = make_credit_case(
        payments=[{
            "amount": Decimal("3000.00"),
            "promised_date": datetime(2024, 3, 14, 9, 0),
            "status": PaymentStatus.PAID,
        }],
    )
    payment = credit_case.promised_payments[0]

    notification = notify_payment_status_updated(db_session, credit_case, payment, acting_user=accountant)

    assert notification.recipient_id == accountant.id
    assert notification.type == NotificationType.PAYMENT_STATUS_UPDATED
    assert notification.priority == NotificationPriority.MEDIUM
    assert notification.message.endswith("has been marked as paid")
    assert notification.data["payment_status"] == "paid"
    assert notification.data["updated_by"] == accountant.full_name
