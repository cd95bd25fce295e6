from datetime import datetime

from lawdesk.models import LegalCaseStatus, UserRole
from lawdesk.services import email_service as email_module
from lawdesk.services.daily_summary_service import DailySummaryService, run_daily_summary_job
from lawdesk.services.email_service import DAILY_SUMMARY_TEMPLATE

TODAY = datetime(2024, 3, 11)


def test_advocate_summary_groups_cases(db_session, clock, make_user, make_legal_case, email_service):
    advocate = make_user()
    hearing_today = make_legal_case(assigned_to=advocate, court_date=datetime(2024, 3, 11, 14, 0))
    mention_tomorrow = make_legal_case(
        assigned_to=advocate,
        mentioning_date=datetime(2024, 3, 12, 9, 0),
        status=LegalCaseStatus.COURT_PROCEEDINGS,
    )
    make_legal_case(assigned_to=make_user(), court_date=datetime(2024, 3, 11, 9, 0))

    summary = DailySummaryService(db_session, email_service=email_service, clock=clock).build_summary(
        advocate, TODAY.date()
    )

    assert summary.today_events == [hearing_today]
    assert summary.tomorrow_events == [mention_tomorrow]
    assert summary.pending_tasks == [hearing_today]
    assert set(summary.recent_cases) == {hearing_today, mention_tomorrow}
    assert summary.is_worth_sending


def test_legal_head_summary_lists_unassigned_firm_cases(db_session, clock, make_user, make_legal_case):
    head = make_user(role=UserRole.LEGAL_HEAD)
    unassigned = make_legal_case(status=LegalCaseStatus.PENDING_ASSIGNMENT)
    make_legal_case(assigned_to=make_user())

    summary = DailySummaryService(db_session, clock=clock).build_summary(head, TODAY.date())

    assert summary.pending_tasks == [unassigned]
    assert len(summary.recent_cases) == 2
    assert summary.today_events == []


def test_send_daily_summaries(db_session, clock, make_user, make_legal_case, email_service):
    busy = make_user(first_name="Brian", last_name="Ouma")
    make_legal_case(assigned_to=busy, court_date=datetime(2024, 3, 12, 10, 0))
    make_user()
    make_user(is_active=False)
    make_user(role=UserRole.RECEPTIONIST)

    result = DailySummaryService(db_session, email_service=email_service, clock=clock).send_daily_summaries()

    assert result.recipients == 2
    assert result.sent == 1
    assert result.skipped == 1
    assert result.failed == 0
    call = email_service.calls[0]
    assert call["to"] == [busy.email]
    assert call["template"] == DAILY_SUMMARY_TEMPLATE
    assert call["context"]["user_name"] == "Brian Ouma"
    assert call["context"]["summary_date"] == "March 11, 2024"
    assert call["context"]["subject"] == "Daily Summary - March 11, 2024"
    assert call["context"]["dashboard_url"].endswith("/legal")


def test_failed_summary_does_not_stop_others(db_session, clock, make_user, make_legal_case, failing_email_service):
    first = make_user()
    second = make_user()
    make_legal_case(assigned_to=first)
    make_legal_case(assigned_to=second)

    result = DailySummaryService(
        db_session, email_service=failing_email_service, clock=clock
    ).send_daily_summaries()

    assert result.sent == 0
    assert result.failed == 2
    assert set(result.failed_user_ids) == {first.id, second.id}
    assert len(failing_email_service.calls) == 2


def test_unconfigured_email_counts_as_failure(db_session, clock, make_user, make_legal_case, monkeypatch):
    advocate = make_user()
    make_legal_case(assigned_to=advocate)
    monkeypatch.setattr(email_module, "email_service", None)
    monkeypatch.setattr(email_module.settings, "smtp_server", None)

    result = DailySummaryService(db_session, clock=clock).send_daily_summaries()

    assert result.failed == 1
    assert result.failed_user_ids == [advocate.id]


def test_run_daily_summary_job(db_session, make_user, make_legal_case, email_service):
    advocate = make_user()
    make_legal_case(assigned_to=advocate)

    result = run_daily_summary_job(db_session, email_service=email_service)

    assert result.sent == 1
    assert email_service.calls[0]["to"] == [advocate.email]
