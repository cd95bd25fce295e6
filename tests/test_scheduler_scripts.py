from datetime import datetime, timedelta

import run_notification_scheduler
import send_daily_summaries
from lawdesk.services import email_service as email_module
from lawdesk.models import Notification, NotificationType


def _use_session(monkeypatch, module, db_session):
    monkeypatch.setattr(module, "SessionLocal", lambda: db_session)
    monkeypatch.setattr(module, "setup_logging", lambda: None)


def test_notification_scheduler_runs_every_pass(db_session, make_user, make_legal_case, monkeypatch):
    advocate = make_user()
    make_legal_case(assigned_to=advocate, court_date=datetime.utcnow() + timedelta(days=2))
    _use_session(monkeypatch, run_notification_scheduler, db_session)

    assert run_notification_scheduler.main() == 0

    notifications = db_session.query(Notification).filter_by(recipient_id=advocate.id).all()
    assert [n.type for n in notifications] == [NotificationType.COURT_DATE]


def test_daily_summary_script_survives_unconfigured_email(db_session, make_user, make_legal_case, monkeypatch):
    advocate = make_user()
    make_legal_case(assigned_to=advocate)
    _use_session(monkeypatch, send_daily_summaries, db_session)
    monkeypatch.setattr(email_module, "email_service", None)
    monkeypatch.setattr(email_module.settings, "smtp_server", None)

    assert send_daily_summaries.main() == 0
