"""
Test configuration and fixtures for the Lawdesk notification tests.
"""
import os

# Configure before any lawdesk module reads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEBUG"] = "true"
os.environ["STORAGE_PROVIDER"] = "local"
os.environ["REMINDER_DEDUPE"] = "false"
for name in ("SMTP_SERVER", "SMTP_USERNAME", "SMTP_PASSWORD"):
    os.environ.pop(name, None)

import uuid
from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.orm import sessionmaker

from lawdesk.config.database import Base, engine, get_db
from lawdesk.main import app
from lawdesk.models import (
    CaseNote,
    CreditCase,
    Currency,
    LawFirm,
    LegalCase,
    LegalCaseStatus,
    PaymentStatus,
    PromisedPayment,
    User,
    UserRole,
)
from lawdesk.routes.deps import get_current_user
from lawdesk.services.email_service import EmailServiceError


@event.listens_for(engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection, connection_record):
    # Let SQLAlchemy emit BEGIN itself so SAVEPOINTs nest inside the test transaction
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


# Fixed "now" for every time-dependent test: mid-morning so events dated
# today at 09:00 are already past and today at 16:00 are still ahead.
NOW = datetime(2024, 3, 11, 10, 30)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    join_transaction_mode="create_savepoint",
)


@pytest.fixture(scope="session")
def test_db():
    """Create test database tables."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(test_db):
    """Session whose work is rolled back after each test."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def clock():
    return lambda: NOW


class FakeEmailService:
    def __init__(self):
        self.calls = []

    def send_template_email(self, to_emails, template_name, context, subject=None):
        self.calls.append({
            "to": to_emails,
            "template": template_name,
            "context": context,
        })
        return f"<{uuid.uuid4().hex}@lawdesk.test>"


class FailingEmailService(FakeEmailService):
    def send_template_email(self, to_emails, template_name, context, subject=None):
        super().send_template_email(to_emails, template_name, context, subject)
        raise EmailServiceError("SMTP failure")


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def failing_email_service():
    return FailingEmailService()


@pytest.fixture
def law_firm(db_session):
    firm = LawFirm(firm_name="Mwangi & Partners Advocates", email="info@mwangi.test")
    db_session.add(firm)
    db_session.commit()
    return firm


@pytest.fixture
def make_user(db_session, law_firm):
    def _make_user(role=UserRole.ADVOCATE, **overrides):
        suffix = uuid.uuid4().hex[:6]
        user = User(
            email=overrides.pop("email", f"user-{suffix}@example.com"),
            first_name=overrides.pop("first_name", "Amina"),
            last_name=overrides.pop("last_name", f"Otieno{suffix}"),
            role=role,
            is_active=overrides.pop("is_active", True),
            law_firm_id=overrides.pop("law_firm_id", law_firm.id),
        )
        for key, value in overrides.items():
            setattr(user, key, value)
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_legal_case(db_session, law_firm):
    def _make_legal_case(assigned_to=None, **overrides):
        legal_case = LegalCase(
            case_number=overrides.pop("case_number", f"LC-{uuid.uuid4().hex[:8].upper()}"),
            title=overrides.pop("title", "Kamau v. Hardware Ltd"),
            status=overrides.pop("status", LegalCaseStatus.ASSIGNED),
            law_firm_id=overrides.pop("law_firm_id", law_firm.id),
            assigned_to_id=assigned_to.id if assigned_to else None,
            court_name=overrides.pop("court_name", "Milimani Commercial Court"),
        )
        for key, value in overrides.items():
            setattr(legal_case, key, value)
        db_session.add(legal_case)
        db_session.commit()
        return legal_case

    return _make_legal_case


@pytest.fixture
def make_credit_case(db_session, law_firm):
    def _make_credit_case(assigned_to=None, notes=(), payments=(), **overrides):
        credit_case = CreditCase(
            case_number=overrides.pop("case_number", f"CC-{uuid.uuid4().hex[:8].upper()}"),
            title=overrides.pop("title", "Recovery of unpaid invoices"),
            debtor_name=overrides.pop("debtor_name", "Baraka Traders"),
            debt_amount=overrides.pop("debt_amount", Decimal("250000.00")),
            currency=overrides.pop("currency", Currency.KES),
            law_firm_id=overrides.pop("law_firm_id", law_firm.id),
            assigned_to_id=assigned_to.id if assigned_to else None,
        )
        for key, value in overrides.items():
            setattr(credit_case, key, value)

        for note in notes:
            credit_case.notes.append(CaseNote(**note))
        for payment in payments:
            payment = dict(payment)
            payment.setdefault("currency", Currency.KES)
            payment.setdefault("status", PaymentStatus.PENDING)
            credit_case.promised_payments.append(PromisedPayment(**payment))

        db_session.add(credit_case)
        db_session.commit()
        return credit_case

    return _make_credit_case


@pytest.fixture
def client(db_session):
    """Create a test client with database dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # No lifespan: tables already exist on the shared in-memory connection
    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def login_as(client):
    """Make every request from ``client`` come from ``user``."""
    def _login_as(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return client

    return _login_as
