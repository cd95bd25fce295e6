from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Enum, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
from ..config.database import Base
from .legal_case import CasePriority
import uuid


class CreditCaseStatus(PyEnum):
    NEW = "new"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    FOLLOW_UP_REQUIRED = "follow_up_required"
    ESCALATED_TO_LEGAL = "escalated_to_legal"
    RESOLVED = "resolved"
    CLOSED = "closed"


class Currency(PyEnum):
    KES = "KES"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class PaymentStatus(PyEnum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class CreditCase(Base):
    __tablename__ = "credit_cases"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    case_number = Column(String(50), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    status = Column(Enum(CreditCaseStatus), default=CreditCaseStatus.NEW, nullable=False)
    priority = Column(Enum(CasePriority), default=CasePriority.MEDIUM, nullable=False)

    # Debt details
    debtor_name = Column(String(255), nullable=True)
    debt_amount = Column(Numeric(14, 2), nullable=True)
    currency = Column(Enum(Currency), default=Currency.KES, nullable=False)

    # Associations
    law_firm_id = Column(String, ForeignKey("law_firms.id"), nullable=True)
    assigned_to_id = Column(String, ForeignKey("users.id"), nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    law_firm = relationship("LawFirm", back_populates="credit_cases")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])
    notes = relationship("CaseNote", back_populates="credit_case", cascade="all, delete-orphan")
    promised_payments = relationship("PromisedPayment", back_populates="credit_case", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<CreditCase {self.case_number} ({self.status.value})>"


class CaseNote(Base):
    __tablename__ = "credit_case_notes"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    credit_case_id = Column(String, ForeignKey("credit_cases.id", ondelete="CASCADE"), nullable=False, index=True)

    content = Column(Text, nullable=False)
    follow_up_date = Column(DateTime, nullable=True, index=True)
    created_by_id = Column(String, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    credit_case = relationship("CreditCase", back_populates="notes")
    created_by = relationship("User")

    def __repr__(self):
        return f"<CaseNote {self.id} for {self.credit_case_id}>"


class PromisedPayment(Base):
    __tablename__ = "promised_payments"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    credit_case_id = Column(String, ForeignKey("credit_cases.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(Enum(Currency), default=Currency.KES, nullable=False)
    promised_date = Column(DateTime, nullable=False, index=True)
    status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    notes = Column(Text, nullable=True)

    paid_at = Column(DateTime, nullable=True)
    payment_method = Column(String(50), nullable=True)
    created_by_id = Column(String, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    credit_case = relationship("CreditCase", back_populates="promised_payments")

    def __repr__(self):
        return f"<PromisedPayment {self.amount} {self.currency.value} on {self.promised_date}>"
