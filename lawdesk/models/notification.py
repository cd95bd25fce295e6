from sqlalchemy import Column, String, DateTime, Boolean, Text, ForeignKey, Enum, JSON, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
from ..config.database import Base
import uuid


class NotificationType(PyEnum):
    COURT_DATE = "court_date"
    MENTIONING_DATE = "mentioning_date"
    HEARING_DATE = "hearing_date"
    CASE_ASSIGNED = "case_assigned"
    CASE_REASSIGNED = "case_reassigned"
    TASK_REMINDER = "task_reminder"
    DAILY_SUMMARY = "daily_summary"
    SYSTEM = "system"
    PAYMENT_STATUS_UPDATED = "payment_status_updated"
    PAYMENT_DUE_REMINDER = "payment_due_reminder"
    FOLLOW_UP_REMINDER = "follow_up_reminder"
    PROMISED_PAYMENT_ADDED = "promised_payment_added"


class NotificationPriority(PyEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_recipient_read_created", "recipient_id", "is_read", "created_at"),
        Index("ix_notifications_type_event_date", "type", "event_date"),
        Index("ix_notifications_email_sent_event_date", "is_email_sent", "event_date"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Recipient
    recipient_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Notification details
    type = Column(Enum(NotificationType), nullable=False, default=NotificationType.SYSTEM)
    priority = Column(Enum(NotificationPriority), nullable=False, default=NotificationPriority.MEDIUM)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)

    # Related case (at most one is populated)
    related_legal_case_id = Column(String, ForeignKey("legal_cases.id", ondelete="SET NULL"), nullable=True)
    related_credit_case_id = Column(String, ForeignKey("credit_cases.id", ondelete="SET NULL"), nullable=True)

    # The moment the notification is about (court date, due date, ...)
    event_date = Column(DateTime, nullable=True)

    # Deep link for the UI
    action_url = Column(String(500), nullable=True)

    # Per-type structured details, see services.notification_metadata
    data = Column("metadata", JSON, nullable=True, default=dict)

    # Read status
    is_read = Column(Boolean, default=False, nullable=False)

    # Email side-channel bookkeeping
    is_email_sent = Column(Boolean, default=False, nullable=False)
    email_sent_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    recipient = relationship("User", back_populates="notifications")
    related_legal_case = relationship("LegalCase")
    related_credit_case = relationship("CreditCase")

    @property
    def related_case(self):
        return self.related_legal_case or self.related_credit_case

    def __repr__(self):
        return f"<Notification {self.id}: {self.type.value} for {self.recipient_id}>"
