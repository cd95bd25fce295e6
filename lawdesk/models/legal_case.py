from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
from ..config.database import Base
import uuid


class LegalCaseStatus(PyEnum):
    PENDING_ASSIGNMENT = "pending_assignment"
    FILED = "filed"
    ASSIGNED = "assigned"
    UNDER_REVIEW = "under_review"
    COURT_PROCEEDINGS = "court_proceedings"
    SETTLEMENT = "settlement"
    RESOLVED = "resolved"
    CLOSED = "closed"


class CasePriority(PyEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class LegalCase(Base):
    __tablename__ = "legal_cases"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    case_number = Column(String(50), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    status = Column(Enum(LegalCaseStatus), default=LegalCaseStatus.PENDING_ASSIGNMENT, nullable=False)
    priority = Column(Enum(CasePriority), default=CasePriority.MEDIUM, nullable=False)

    # Associations
    law_firm_id = Column(String, ForeignKey("law_firms.id"), nullable=True)
    assigned_to_id = Column(String, ForeignKey("users.id"), nullable=True, index=True)

    # Court details
    court_name = Column(String(255), nullable=True)
    court_location = Column(String(255), nullable=True)
    court_date = Column(DateTime, nullable=True, index=True)
    next_hearing_date = Column(DateTime, nullable=True, index=True)
    mentioning_date = Column(DateTime, nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    law_firm = relationship("LawFirm", back_populates="legal_cases")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id])

    @property
    def court_events(self):
        """(field name, date) pairs for the populated court dates"""
        events = [
            ("court_date", self.court_date),
            ("next_hearing_date", self.next_hearing_date),
            ("mentioning_date", self.mentioning_date),
        ]
        return [(name, value) for name, value in events if value is not None]

    def __repr__(self):
        return f"<LegalCase {self.case_number} ({self.status.value})>"
