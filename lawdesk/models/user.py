from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
from ..config.database import Base
import uuid


class UserRole(PyEnum):
    SYSTEM_OWNER = "system_owner"
    LAW_FIRM_ADMIN = "law_firm_admin"
    LEGAL_HEAD = "legal_head"
    ADVOCATE = "advocate"
    CREDIT_HEAD = "credit_head"
    DEBT_COLLECTOR = "debt_collector"
    ACCOUNTANT = "accountant"
    RECEPTIONIST = "receptionist"


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)

    # Profile
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    role = Column(Enum(UserRole), nullable=False, default=UserRole.ADVOCATE)
    is_active = Column(Boolean, default=True)

    # Firm association (multi-tenant); system owners have none
    law_firm_id = Column(String, ForeignKey("law_firms.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    law_firm = relationship("LawFirm", back_populates="users")
    notifications = relationship("Notification", back_populates="recipient", cascade="all, delete-orphan")

    @property
    def full_name(self):
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.email

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"
