from .law_firm import LawFirm
from .user import User, UserRole
from .legal_case import LegalCase, LegalCaseStatus, CasePriority
from .credit_case import CreditCase, CreditCaseStatus, CaseNote, PromisedPayment, PaymentStatus, Currency
from .notification import Notification, NotificationType, NotificationPriority

# Import the base and database config
from ..config.database import Base, engine


# Create all tables
def create_tables():
    """Create all database tables"""
    Base.metadata.create_all(bind=engine)


__all__ = [
    "LawFirm",
    "User", "UserRole",
    "LegalCase", "LegalCaseStatus", "CasePriority",
    "CreditCase", "CreditCaseStatus", "CaseNote", "PromisedPayment", "PaymentStatus", "Currency",
    "Notification", "NotificationType", "NotificationPriority",
    "Base", "engine", "create_tables"
]
