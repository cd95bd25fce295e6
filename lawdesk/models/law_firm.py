from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
from ..config.database import Base
import uuid


class LawFirm(Base):
    __tablename__ = "law_firms"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    firm_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    users = relationship("User", back_populates="law_firm")
    legal_cases = relationship("LegalCase", back_populates="law_firm")
    credit_cases = relationship("CreditCase", back_populates="law_firm")

    def __repr__(self):
        return f"<LawFirm {self.firm_name}>"
