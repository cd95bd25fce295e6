"""
Typed metadata payloads stored in ``Notification.data``.

Each notification producer fills exactly one of these models; the stored
value is the model dumped to a JSON-safe dict.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

NOTE_PREVIEW_LENGTH = 100


class CaseEventMetadata(BaseModel):
    """Court, hearing and mentioning date reminders"""
    case_number: str
    case_title: str
    days_until: int
    court_name: Optional[str] = None


class FollowUpMetadata(BaseModel):
    case_number: str
    case_title: str
    days_until: int
    debtor_name: Optional[str] = None
    note_content: str = ""


class PaymentDueMetadata(BaseModel):
    case_number: str
    case_title: str
    days_until: int
    debtor_name: Optional[str] = None
    payment_amount: float
    payment_currency: str
    payment_notes: Optional[str] = None


class CaseAssignedMetadata(BaseModel):
    case_number: str
    case_title: str
    assigned_by: str
    debtor_name: Optional[str] = None
    debt_amount: Optional[float] = None
    currency: Optional[str] = None


class PromisedPaymentAddedMetadata(BaseModel):
    case_number: str
    case_title: str
    promised_amount: float
    promised_date: datetime
    currency: str
    scheduled_by: str


class PaymentStatusUpdatedMetadata(BaseModel):
    case_number: str
    case_title: str
    payment_amount: float
    payment_status: str
    currency: str
    updated_by: str


def build_metadata(payload: BaseModel) -> dict:
    return payload.model_dump(mode="json")


def note_preview(content: Optional[str]) -> str:
    """First part of a note, always suffixed with an ellipsis"""
    return (content or "")[:NOTE_PREVIEW_LENGTH] + "..."
