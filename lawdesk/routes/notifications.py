from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Optional
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config.database import get_db
from ..config.logging import get_logger, log_notification_event
from ..models import User, Notification, NotificationType, NotificationPriority
from ..services import notification_service
from .deps import get_current_user

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = get_logger('notifications')

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)


class RelatedCaseSummary(BaseModel):
    id: str
    case_number: str
    title: str

    model_config = ConfigDict(from_attributes=True)


class NotificationResponse(BaseModel):
    id: str
    type: NotificationType
    priority: NotificationPriority
    title: str
    message: str
    related_legal_case_id: Optional[str] = None
    related_credit_case_id: Optional[str] = None
    related_case: Optional[RelatedCaseSummary] = None
    event_date: Optional[datetime] = None
    action_url: Optional[str] = None
    data: Optional[dict] = None
    is_read: bool
    is_email_sent: bool
    email_sent_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


def serialize_notification(notification: Notification) -> dict:
    return NotificationResponse.model_validate(notification).model_dump(mode="json")


def not_found_response() -> JSONResponse:
    # Missing and not-owned look the same to the caller
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"success": False, "message": "Notification not found"}
    )


def server_error_response(message: str, error: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": message, "error": str(error)}
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Bad query or path parameters on notification routes keep the JSON envelope"""
    if not request.url.path.startswith("/api/notifications"):
        return await request_validation_exception_handler(request, exc)

    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"success": False, "message": "Invalid request parameters", "error": problems}
    )


@router.get("")
@limiter.limit("120/minute")
async def get_notifications(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(notification_service.DEFAULT_PAGE_SIZE, ge=1, le=100),
    unread_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the current user's notifications, newest first"""
    try:
        result = notification_service.list_notifications(
            db, current_user.id, page=page, limit=limit, unread_only=unread_only
        )
        unread_count = notification_service.get_unread_count(db, current_user.id)
    except Exception as e:
        logger.exception("Error fetching notifications for user %s", current_user.id)
        return server_error_response("Server error fetching notifications", e)

    return {
        "success": True,
        "data": {
            "notifications": [serialize_notification(n) for n in result.items],
            "pagination": {
                "currentPage": result.page,
                "totalPages": result.total_pages,
                "totalCount": result.total_count,
                "limit": result.limit,
            },
            "unreadCount": unread_count,
        },
    }


@router.get("/unread-count")
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get count of unread notifications for the current user"""
    try:
        count = notification_service.get_unread_count(db, current_user.id)
    except Exception as e:
        logger.exception("Error counting unread notifications for user %s", current_user.id)
        return server_error_response("Server error getting unread count", e)

    return {"success": True, "data": {"count": count}}


@router.put("/mark-all-read")
async def mark_all_notifications_as_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark all notifications as read for the current user"""
    try:
        updated = notification_service.mark_all_as_read(db, current_user.id)
    except Exception as e:
        logger.exception("Error marking all notifications read for user %s", current_user.id)
        return server_error_response("Server error marking all notifications as read", e)

    log_notification_event("mark_all_read", user_id=current_user.id, details=f"{updated} updated")
    return {"success": True, "message": "All notifications marked as read"}


@router.put("/{notification_id}/read")
async def mark_notification_as_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark a notification as read"""
    try:
        notification = notification_service.mark_as_read(db, notification_id, current_user.id)
    except Exception as e:
        logger.exception("Error marking notification %s as read", notification_id)
        return server_error_response("Server error marking notification as read", e)

    if not notification:
        return not_found_response()

    log_notification_event("mark_read", notification_id=notification_id, user_id=current_user.id)
    return {
        "success": True,
        "data": serialize_notification(notification),
        "message": "Notification marked as read",
    }


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a notification"""
    try:
        deleted = notification_service.delete_notification(db, notification_id, current_user.id)
    except Exception as e:
        logger.exception("Error deleting notification %s", notification_id)
        return server_error_response("Server error deleting notification", e)

    if not deleted:
        return not_found_response()

    log_notification_event("delete", notification_id=notification_id, user_id=current_user.id)
    return {"success": True, "message": "Notification deleted successfully"}
