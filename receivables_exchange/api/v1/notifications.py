"""Notification feed endpoints"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from receivables_exchange.api.dependencies import get_current_principal
from receivables_exchange.api.v1.schemas import MessageResponse, NotificationResponse
from receivables_exchange.domain.models import Principal
from receivables_exchange.infrastructure.database.session import get_db
from receivables_exchange.services.notifications import NotificationService

router = APIRouter()


@router.get("/notifications", response_model=List[NotificationResponse])
def list_notifications(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Caller's notifications, newest first"""
    return NotificationService(db).list_for_user(principal.user_id)


@router.patch("/notifications/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return NotificationService(db).mark_read(principal.user_id, notification_id)


@router.delete("/notifications/{notification_id}", response_model=MessageResponse)
def delete_notification(
    notification_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    NotificationService(db).delete(principal.user_id, notification_id)
    return MessageResponse(message="Notification deleted successfully")


@router.delete("/notifications", response_model=MessageResponse)
def clear_notifications(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    NotificationService(db).clear(principal.user_id)
    return MessageResponse(message="All notifications cleared successfully")
