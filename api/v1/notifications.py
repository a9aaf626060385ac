"""Notification endpoints."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_principal, get_db
from api.principal import Principal
from models.notification import NotificationResponse
from services import notification_service

router = APIRouter()


@router.get("/notifications", response_model=List[NotificationResponse])
async def list_notifications_endpoint(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's notifications, newest first."""
    try:
        return await notification_service.list_notifications(db, user_id=principal.id)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch notifications: {str(e)}",
        )
