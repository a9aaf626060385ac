"""Chat gate endpoints."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_principal, get_db
from api.principal import Principal
from models.chat import ChatListEntry, ChatSession
from services import chat_service
from services.errors import MarketplaceError

router = APIRouter()


@router.post("/projects/{project_id}/chat", response_model=ChatSession)
async def initiate_chat_endpoint(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the chat room of a project.

    Raises:
        403 until the project's payment is verified, or for non-participants.
    """
    try:
        return await chat_service.initiate_chat(db, project_id=project_id, user_id=principal.id)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to initiate chat: {str(e)}",
        )


@router.get("/chat", response_model=List[ChatListEntry])
async def list_chat_rooms_endpoint(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List the chat rooms the caller can join."""
    try:
        return await chat_service.list_chat_rooms(db, user_id=principal.id)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch chat list: {str(e)}",
        )
