"""Chat gate: who may join a project's chat room."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from models.chat import ChatListEntry, ChatSession
from models.project import chat_room_id_for
from repos import project_payments_repo, projects_repo
from services import payment_service
from services.errors import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)

CHAT_PROJECT_STATUSES = ("assigned", "work_submitted")


async def initiate_chat(session: AsyncSession, *, project_id: int, user_id: UUID) -> ChatSession:
    """
    Open the chat room of a project whose payment has been verified.

    Raises:
        NotFoundError: project not found
        ForbiddenError: payment not verified, or caller is neither owner nor
            assigned bidder
    """
    project = await projects_repo.get_by_project_id(session, project_id=project_id)
    if not project:
        raise NotFoundError("Project not found")
    if not await payment_service.is_unlocked(session, project_id=project_id):
        raise ForbiddenError("Payment not verified")
    if user_id not in (project.owner_id, project.assigned_to):
        raise ForbiddenError("Unauthorized to initiate chat")

    chat_room_id = project.chat_room_id or chat_room_id_for(project_id)
    logger.info("Chat initiated for project %s by %s", project_id, user_id)
    return ChatSession(project_id=project_id, chat_room_id=chat_room_id)


async def list_chat_rooms(session: AsyncSession, *, user_id: UUID) -> list[ChatListEntry]:
    """Chat rooms of in-progress projects the user owns or works on."""
    payments = await project_payments_repo.list_verified_for_participant(session, user_id=user_id)
    projects = await projects_repo.list_by_project_ids(
        session,
        project_ids=[payment.project_id for payment in payments],
    )

    owned, bidding = [], []
    for project in projects:
        if project.status not in CHAT_PROJECT_STATUSES:
            continue
        entry = {
            "project_id": project.project_id,
            "project_name": project.project_name,
            "chat_room_id": project.chat_room_id or chat_room_id_for(project.project_id),
        }
        if project.owner_id == user_id:
            owned.append(ChatListEntry(category="Project", **entry))
        else:
            bidding.append(ChatListEntry(category="Bid", **entry))
    return owned + bidding
