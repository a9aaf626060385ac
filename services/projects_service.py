"""Service layer for Project business logic."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from models.project import Project, ProjectCreate, ProjectResponse, chat_room_id_for
from repos import projects_repo
from services import quota_service, sequence_service
from services.errors import (
    DomainValidationError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    QuotaExceededError,
)

logger = logging.getLogger(__name__)


async def to_response(session: AsyncSession, project: Project) -> ProjectResponse:
    """Serialize a project together with the ids of its bids."""
    bid_ids = await projects_repo.list_bid_ids(session, project_id=project.project_id)
    return ProjectResponse.model_validate(project).model_copy(update={"bids": bid_ids})


async def create_project(
    session: AsyncSession,
    *,
    owner_id: UUID,
    payload: ProjectCreate,
) -> Project:
    """
    Post a new project, gated by the post quota.

    Args:
        session: Database session
        owner_id: Posting user
        payload: Project creation data

    Returns:
        Created project (status "open")

    Raises:
        DomainValidationError: max_budget < min_budget or an empty skill
        QuotaExceededError: free or subscription post limit reached
    """
    if payload.max_budget < payload.min_budget:
        raise DomainValidationError(
            "maxBudget must be greater than or equal to minBudget",
            min_budget=payload.min_budget,
            max_budget=payload.max_budget,
        )
    skills = [skill.strip() for skill in payload.skills]
    if any(not skill for skill in skills):
        raise DomainValidationError("Skills must be non-empty strings")

    decision = await quota_service.check_post_quota(session, user_id=owner_id)
    if not decision.allowed:
        raise QuotaExceededError(decision.message, used=decision.used, limit=decision.limit)

    try:
        project_id = await sequence_service.next_id(session, sequence_service.PROJECT_ID)
        project = Project(
            project_id=project_id,
            owner_id=owner_id,
            project_name=payload.project_name.strip(),
            description=payload.description.strip(),
            skills=skills,
            min_budget=payload.min_budget,
            max_budget=payload.max_budget,
            duration_days=payload.duration_days,
            status="open",
            chat_room_id=chat_room_id_for(project_id),
        )
        created_project = await projects_repo.create(session, project)
        await quota_service.consume_post(session, user_id=owner_id, decision=decision)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(created_project)
    logger.info("Project %s created by %s (free=%s)", project_id, owner_id, decision.is_free)
    return created_project


async def get_project(session: AsyncSession, *, project_id: int) -> Project:
    """
    Get a project by numeric ID.

    Raises:
        NotFoundError: if project not found
    """
    project = await projects_repo.get_by_project_id(session, project_id=project_id)
    if not project:
        raise NotFoundError("Project not found")
    return project


async def list_my_projects(session: AsyncSession, *, owner_id: UUID) -> list[Project]:
    """List the projects a user has posted."""
    return await projects_repo.list_by_owner(session, owner_id=owner_id)


async def browse_projects(
    session: AsyncSession,
    *,
    user_id: UUID,
    skills: list[str] | None = None,
    min_budget: float | None = None,
    max_budget: float | None = None,
) -> list[Project]:
    """
    Open projects posted by other users.

    Args:
        session: Database session
        user_id: Browsing user (their own projects are excluded)
        skills: Keep projects requiring at least one of these skills
        min_budget: Keep projects whose budget range reaches this value
        max_budget: Keep projects whose budget range starts under this value

    Returns:
        Matching projects, newest first
    """
    projects = await projects_repo.list_open_for_browsing(
        session,
        exclude_owner_id=user_id,
        min_budget=min_budget,
        max_budget=max_budget,
    )
    if skills:
        wanted = set(skills)
        projects = [p for p in projects if wanted.intersection(p.skills or [])]
    return projects


async def update_project_info(
    session: AsyncSession,
    *,
    project_id: int,
    owner_id: UUID,
    additional_info: str,
) -> Project:
    """
    Update the additional info of an open project.

    Raises:
        NotFoundError: if project not found
        ForbiddenError: caller is not the owner
        InvalidStateError: project is no longer open
    """
    project = await get_project(session, project_id=project_id)
    if project.owner_id != owner_id:
        raise ForbiddenError("Unauthorized to update project info")
    if project.status != "open":
        raise InvalidStateError("Cannot update info for non-open project", status=project.status)

    project.additional_info = additional_info
    project.updated_at = datetime.utcnow()
    await session.commit()
    await session.refresh(project)
    return project
