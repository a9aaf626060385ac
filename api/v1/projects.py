"""Project endpoints: posting, browsing, bids of a project and finalization."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_principal, get_db
from api.principal import Principal
from models.bid import BidResponse
from models.project import ProjectCreate, ProjectInfoUpdate, ProjectResponse
from models.project_payment import FinalizeRequest, FinalizeResponse, ProjectPaymentResponse
from services import bids_service, finalization_service, projects_service
from services.errors import MarketplaceError

router = APIRouter()


@router.post("/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project_endpoint(
    project_data: ProjectCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Post a new project.

    The first post in each 90-day window is free; further posts need an
    active subscription.
    """
    try:
        project = await projects_service.create_project(
            db,
            owner_id=principal.id,
            payload=project_data,
        )
        return await projects_service.to_response(db, project)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create project: {str(e)}",
        )


@router.get("/projects/mine", response_model=List[ProjectResponse])
async def list_my_projects_endpoint(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List projects posted by the caller."""
    try:
        projects = await projects_service.list_my_projects(db, owner_id=principal.id)
        return [await projects_service.to_response(db, project) for project in projects]
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch projects: {str(e)}",
        )


@router.get("/projects/browse", response_model=List[ProjectResponse])
async def browse_projects_endpoint(
    skills: List[str] | None = Query(None),
    min_budget: float | None = Query(None, ge=0),
    max_budget: float | None = Query(None, ge=0),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Browse open projects posted by other users.

    Returns:
        Open projects matching any of the given skills and overlapping the
        given budget range.
    """
    try:
        projects = await projects_service.browse_projects(
            db,
            user_id=principal.id,
            skills=skills,
            min_budget=min_budget,
            max_budget=max_budget,
        )
        return [await projects_service.to_response(db, project) for project in projects]
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to browse projects: {str(e)}",
        )


@router.get("/projects/{project_id}", response_model=ProjectResponse)
async def get_project_endpoint(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a project by its numeric ID.

    Raises:
        404 if project not found.
    """
    try:
        project = await projects_service.get_project(db, project_id=project_id)
        return await projects_service.to_response(db, project)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch project: {str(e)}",
        )


@router.put("/projects/{project_id}/info", response_model=ProjectResponse)
async def update_project_info_endpoint(
    project_id: int,
    info: ProjectInfoUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Update the additional info of one's own open project."""
    try:
        project = await projects_service.update_project_info(
            db,
            project_id=project_id,
            owner_id=principal.id,
            additional_info=info.additional_info,
        )
        return await projects_service.to_response(db, project)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update project info: {str(e)}",
        )


@router.get("/projects/{project_id}/bids", response_model=List[BidResponse])
async def list_project_bids_endpoint(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List the bids on one's own project."""
    try:
        return await bids_service.list_project_bids(
            db,
            project_id=project_id,
            owner_id=principal.id,
        )
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch bids: {str(e)}",
        )


@router.post("/projects/{project_id}/finalize", response_model=FinalizeResponse)
async def finalize_project_endpoint(
    project_id: int,
    finalize_data: FinalizeRequest,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Accept a bid: assign the project and open a pending escrow payment.

    Returns:
        The assigned project, its payment and the UPI collection instruction.
    """
    try:
        result = await finalization_service.finalize(
            db,
            project_id=project_id,
            owner_id=principal.id,
            bid_id=finalize_data.bid_id,
            bid_amount=finalize_data.bid_amount,
        )
        return FinalizeResponse(
            project=await projects_service.to_response(db, result.project),
            payment=ProjectPaymentResponse.model_validate(result.payment),
            artifact=result.artifact,
        )
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to finalize project: {str(e)}",
        )
