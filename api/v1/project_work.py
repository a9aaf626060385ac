"""Work submission, review and dispute endpoints."""

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_principal, get_db, require_admin
from api.principal import Principal
from models.project_work import DisputeRaise, DisputeResolve, ProjectWorkResponse, WorkComment
from services import storage, work_service
from services.errors import MarketplaceError

router = APIRouter()


@router.post(
    "/projects/{project_id}/work",
    response_model=ProjectWorkResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_work_endpoint(
    project_id: int,
    file: UploadFile = File(...),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Upload a deliverable for an assigned project.

    Raises:
        403 until the project's payment is verified, for anyone but the
        assigned bidder, and after a rejected submission.
    """
    try:
        await work_service.ensure_can_submit(db, project_id=project_id, bidder_id=principal.id)

        file_ref = await storage.save_work_file(file, project_id=project_id)
        try:
            return await work_service.submit_work(
                db,
                project_id=project_id,
                bidder_id=principal.id,
                file_ref=file_ref,
            )
        except Exception:
            # Nothing references the stored file once the submission failed
            await storage.delete_work_file(file_ref)
            raise
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to submit work: {str(e)}",
        )


@router.get("/projects/{project_id}/work", response_model=List[ProjectWorkResponse])
async def list_project_work_endpoint(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List a project's submissions, latest attempt first."""
    try:
        return await work_service.list_project_work(
            db,
            project_id=project_id,
            user_id=principal.id,
        )
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch work submissions: {str(e)}",
        )


@router.get("/work/{work_id}/download")
async def download_work_endpoint(
    work_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Download the file of a submission (project owner or submitting bidder).

    Raises:
        404 if the submission or its stored file is missing.
    """
    try:
        work = await work_service.get_work_for_download(db, work_id=work_id, user_id=principal.id)
        path = storage.work_file_path(work.file_url)
        if path is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Work file not found",
            )
        return FileResponse(path, filename=path.name)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to download work: {str(e)}",
        )


@router.post("/work/{work_id}/accept", response_model=ProjectWorkResponse)
async def accept_work_endpoint(
    work_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Accept a pending submission and complete the project."""
    try:
        return await work_service.accept_work(db, work_id=work_id, owner_id=principal.id)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to accept work: {str(e)}",
        )


@router.post("/work/{work_id}/reject", response_model=ProjectWorkResponse)
async def reject_work_endpoint(
    work_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Reject a pending submission (from the fifth attempt on)."""
    try:
        return await work_service.reject_work(db, work_id=work_id, owner_id=principal.id)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to reject work: {str(e)}",
        )


@router.post("/work/{work_id}/comment", response_model=ProjectWorkResponse)
async def comment_on_work_endpoint(
    work_id: int,
    comment: WorkComment,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Leave feedback on a submission, optionally grading it."""
    try:
        return await work_service.comment_on_work(
            db,
            work_id=work_id,
            owner_id=principal.id,
            comment=comment.owner_comment,
            work_status=comment.work_status,
        )
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to comment on work: {str(e)}",
        )


@router.post("/work/{work_id}/dispute", response_model=ProjectWorkResponse)
async def raise_dispute_endpoint(
    work_id: int,
    dispute: DisputeRaise,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Appeal a rejected submission."""
    try:
        return await work_service.raise_dispute(
            db,
            work_id=work_id,
            bidder_id=principal.id,
            reason=dispute.reason,
        )
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to raise dispute: {str(e)}",
        )


@router.post("/admin/work/{work_id}/resolve", response_model=ProjectWorkResponse)
async def resolve_dispute_endpoint(
    work_id: int,
    resolution: DisputeResolve,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Settle a dispute (admin only).

    An accepted dispute completes the project and releases the payment.
    """
    try:
        return await work_service.resolve_dispute(
            db,
            work_id=work_id,
            decision=resolution.decision,
            admin_reason=resolution.admin_reason,
        )
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to resolve dispute: {str(e)}",
        )
