"""Project payment endpoints (owner side and admin verification)."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_principal, get_db, require_admin
from api.principal import Principal
from models.project_payment import (
    PaymentStatusUpdate,
    ProjectPaymentResponse,
    ProjectPaymentWithArtifact,
    TransactionSubmit,
)
from services import payment_service
from services.errors import MarketplaceError

router = APIRouter()


@router.put("/payments/{payment_id}/transaction", response_model=ProjectPaymentResponse)
async def submit_transaction_endpoint(
    payment_id: int,
    transaction: TransactionSubmit,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Record the UPI transaction reference of one's own payment."""
    try:
        return await payment_service.submit_transaction_ref(
            db,
            payment_id=payment_id,
            owner_id=principal.id,
            transaction_id=transaction.transaction_id,
        )
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to submit transaction ID: {str(e)}",
        )


@router.get("/payments/project/{project_id}", response_model=ProjectPaymentWithArtifact)
async def get_project_payment_endpoint(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Get a project's payment with its UPI collection instruction."""
    try:
        return await payment_service.get_project_payment(
            db,
            project_id=project_id,
            user_id=principal.id,
            is_admin=principal.is_admin,
        )
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch payment: {str(e)}",
        )


@router.get("/admin/payments", response_model=List[ProjectPaymentResponse])
async def list_pending_payments_endpoint(
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """List payments waiting for verification (admin only)."""
    try:
        return await payment_service.list_pending_payments(db)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch payments: {str(e)}",
        )


@router.put("/admin/payments/{payment_id}", response_model=ProjectPaymentResponse)
async def verify_payment_endpoint(
    payment_id: int,
    status_update: PaymentStatusUpdate,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Move a payment forward (admin only).

    Raises:
        409 if the payment already has that status, 400 for a backwards move.
    """
    try:
        return await payment_service.admin_verify(
            db,
            payment_id=payment_id,
            status=status_update.payment_status,
        )
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update payment status: {str(e)}",
        )
