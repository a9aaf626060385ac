"""Subscription purchase endpoints."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_principal, get_db, require_admin
from api.principal import Principal
from models.user_subscription import (
    SubscriptionPurchase,
    SubscriptionPurchaseResponse,
    SubscriptionStatusUpdate,
    SubscriptionTransactionSubmit,
    UserSubscriptionResponse,
)
from services import subscriptions_service
from services.errors import MarketplaceError

router = APIRouter()


@router.post(
    "/subscriptions",
    response_model=SubscriptionPurchaseResponse,
    status_code=status.HTTP_201_CREATED,
)
async def purchase_subscription_endpoint(
    purchase: SubscriptionPurchase,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Start a plan purchase and get the UPI collection instruction."""
    try:
        return await subscriptions_service.purchase(db, user_id=principal.id, payload=purchase)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to purchase subscription: {str(e)}",
        )


@router.put(
    "/subscriptions/{subscription_id}/transaction",
    response_model=UserSubscriptionResponse,
)
async def submit_subscription_transaction_endpoint(
    subscription_id: int,
    transaction: SubscriptionTransactionSubmit,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Record the UPI transaction reference of one's own purchase."""
    try:
        return await subscriptions_service.submit_transaction_ref(
            db,
            subscription_id=subscription_id,
            user_id=principal.id,
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


@router.get("/subscriptions/mine", response_model=List[UserSubscriptionResponse])
async def list_my_subscriptions_endpoint(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's subscriptions, newest first."""
    try:
        return await subscriptions_service.list_user_subscriptions(db, user_id=principal.id)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch subscriptions: {str(e)}",
        )


@router.put("/admin/subscriptions/{subscription_id}", response_model=UserSubscriptionResponse)
async def set_subscription_status_endpoint(
    subscription_id: int,
    status_update: SubscriptionStatusUpdate,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Set a subscription's payment status (admin only)."""
    try:
        return await subscriptions_service.admin_set_status(
            db,
            subscription_id=subscription_id,
            payment_status=status_update.payment_status,
        )
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update subscription: {str(e)}",
        )
