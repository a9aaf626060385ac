"""Bid endpoints."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_principal, get_db
from api.principal import Principal
from models.bid import BidCreate, BidResponse, BidUpdate, UserBidResponse
from services import bids_service
from services.errors import MarketplaceError

router = APIRouter()


@router.post("/bids", response_model=BidResponse, status_code=status.HTTP_201_CREATED)
async def place_bid_endpoint(
    bid_data: BidCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Place a bid on an open project.

    Raises:
        404 if the project is not open, 409 (with bid_id) on a duplicate bid,
        403 when the bid quota is used up.
    """
    try:
        return await bids_service.place_bid(db, user_id=principal.id, payload=bid_data)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to place bid: {str(e)}",
        )


@router.put("/bids/{bid_id}", response_model=BidResponse)
async def update_bid_endpoint(
    bid_id: int,
    bid_data: BidUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Update one's own bid while the project is still open.

    Only provided fields will be updated.
    """
    try:
        return await bids_service.update_bid(
            db,
            bid_id=bid_id,
            user_id=principal.id,
            payload=bid_data,
        )
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update bid: {str(e)}",
        )


@router.get("/bids/mine", response_model=List[UserBidResponse])
async def list_my_bids_endpoint(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's bids with project and payment status."""
    try:
        return await bids_service.list_user_bids(db, user_id=principal.id)
    except (HTTPException, MarketplaceError):
        raise
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch bids: {str(e)}",
        )
