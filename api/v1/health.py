"""Liveness and database readiness endpoint."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

import config
from api.deps import get_db

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Report service status, environment and database reachability.

    Raises:
        503 if the database does not answer.
    """
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database connection failed: {str(e)}",
        )
    return {
        "status": "ok",
        "env": config.settings.ENV,
        "db": "ok",
    }
