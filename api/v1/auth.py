"""Authentication endpoints (DEV-ONLY)."""

from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

import config
from api.deps import get_current_principal, get_db
from api.principal import Principal
from auth.jwt import create_access_token
from models.user import User, UserResponse
from repos import users_repo

router = APIRouter()


class DevLoginRequest(BaseModel):
    """Request schema for dev login."""

    email: EmailStr
    name: str | None = None


class DevLoginResponse(BaseModel):
    """Response schema for dev login."""

    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: str


@router.post("/auth/dev-login", response_model=DevLoginResponse)
async def dev_login(
    request: DevLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    DEV-ONLY endpoint to login user and return JWT token.

    Finds or creates a user by email and returns a signed JWT carrying the
    user's id and stored role. Dev login never creates administrators.
    """
    if config.settings.APP_ENV == "production":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Dev login is not available in production",
        )

    email_lower = request.email.lower()

    try:
        user = await users_repo.get_by_email(db, email=email_lower)
        if not user:
            user_name = request.name or email_lower.split("@")[0].replace(".", " ").title()
            user = await users_repo.create(
                db,
                User(
                    id=uuid4(),
                    email=email_lower,
                    full_name=user_name,
                    role="user",
                ),
            )
            await db.commit()
    except Exception as e:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to login: {str(e)}",
        )

    return DevLoginResponse(
        access_token=create_access_token(user.id, user.role),
        user_id=str(user.id),
        role=user.role,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Get the authenticated user."""
    user = await users_repo.get_by_id(db, user_id=principal.id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
