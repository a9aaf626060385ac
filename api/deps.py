"""FastAPI dependencies for authentication and database."""

from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from api.principal import Principal
from auth.jwt import decode_token
from db import get_db as get_db_session
from repos import users_repo

# HTTP Bearer token security scheme
security = HTTPBearer()


async def get_db() -> AsyncSession:
    """
    Dependency to get database session.
    Reuses the get_db function from db.py.
    """
    async for session in get_db_session():
        yield session


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """
    Dependency to resolve the caller from the JWT bearer token.

    Args:
        credentials: HTTP Bearer token from Authorization header
        db: Database session

    Returns:
        Principal: the authenticated user id and role

    Raises:
        HTTPException: If token is invalid, expired, or user not found
    """
    token = credentials.credentials

    try:
        token_payload = decode_token(token)
        user_id = UUID(token_payload.sub)
    except (JWTError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
        )

    user = await users_repo.get_by_id(db, user_id=user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    # Role comes from the stored user, not the token claim
    if user.role != token_payload.role:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Token claims do not match user",
        )

    return Principal(id=user.id, role=user.role)


async def require_admin(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    """
    Dependency that only lets administrators through.

    Raises:
        HTTPException: 403 if the caller is not an admin
    """
    if not principal.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return principal
