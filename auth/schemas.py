"""JWT token payload schemas."""

from datetime import datetime

from pydantic import BaseModel


class TokenPayload(BaseModel):
    """JWT token payload structure."""

    sub: str  # user_id (standard JWT claim)
    role: str  # "user" or "admin"
    exp: datetime  # Expiration time (standard JWT claim)
