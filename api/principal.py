"""Authenticated caller identity."""

from uuid import UUID


class Principal:
    """Caller resolved from the bearer token."""

    def __init__(self, id: UUID, role: str):
        """
        Initialize principal.

        Args:
            id: User ID
            role: "user" or "admin"
        """
        self.id = id
        self.role = role

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
