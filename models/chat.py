"""Chat gate schemas. Messages themselves are exchanged outside this service."""

from typing import Literal

from pydantic import BaseModel


class ChatSession(BaseModel):
    """Chat room a participant may join."""

    project_id: int
    chat_room_id: str


class ChatListEntry(BaseModel):
    """Chat room listed for a user, by the side they are on."""

    project_id: int
    project_name: str
    chat_room_id: str
    category: Literal["Project", "Bid"]
