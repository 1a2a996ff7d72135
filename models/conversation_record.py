from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ConversationRecord:
    """In-memory representation of a row in the CONVERSATION table.

    Attributes:
        id: Primary key (None for new records).
        user_id: Identity of the authenticated user owning the turn.
        user_message: Text the user submitted.
        bot_response: Text the assistant answered with.
        created_at: Unix timestamp (seconds) when the row was inserted.
    """

    id: Optional[int]
    user_id: str
    user_message: str
    bot_response: str
    created_at: Optional[int] = None
