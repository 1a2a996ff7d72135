"""Async Data Access Layer for the CONVERSATION table.

Provides ConversationDAL with the append and read operations used by the
best-effort persistence of chat turns, on top of
`utils.database_init.AsyncDatabaseInitializer`.
"""

from __future__ import annotations

import time
from typing import List, Sequence

from models.conversation_record import ConversationRecord
from utils.database_init import AsyncDatabaseInitializer


class ConversationDAL:
    """Data access layer for CONVERSATION records.

    The constructor accepts an `AsyncDatabaseInitializer` (or any object
    exposing an async `connection()` context manager that yields an
    `aiosqlite.Connection`).
    """

    _COLUMNS = (
        "id",
        "user_id",
        "user_message",
        "bot_response",
        "created_at",
    )
    _COLUMN_LIST, _INSERT_COLUMNS = ", ".join(_COLUMNS), ", ".join(_COLUMNS[1:])

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def create_turn(self, record: ConversationRecord) -> int:
        """Insert a new CONVERSATION row and return the new id.

        Args:
            record: ConversationRecord with `id=None` and fields to insert.

        Returns:
            The integer primary key of the created row.
        """
        created_at = record.created_at or int(time.time())

        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"INSERT INTO CONVERSATION ({self._INSERT_COLUMNS}) VALUES (?, ?, ?, ?)",
                (record.user_id, record.user_message, record.bot_response, created_at),
            )
            await conn.commit()
            return cur.lastrowid

    async def list_turns(self, user_id: str, limit: int = 50, offset: int = 0) -> List[ConversationRecord]:
        """List a user's turns, oldest first.

        Args:
            user_id: Identity the turns were stored under.
            limit: Maximum number of rows to return.
            offset: Rows to skip.
        """
        async with self._db.connection() as conn:
            cur = await conn.execute(
                f"SELECT {self._COLUMN_LIST} FROM CONVERSATION WHERE user_id = ? ORDER BY id ASC LIMIT ? OFFSET ?",
                (user_id, limit, offset),
            )
            rows = await cur.fetchall()
            return [self._row_to_record(r) for r in rows]

    async def count_turns(self, user_id: str) -> int:
        async with self._db.connection() as conn:
            cur = await conn.execute("SELECT COUNT(*) FROM CONVERSATION WHERE user_id = ?", (user_id,))
            row = await cur.fetchone()
            return int(row[0]) if row else 0

    @staticmethod
    def _row_to_record(row: Sequence[object]) -> ConversationRecord:
        """Convert a DB row tuple into a ConversationRecord."""
        return ConversationRecord(
            id=row[0],
            user_id=row[1],
            user_message=row[2],
            bot_response=row[3],
            created_at=row[4],
        )
