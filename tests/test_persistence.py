import logging

import pytest

from dal.conversation_dal import ConversationDAL
from models.conversation_record import ConversationRecord
from services.conversation.persistence import ConversationPersistence
from utils.database_init import AsyncDatabaseInitializer


@pytest.fixture
def db(tmp_path):
    return AsyncDatabaseInitializer(tmp_path / "db", reset=False)


async def test_turns_round_trip_through_sqlite(db):
    dal = ConversationDAL(db)
    persistence = ConversationPersistence(dal)

    first = await persistence.save_turn("resident-1", "garbage near MG Road", "I've logged your complaint")
    second = await persistence.save_turn("resident-1", "thanks", "You're welcome")
    await persistence.save_turn("resident-2", "hello", "hi")

    assert first < second
    turns = await dal.list_turns("resident-1")
    assert [(t.user_message, t.bot_response) for t in turns] == [
        ("garbage near MG Road", "I've logged your complaint"),
        ("thanks", "You're welcome"),
    ]
    assert all(t.created_at for t in turns)
    assert await dal.count_turns("resident-1") == 2
    assert [t.user_message for t in await dal.list_turns("resident-1", limit=1, offset=1)] == ["thanks"]


async def test_anonymous_turns_are_skipped(db):
    dal = ConversationDAL(db)
    assert await ConversationPersistence(dal).save_turn(None, "hi", "hello") is None
    assert await ConversationPersistence(dal).save_turn("", "hi", "hello") is None


async def test_storage_errors_are_logged_and_swallowed(caplog):
    class BrokenDAL:
        async def create_turn(self, record):
            raise OSError("database is locked")

    with caplog.at_level(logging.ERROR):
        assert await ConversationPersistence(BrokenDAL()).save_turn("resident-1", "hi", "hello") is None
    assert "database is locked" in caplog.text


async def test_reset_drops_previous_turns(tmp_path):
    dal = ConversationDAL(AsyncDatabaseInitializer(tmp_path, reset=False))
    await dal.create_turn(ConversationRecord(id=None, user_id="u", user_message="a", bot_response="b"))

    fresh = ConversationDAL(AsyncDatabaseInitializer(tmp_path, reset=True))
    assert await fresh.count_turns("u") == 0


def test_database_dir_is_required(monkeypatch):
    monkeypatch.delenv("DATABASE_DIR", raising=False)
    with pytest.raises(RuntimeError):
        AsyncDatabaseInitializer()


def test_database_dir_must_be_a_directory(tmp_path):
    target = tmp_path / "file.txt"
    target.write_text("x")
    with pytest.raises(RuntimeError):
        AsyncDatabaseInitializer(target)


def test_database_dir_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_DIR", str(tmp_path / "env"))
    monkeypatch.setenv("DATABASE_RESET", "yes")
    db = AsyncDatabaseInitializer()
    assert db.db_path == tmp_path / "env" / "app.db"
    assert db.reset is True
