"""
Tests for SessionRepository against a mocked motor collection.

Covers:
- Document <-> model mapping
- Duplicate numeric id translation
- Compare-and-set update shape
- Settled-by-user query
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.errors import DuplicateNumericIdError
from app.models.session import Debt, Player, PokerSession, SessionStatus
from app.repositories.session_repo import SessionRepository


@pytest.fixture
def mock_collection():
    collection = MagicMock()
    collection.find_one = AsyncMock()
    collection.insert_one = AsyncMock()
    collection.find_one_and_update = AsyncMock()
    return collection


@pytest.fixture
def repo(mock_collection):
    db = MagicMock()
    db.__getitem__.return_value = mock_collection
    return SessionRepository(db)


def _session_doc(**overrides):
    doc = {
        "_id": ObjectId(),
        "numeric_id": "123456",
        "status": "ACTIVE",
        "stakes": "1/2",
        "players": [
            {"player_id": "p1", "name": "Alice", "buy_in_cents": 10000,
             "cash_out_cents": 0, "net_cents": 0, "user_id": None},
        ],
        "ledger": [],
        "transfers": [],
        "debts": [],
        "created_at": datetime.now(timezone.utc),
        "updated_at": datetime.now(timezone.utc),
        "settled_at": None,
        "version": 4,
    }
    doc.update(overrides)
    return doc


@pytest.mark.asyncio
async def test_find_by_numeric_id(repo, mock_collection):
    mock_collection.find_one.return_value = _session_doc()

    session = await repo.find_by_numeric_id("123456")

    mock_collection.find_one.assert_called_once_with({"numeric_id": "123456"})
    assert session.numeric_id == "123456"
    assert session.players[0].name == "Alice"
    assert session.version == 4


@pytest.mark.asyncio
async def test_find_by_numeric_id_absent(repo, mock_collection):
    mock_collection.find_one.return_value = None

    assert await repo.find_by_numeric_id("000000") is None


@pytest.mark.asyncio
async def test_insert_unique(repo, mock_collection):
    session = PokerSession(numeric_id="654321", stakes="2/5")
    mock_collection.insert_one.return_value = MagicMock(inserted_id=session.id)

    created = await repo.insert_unique(session)

    doc = mock_collection.insert_one.call_args[0][0]
    assert doc["_id"] == session.id
    assert doc["numeric_id"] == "654321"
    assert doc["status"] == "ACTIVE"
    assert doc["version"] == 1
    assert created.numeric_id == "654321"


@pytest.mark.asyncio
async def test_insert_unique_duplicate(repo, mock_collection):
    mock_collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")

    with pytest.raises(DuplicateNumericIdError):
        await repo.insert_unique(PokerSession(numeric_id="111111", stakes="1/2"))


@pytest.mark.asyncio
async def test_update_fields_is_compare_and_set(repo, mock_collection):
    mock_collection.find_one_and_update.return_value = _session_doc(
        status="SETTLED", version=5
    )
    players = [Player(player_id="p1", name="Alice", buy_in_cents=10000, net_cents=0)]
    debts = [Debt(from_player_id="p2", to_player_id="p1", amount_cents=500)]

    updated = await repo.update_fields("123456", 4, {
        "status": SessionStatus.SETTLED.value,
        "players": players,
        "debts": debts,
    })

    args, kwargs = mock_collection.find_one_and_update.call_args
    query, update = args
    assert query == {"numeric_id": "123456", "version": 4}
    assert update["$inc"] == {"version": 1}
    assert update["$set"]["status"] == "SETTLED"
    assert update["$set"]["players"][0]["player_id"] == "p1"
    assert update["$set"]["debts"][0]["amount_cents"] == 500
    assert "updated_at" in update["$set"]
    assert kwargs["return_document"] == ReturnDocument.AFTER
    assert updated.status == SessionStatus.SETTLED
    assert updated.version == 5


@pytest.mark.asyncio
async def test_update_fields_version_mismatch(repo, mock_collection):
    mock_collection.find_one_and_update.return_value = None

    assert await repo.update_fields("123456", 1, {"debts": []}) is None


@pytest.mark.asyncio
async def test_find_settled_by_user(repo, mock_collection):
    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=[_session_doc(status="SETTLED")])
    mock_collection.find.return_value = cursor

    sessions = await repo.find_settled_by_user("u-1")

    mock_collection.find.assert_called_once_with({
        "status": "SETTLED",
        "players.user_id": "u-1"
    })
    assert len(sessions) == 1
    assert sessions[0].status == SessionStatus.SETTLED


@pytest.mark.asyncio
async def test_create_indexes_enforces_unique_numeric_id(mock_collection):
    from app.db.mongo import create_indexes

    mock_collection.create_index = AsyncMock()
    db = MagicMock()
    db.__getitem__.return_value = mock_collection

    await create_indexes(db)

    mock_collection.create_index.assert_any_call("numeric_id", unique=True)
    mock_collection.create_index.assert_any_call("players.user_id")
