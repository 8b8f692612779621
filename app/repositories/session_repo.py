"""
SessionRepository - MongoDB-backed Session Store.

Contract used by the services:
- find_by_numeric_id: absent session is None, not an error
- insert_unique: DuplicateNumericIdError on numeric_id collision
- update_fields: atomic compare-and-set on (numeric_id, version)
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.config import settings
from app.core.errors import DuplicateNumericIdError
from app.models.session import PokerSession, SessionStatus


def _to_document(value: Any) -> Any:
    """Dump pydantic models (and lists of them) into BSON-ready values."""
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, list):
        return [_to_document(item) for item in value]
    return value


class SessionRepository:
    """Repository for poker session documents."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[settings.SESSIONS_COLLECTION]

    async def find_by_numeric_id(self, numeric_id: str) -> Optional[PokerSession]:
        """Get a session by its 6-digit code."""
        doc = await self.collection.find_one({"numeric_id": numeric_id})
        if doc:
            return PokerSession(**doc)
        return None

    async def insert_unique(self, session: PokerSession) -> PokerSession:
        """
        Insert a new session.

        Raises DuplicateNumericIdError when numeric_id is taken, so the
        caller can retry with a fresh code.
        """
        doc = session.model_dump(by_alias=True)
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError as exc:
            raise DuplicateNumericIdError(
                f"numeric_id already exists: {session.numeric_id}"
            ) from exc
        doc["_id"] = result.inserted_id
        return PokerSession(**doc)

    async def update_fields(
        self,
        numeric_id: str,
        expected_version: int,
        fields: Dict[str, Any],
    ) -> Optional[PokerSession]:
        """
        Atomically set fields if the stored version still matches.

        Returns the updated session, or None when the document is gone or
        was modified since it was read.
        """
        updates = {key: _to_document(value) for key, value in fields.items()}
        updates["updated_at"] = datetime.now(timezone.utc)

        result = await self.collection.find_one_and_update(
            {"numeric_id": numeric_id, "version": expected_version},
            {"$set": updates, "$inc": {"version": 1}},
            return_document=ReturnDocument.AFTER
        )
        if result:
            return PokerSession(**result)
        return None

    async def find_settled_by_user(self, user_id: str) -> List[PokerSession]:
        """Settled sessions in which some player is linked to user_id."""
        docs = await self.collection.find({
            "status": SessionStatus.SETTLED.value,
            "players.user_id": user_id
        }).to_list(None)
        return [PokerSession(**doc) for doc in docs]
