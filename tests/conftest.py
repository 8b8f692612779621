from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_session_repository
from app.core.errors import DuplicateNumericIdError
from app.main import app
from app.models.session import PokerSession, SessionStatus
from app.repositories.session_repo import _to_document
from app.services.session_service import SessionService
from app.services.settlement_service import SettlementService


class InMemorySessionRepository:
    """Dict-backed stand-in for SessionRepository with the same contract."""

    def __init__(self):
        self.documents: Dict[str, dict] = {}

    async def find_by_numeric_id(self, numeric_id: str) -> Optional[PokerSession]:
        doc = self.documents.get(numeric_id)
        if doc:
            return PokerSession(**doc)
        return None

    async def insert_unique(self, session: PokerSession) -> PokerSession:
        if session.numeric_id in self.documents:
            raise DuplicateNumericIdError(f"numeric_id already exists: {session.numeric_id}")
        self.documents[session.numeric_id] = session.model_dump(by_alias=True)
        return PokerSession(**self.documents[session.numeric_id])

    async def update_fields(
        self, numeric_id: str, expected_version: int, fields: Dict[str, Any]
    ) -> Optional[PokerSession]:
        doc = self.documents.get(numeric_id)
        if doc is None or doc["version"] != expected_version:
            return None
        doc.update({key: _to_document(value) for key, value in fields.items()})
        doc["version"] += 1
        return PokerSession(**doc)

    async def find_settled_by_user(self, user_id: str) -> List[PokerSession]:
        return [
            PokerSession(**doc)
            for doc in self.documents.values()
            if doc["status"] == SessionStatus.SETTLED.value
            and any(p["user_id"] == user_id for p in doc["players"])
        ]


@pytest.fixture
def repo() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def session_service(repo) -> SessionService:
    return SessionService(repo)


@pytest.fixture
def settlement_service(session_service) -> SettlementService:
    return SettlementService(session_service)


@pytest.fixture
def client(repo):
    """FastAPI test client wired to the in-memory repository."""
    app.dependency_overrides[get_session_repository] = lambda: repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
