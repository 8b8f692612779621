from fastapi import Depends

from app.db.mongo import get_db
from app.repositories.session_repo import SessionRepository
from app.services.session_service import SessionService
from app.services.settlement_service import SettlementService


def get_session_repository(db = Depends(get_db)) -> SessionRepository:
    return SessionRepository(db)


def get_session_service(
    repository: SessionRepository = Depends(get_session_repository)
) -> SessionService:
    return SessionService(repository)


def get_settlement_service(
    session_service: SessionService = Depends(get_session_service)
) -> SettlementService:
    return SettlementService(session_service)
