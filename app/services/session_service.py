"""
SessionService - session lifecycle outside of settlement.

Each mutation loads the session, builds new lists through the ledger
module and commits them with one compare-and-set update.
"""

import logging
import random
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.errors import (
    AllocationExhaustedError,
    ConcurrentUpdateError,
    DuplicateNumericIdError,
    NotFoundError,
)
from app.models.session import PokerSession, SessionStatus
from app.repositories.session_repo import SessionRepository
from app.schemas.stats import SessionSummary, UserStatsResponse
from app.services import ledger

logger = logging.getLogger(__name__)

MIN_NUMERIC_ID = 100000
MAX_NUMERIC_ID = 999999


def generate_numeric_id() -> str:
    """Random 6-digit session code."""
    return str(random.randint(MIN_NUMERIC_ID, MAX_NUMERIC_ID))


class SessionService:
    def __init__(self, repository: SessionRepository, max_attempts: Optional[int] = None):
        self.repository = repository
        self.max_attempts = max_attempts or settings.NUMERIC_ID_MAX_ATTEMPTS

    async def create_session(self, stakes: str) -> PokerSession:
        """Create an ACTIVE session, retrying on numeric_id collisions."""
        for attempt in range(1, self.max_attempts + 1):
            session = PokerSession(numeric_id=generate_numeric_id(), stakes=stakes)
            try:
                created = await self.repository.insert_unique(session)
            except DuplicateNumericIdError:
                logger.warning(
                    "Duplicate numeric_id collision: %s, retrying (attempt: %s)",
                    session.numeric_id, attempt,
                )
                continue
            logger.info(
                "Created session with numeric_id: %s (attempt: %s)",
                created.numeric_id, attempt,
            )
            return created

        raise AllocationExhaustedError(
            f"Failed to generate unique numeric_id after {self.max_attempts} attempts"
        )

    async def get_session(self, numeric_id: str) -> PokerSession:
        session = await self.repository.find_by_numeric_id(numeric_id)
        if session is None:
            raise NotFoundError(f"Session not found: {numeric_id}")
        return session

    async def commit(self, session: PokerSession, fields: Dict[str, Any]) -> PokerSession:
        """Persist fields against the version the session was read at."""
        updated = await self.repository.update_fields(
            session.numeric_id, session.version, fields
        )
        if updated is None:
            raise ConcurrentUpdateError(
                f"Session {session.numeric_id} was modified concurrently, reload and retry"
            )
        return updated

    async def add_player(
        self,
        numeric_id: str,
        name: str,
        initial_buy_in_cents: int,
        user_id: Optional[str] = None,
    ) -> PokerSession:
        session = await self.get_session(numeric_id)
        players, entries = ledger.record_buy_in(session, name, initial_buy_in_cents, user_id)
        return await self.commit(session, {"players": players, "ledger": entries})

    async def rebuy(self, numeric_id: str, player_id: str, amount_cents: int) -> PokerSession:
        session = await self.get_session(numeric_id)
        players, entries = ledger.record_rebuy(session, player_id, amount_cents)
        return await self.commit(session, {"players": players, "ledger": entries})

    async def add_transfer(
        self,
        numeric_id: str,
        from_player_id: str,
        to_player_id: str,
        amount_cents: int,
        note: Optional[str] = None,
    ) -> PokerSession:
        session = await self.get_session(numeric_id)
        transfers = ledger.record_transfer(
            session, from_player_id, to_player_id, amount_cents, note
        )
        updated = await self.commit(session, {"transfers": transfers})
        logger.info(
            "Added transfer in %s: %s -> %s = %s",
            numeric_id, from_player_id, to_player_id, amount_cents,
        )
        return updated

    async def remove_transfer(self, numeric_id: str, transfer_id: str) -> PokerSession:
        session = await self.get_session(numeric_id)
        transfers = ledger.remove_transfer(session, transfer_id)
        updated = await self.commit(session, {"transfers": transfers})
        logger.info("Removed transfer %s from %s", transfer_id, numeric_id)
        return updated

    async def get_user_stats(self, user_id: str) -> UserStatsResponse:
        """Lifetime results for a linked user across settled sessions."""
        sessions = await self.repository.find_settled_by_user(user_id)

        summaries = []
        for session in sessions:
            if session.status != SessionStatus.SETTLED:
                continue
            player = next((p for p in session.players if p.user_id == user_id), None)
            if player is None:
                continue
            summaries.append(SessionSummary(
                numeric_id=session.numeric_id,
                stakes=session.stakes,
                net_cents=player.net_cents,
                settled_at=session.settled_at or session.created_at,
            ))

        summaries.sort(key=lambda s: s.settled_at, reverse=True)
        return UserStatsResponse(
            user_id=user_id,
            total_net_cents=sum(s.net_cents for s in summaries),
            session_count=len(summaries),
            sessions=summaries,
        )
