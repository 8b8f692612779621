"""
SettlementService - orchestrates Balancer -> Debt Minimizer -> store.

- settle: ACTIVE -> SETTLED, fills cash-out/net and replaces debts
- preview_settlement: same computation, nothing persisted
- reopen_session: SETTLED -> ACTIVE, transfers kept as evidence
- mark_debt_settled: records (partial) payment and mirrors it as a transfer
  so a later re-settlement nets it out automatically
"""

import logging
from datetime import datetime, timezone
from typing import List, Mapping

from app.core.errors import AlreadySettledError, NotFoundError, SessionNotSettledError
from app.models.session import BalanceMode, Debt, DirectTransfer, PokerSession, SessionStatus
from app.services import balancer
from app.services.debt_minimizer import minimize_debts
from app.services.session_service import SessionService

logger = logging.getLogger(__name__)

DEBT_SETTLEMENT_NOTE = "Debt settlement"


class SettlementService:
    def __init__(self, session_service: SessionService):
        self.session_service = session_service

    async def settle(
        self,
        numeric_id: str,
        cash_outs: Mapping[str, int],
        mode: BalanceMode = BalanceMode.MAX_WINNER,
    ) -> PokerSession:
        session = await self.session_service.get_session(numeric_id)
        if session.status != SessionStatus.ACTIVE:
            raise AlreadySettledError(f"Session already settled: {numeric_id}")

        players = balancer.balance(session.players, cash_outs, mode, strict=True)
        debts = minimize_debts(players, session.transfers)

        updated = await self.session_service.commit(session, {
            "status": SessionStatus.SETTLED.value,
            "players": players,
            "debts": debts,
            "settled_at": datetime.now(timezone.utc),
        })
        logger.info("Session %s settled with %s debts", numeric_id, len(debts))
        return updated

    def preview_settlement(
        self,
        session: PokerSession,
        cash_outs: Mapping[str, int],
        mode: BalanceMode = BalanceMode.MAX_WINNER,
    ) -> List[Debt]:
        """What-if debts for the UI; missing cash-outs count as 0."""
        players = balancer.balance(session.players, cash_outs, mode, strict=False)
        return minimize_debts(players, session.transfers)

    async def reopen_session(self, numeric_id: str) -> PokerSession:
        session = await self.session_service.get_session(numeric_id)
        if session.status != SessionStatus.SETTLED:
            raise SessionNotSettledError(
                f"Session is not settled, cannot reopen: {numeric_id}"
            )

        players = [
            p.model_copy(update={"cash_out_cents": 0, "net_cents": 0})
            for p in session.players
        ]
        updated = await self.session_service.commit(session, {
            "status": SessionStatus.ACTIVE.value,
            "players": players,
            "debts": [],
            "settled_at": None,
        })
        logger.info(
            "Session reopened: %s, transfers preserved: %s",
            numeric_id, len(session.transfers),
        )
        return updated

    async def mark_debt_settled(
        self,
        numeric_id: str,
        debt_id: str,
        settled_amount_cents: int,
    ) -> PokerSession:
        session = await self.session_service.get_session(numeric_id)
        debt = session.find_debt(debt_id)
        if debt is None:
            raise NotFoundError(f"Debt not found: {debt_id}")

        actual = min(settled_amount_cents, debt.open_amount_cents())
        if actual <= 0:
            return session

        new_settled = debt.settled_amount_cents + actual
        debts = [
            d.model_copy(update={
                "settled_amount_cents": new_settled,
                "settled": new_settled >= d.amount_cents,
            })
            if d.debt_id == debt_id else d
            for d in session.debts
        ]
        transfer = DirectTransfer(
            from_player_id=debt.from_player_id,
            to_player_id=debt.to_player_id,
            amount_cents=actual,
            note=DEBT_SETTLEMENT_NOTE,
        )

        updated = await self.session_service.commit(session, {
            "debts": debts,
            "transfers": [*session.transfers, transfer],
        })
        logger.info(
            "Debt settled: %s -> %s = %s, recorded as transfer",
            debt.from_player_id, debt.to_player_id, actual,
        )
        return updated

    def calculate_diff(self, session: PokerSession, cash_outs: Mapping[str, int]) -> int:
        return balancer.calculate_diff(session.players, cash_outs)
