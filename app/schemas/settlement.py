from typing import Dict, List

from pydantic import BaseModel

from app.models.session import BalanceMode, Debt, DirectTransfer


class SettleRequest(BaseModel):
    """Reported cash-outs keyed by player_id, in cents."""
    cash_outs: Dict[str, int]
    balance_mode: BalanceMode = BalanceMode.MAX_WINNER


class DiffRequest(BaseModel):
    cash_outs: Dict[str, int]


class DiffResponse(BaseModel):
    diff_cents: int


class PreviewResponse(BaseModel):
    debts: List[Debt]
    transfers: List[DirectTransfer]


class DebtSettleRequest(BaseModel):
    """Request body to (partially) settle a debt."""
    debt_id: str
    settled_amount_cents: int
