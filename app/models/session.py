"""
Session model - one shared-pot cash game.

Design principles:
- All amounts in integer cents (minor currency units), never floats
- Embedded players, ledger entries, transfers and debts live in one document
- Ledger entries and transfers are immutable once created
- Debts are replaced wholesale on every settlement
- Status: ACTIVE -> SETTLED (settle) -> ACTIVE (reopen)
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.base import MongoModel, _utcnow, new_id


class SessionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SETTLED = "SETTLED"


class BalanceMode(str, Enum):
    MAX_WINNER = "MAX_WINNER"
    PROPORTIONAL = "PROPORTIONAL"


class EntryType(str, Enum):
    BUY_IN = "BUY_IN"
    REBUY = "REBUY"


# Embedded documents don't need MongoModel (no separate _id)
class Player(BaseModel):
    """
    A seat in the session.

    Invariants:
    - buy_in_cents >= 0 and only ever grows (buy-in, rebuy)
    - cash_out_cents / net_cents are 0 until the session is settled
    """
    model_config = ConfigDict(use_enum_values=True)

    player_id: str = Field(default_factory=new_id)
    name: str
    buy_in_cents: int = 0
    cash_out_cents: int = 0
    net_cents: int = 0
    user_id: Optional[str] = None  # Optional link to an external user


class LedgerEntry(BaseModel):
    """Append-only record of a buy-in or rebuy."""
    model_config = ConfigDict(use_enum_values=True)

    entry_id: str = Field(default_factory=new_id)
    player_id: str
    entry_type: EntryType
    amount_cents: int
    timestamp: datetime = Field(default_factory=_utcnow)
    note: Optional[str] = None


class DirectTransfer(BaseModel):
    """Money that changed hands outside the pot: from_player paid to_player."""
    transfer_id: str = Field(default_factory=new_id)
    from_player_id: str
    to_player_id: str
    amount_cents: int
    timestamp: datetime = Field(default_factory=_utcnow)
    note: Optional[str] = None


class Debt(BaseModel):
    """
    Settling payment: from_player owes to_player amount_cents.

    Invariants:
    - 0 <= settled_amount_cents <= amount_cents
    - settled iff settled_amount_cents >= amount_cents
    """
    debt_id: str = Field(default_factory=new_id)
    from_player_id: str
    to_player_id: str
    amount_cents: int
    settled: bool = False
    settled_amount_cents: int = 0

    def open_amount_cents(self) -> int:
        """How much remains unsettled."""
        return self.amount_cents - self.settled_amount_cents


class PokerSession(MongoModel):
    numeric_id: str
    status: SessionStatus = SessionStatus.ACTIVE
    stakes: str

    players: List[Player] = []
    ledger: List[LedgerEntry] = []
    transfers: List[DirectTransfer] = []
    debts: List[Debt] = []

    settled_at: Optional[datetime] = None
    version: int = 1

    def find_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.player_id == player_id), None)

    def find_debt(self, debt_id: str) -> Optional[Debt]:
        return next((d for d in self.debts if d.debt_id == debt_id), None)

    def find_transfer(self, transfer_id: str) -> Optional[DirectTransfer]:
        return next((t for t in self.transfers if t.transfer_id == transfer_id), None)
