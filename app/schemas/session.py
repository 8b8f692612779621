from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.session import (
    Debt,
    DirectTransfer,
    LedgerEntry,
    Player,
    PokerSession,
    SessionStatus,
)


class SessionCreate(BaseModel):
    """Request body to open a new session."""
    stakes: str = Field(..., min_length=1, max_length=100)


class PlayerCreate(BaseModel):
    name: str = Field(..., max_length=100)
    initial_buy_in_cents: int = 0
    user_id: Optional[str] = None


class RebuyRequest(BaseModel):
    player_id: str
    amount_cents: int


class TransferCreate(BaseModel):
    from_player_id: str
    to_player_id: str
    amount_cents: int
    note: Optional[str] = Field(default=None, max_length=200)


class SessionResponse(BaseModel):
    """Session response schema."""
    id: str
    numeric_id: str
    status: SessionStatus
    stakes: str
    players: List[Player]
    ledger: List[LedgerEntry]
    transfers: List[DirectTransfer]
    debts: List[Debt]
    created_at: datetime
    updated_at: datetime
    settled_at: Optional[datetime] = None
    version: int

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_session(cls, session: PokerSession) -> "SessionResponse":
        data = session.model_dump(exclude={"id"})
        return cls(id=str(session.id), **data)


class SessionCreateResponse(BaseModel):
    numeric_id: str
    session: SessionResponse
