"""
Ledger - append-only record of buy-ins, rebuys and direct transfers.

Every function here is pure: it validates against a session snapshot and
returns new lists for the caller to commit. Nothing touches the store.
"""

from typing import List, Optional, Tuple

from app.core.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from app.models.session import (
    DirectTransfer,
    EntryType,
    LedgerEntry,
    Player,
    PokerSession,
    SessionStatus,
)


def ensure_active(session: PokerSession, action: str) -> None:
    """Players and transfers are only mutable while the session is ACTIVE."""
    if session.status != SessionStatus.ACTIVE:
        raise InvalidStateError(f"Cannot {action} in settled session {session.numeric_id}")


def require_player(session: PokerSession, player_id: str, role: str = "Player") -> Player:
    player = session.find_player(player_id)
    if player is None:
        raise InvalidArgumentError(f"{role} not found: {player_id}")
    return player


def record_buy_in(
    session: PokerSession,
    name: str,
    initial_buy_in_cents: int,
    user_id: Optional[str] = None,
) -> Tuple[List[Player], List[LedgerEntry]]:
    """Seat a new player and log the initial buy-in."""
    ensure_active(session, "add player")

    name = name.strip()
    if not name:
        raise InvalidArgumentError("Player name must not be empty")
    if initial_buy_in_cents < 0:
        raise InvalidArgumentError(
            f"Buy-in must be non-negative: {initial_buy_in_cents}"
        )

    player = Player(name=name, buy_in_cents=initial_buy_in_cents, user_id=user_id)
    entry = LedgerEntry(
        player_id=player.player_id,
        entry_type=EntryType.BUY_IN,
        amount_cents=initial_buy_in_cents,
    )
    return [*session.players, player], [*session.ledger, entry]


def record_rebuy(
    session: PokerSession,
    player_id: str,
    amount_cents: int,
) -> Tuple[List[Player], List[LedgerEntry]]:
    """Increase a player's buy-in and log the rebuy."""
    ensure_active(session, "rebuy")
    require_player(session, player_id)
    if amount_cents <= 0:
        raise InvalidArgumentError(f"Rebuy amount must be positive: {amount_cents}")

    players = [
        p.model_copy(update={"buy_in_cents": p.buy_in_cents + amount_cents})
        if p.player_id == player_id else p
        for p in session.players
    ]
    entry = LedgerEntry(
        player_id=player_id,
        entry_type=EntryType.REBUY,
        amount_cents=amount_cents,
    )
    return players, [*session.ledger, entry]


def record_transfer(
    session: PokerSession,
    from_player_id: str,
    to_player_id: str,
    amount_cents: int,
    note: Optional[str] = None,
) -> List[DirectTransfer]:
    """Append a side payment between two seated players."""
    ensure_active(session, "add transfer")
    require_player(session, from_player_id, "From player")
    require_player(session, to_player_id, "To player")

    if from_player_id == to_player_id:
        raise InvalidArgumentError("Cannot transfer to self")
    if amount_cents <= 0:
        raise InvalidArgumentError("Transfer amount must be positive")

    transfer = DirectTransfer(
        from_player_id=from_player_id,
        to_player_id=to_player_id,
        amount_cents=amount_cents,
        note=note,
    )
    return [*session.transfers, transfer]


def remove_transfer(session: PokerSession, transfer_id: str) -> List[DirectTransfer]:
    ensure_active(session, "remove transfer")
    if session.find_transfer(transfer_id) is None:
        raise NotFoundError(f"Transfer not found: {transfer_id}")
    return [t for t in session.transfers if t.transfer_id != transfer_id]


def total_buy_in_cents(players: List[Player]) -> int:
    return sum(p.buy_in_cents for p in players)
