from fastapi import APIRouter, Depends, status

from app.api.deps import get_session_service, get_settlement_service
from app.api.errors import http_error
from app.core.errors import PotLogError
from app.schemas.session import (
    PlayerCreate,
    RebuyRequest,
    SessionCreate,
    SessionCreateResponse,
    SessionResponse,
    TransferCreate,
)
from app.schemas.settlement import (
    DebtSettleRequest,
    DiffRequest,
    DiffResponse,
    PreviewResponse,
    SettleRequest,
)
from app.services.session_service import SessionService
from app.services.settlement_service import SettlementService

router = APIRouter()


@router.post("/", response_model=SessionCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    session_in: SessionCreate,
    sessions: SessionService = Depends(get_session_service)
):
    """Open a new session with a fresh 6-digit code"""
    try:
        session = await sessions.create_session(session_in.stakes)
    except PotLogError as exc:
        raise http_error(exc) from exc
    return SessionCreateResponse(
        numeric_id=session.numeric_id,
        session=SessionResponse.from_session(session)
    )


@router.get("/{numeric_id}", response_model=SessionResponse)
async def get_session(
    numeric_id: str,
    sessions: SessionService = Depends(get_session_service)
):
    """Get a session by its code"""
    try:
        session = await sessions.get_session(numeric_id)
    except PotLogError as exc:
        raise http_error(exc) from exc
    return SessionResponse.from_session(session)


@router.post("/{numeric_id}/players", response_model=SessionResponse)
async def add_player(
    numeric_id: str,
    payload: PlayerCreate,
    sessions: SessionService = Depends(get_session_service)
):
    """Seat a player with an initial buy-in"""
    try:
        session = await sessions.add_player(
            numeric_id, payload.name, payload.initial_buy_in_cents, payload.user_id
        )
    except PotLogError as exc:
        raise http_error(exc) from exc
    return SessionResponse.from_session(session)


@router.post("/{numeric_id}/rebuy", response_model=SessionResponse)
async def rebuy(
    numeric_id: str,
    payload: RebuyRequest,
    sessions: SessionService = Depends(get_session_service)
):
    try:
        session = await sessions.rebuy(numeric_id, payload.player_id, payload.amount_cents)
    except PotLogError as exc:
        raise http_error(exc) from exc
    return SessionResponse.from_session(session)


@router.post("/{numeric_id}/transfers", response_model=SessionResponse)
async def add_transfer(
    numeric_id: str,
    payload: TransferCreate,
    sessions: SessionService = Depends(get_session_service)
):
    """Record money that changed hands outside the pot"""
    try:
        session = await sessions.add_transfer(
            numeric_id,
            payload.from_player_id,
            payload.to_player_id,
            payload.amount_cents,
            payload.note
        )
    except PotLogError as exc:
        raise http_error(exc) from exc
    return SessionResponse.from_session(session)


@router.delete("/{numeric_id}/transfers/{transfer_id}", response_model=SessionResponse)
async def remove_transfer(
    numeric_id: str,
    transfer_id: str,
    sessions: SessionService = Depends(get_session_service)
):
    try:
        session = await sessions.remove_transfer(numeric_id, transfer_id)
    except PotLogError as exc:
        raise http_error(exc) from exc
    return SessionResponse.from_session(session)


@router.post("/{numeric_id}/settle", response_model=SessionResponse)
async def settle_session(
    numeric_id: str,
    payload: SettleRequest,
    settlements: SettlementService = Depends(get_settlement_service)
):
    """Balance reported cash-outs and replace the debt list"""
    try:
        session = await settlements.settle(numeric_id, payload.cash_outs, payload.balance_mode)
    except PotLogError as exc:
        raise http_error(exc) from exc
    return SessionResponse.from_session(session)


@router.post("/{numeric_id}/preview", response_model=PreviewResponse)
async def preview_settlement(
    numeric_id: str,
    payload: SettleRequest,
    sessions: SessionService = Depends(get_session_service),
    settlements: SettlementService = Depends(get_settlement_service)
):
    """Debts that settling now would produce; nothing is saved"""
    try:
        session = await sessions.get_session(numeric_id)
        debts = settlements.preview_settlement(session, payload.cash_outs, payload.balance_mode)
    except PotLogError as exc:
        raise http_error(exc) from exc
    return PreviewResponse(debts=debts, transfers=session.transfers)


@router.post("/{numeric_id}/diff", response_model=DiffResponse)
async def calculate_diff(
    numeric_id: str,
    payload: DiffRequest,
    sessions: SessionService = Depends(get_session_service),
    settlements: SettlementService = Depends(get_settlement_service)
):
    try:
        session = await sessions.get_session(numeric_id)
    except PotLogError as exc:
        raise http_error(exc) from exc
    return DiffResponse(diff_cents=settlements.calculate_diff(session, payload.cash_outs))


@router.post("/{numeric_id}/reopen", response_model=SessionResponse)
async def reopen_session(
    numeric_id: str,
    settlements: SettlementService = Depends(get_settlement_service)
):
    """Undo a settlement; transfers are kept"""
    try:
        session = await settlements.reopen_session(numeric_id)
    except PotLogError as exc:
        raise http_error(exc) from exc
    return SessionResponse.from_session(session)


@router.post("/{numeric_id}/debts/settle", response_model=SessionResponse)
async def settle_debt(
    numeric_id: str,
    payload: DebtSettleRequest,
    settlements: SettlementService = Depends(get_settlement_service)
):
    """Mark a debt (partially) paid"""
    try:
        session = await settlements.mark_debt_settled(
            numeric_id, payload.debt_id, payload.settled_amount_cents
        )
    except PotLogError as exc:
        raise http_error(exc) from exc
    return SessionResponse.from_session(session)
