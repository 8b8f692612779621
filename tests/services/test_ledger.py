import pytest

from app.core.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from app.models.session import EntryType, Player, PokerSession, SessionStatus
from app.services import ledger


@pytest.fixture
def session() -> PokerSession:
    return PokerSession(
        numeric_id="123456",
        stakes="1/2",
        players=[
            Player(player_id="alice", name="Alice", buy_in_cents=10000),
            Player(player_id="bob", name="Bob", buy_in_cents=5000),
        ],
    )


def test_record_buy_in_appends_player_and_entry(session):
    players, entries = ledger.record_buy_in(session, "  Carol  ", 20000, user_id="u-1")

    assert [p.name for p in players] == ["Alice", "Bob", "Carol"]
    carol = players[-1]
    assert carol.buy_in_cents == 20000
    assert carol.user_id == "u-1"
    assert len(entries) == 1
    assert entries[0].player_id == carol.player_id
    assert entries[0].entry_type == EntryType.BUY_IN
    assert entries[0].amount_cents == 20000
    # snapshot untouched
    assert len(session.players) == 2


def test_record_buy_in_allows_zero(session):
    players, _ = ledger.record_buy_in(session, "Dan", 0)

    assert players[-1].buy_in_cents == 0


@pytest.mark.parametrize("name, amount", [("   ", 100), ("Dan", -1)])
def test_record_buy_in_rejects_bad_input(session, name, amount):
    with pytest.raises(InvalidArgumentError):
        ledger.record_buy_in(session, name, amount)


def test_record_rebuy_increases_buy_in(session):
    players, entries = ledger.record_rebuy(session, "bob", 2500)

    assert players[1].buy_in_cents == 7500
    assert players[0].buy_in_cents == 10000
    assert entries[-1].entry_type == EntryType.REBUY
    assert entries[-1].amount_cents == 2500
    assert session.players[1].buy_in_cents == 5000


def test_record_rebuy_rejects_unknown_player_and_non_positive(session):
    with pytest.raises(InvalidArgumentError):
        ledger.record_rebuy(session, "ghost", 100)
    with pytest.raises(InvalidArgumentError):
        ledger.record_rebuy(session, "bob", 0)


def test_record_transfer(session):
    transfers = ledger.record_transfer(session, "alice", "bob", 3000, note="cash")

    assert len(transfers) == 1
    assert transfers[0].from_player_id == "alice"
    assert transfers[0].to_player_id == "bob"
    assert transfers[0].amount_cents == 3000
    assert transfers[0].note == "cash"


@pytest.mark.parametrize(
    "from_id, to_id, amount",
    [
        ("alice", "alice", 100),
        ("alice", "ghost", 100),
        ("ghost", "bob", 100),
        ("alice", "bob", 0),
        ("alice", "bob", -5),
    ],
    ids=["self", "unknown_to", "unknown_from", "zero", "negative"],
)
def test_record_transfer_rejects_invalid(session, from_id, to_id, amount):
    with pytest.raises(InvalidArgumentError):
        ledger.record_transfer(session, from_id, to_id, amount)


def test_remove_transfer(session):
    transfers = ledger.record_transfer(session, "alice", "bob", 3000)
    session = session.model_copy(update={"transfers": transfers})

    remaining = ledger.remove_transfer(session, transfers[0].transfer_id)

    assert remaining == []


def test_remove_missing_transfer_raises(session):
    with pytest.raises(NotFoundError):
        ledger.remove_transfer(session, "nope")


def test_settled_session_is_read_only(session):
    settled = session.model_copy(update={"status": SessionStatus.SETTLED})

    with pytest.raises(InvalidStateError):
        ledger.record_buy_in(settled, "Carol", 100)
    with pytest.raises(InvalidStateError):
        ledger.record_rebuy(settled, "bob", 100)
    with pytest.raises(InvalidStateError):
        ledger.record_transfer(settled, "alice", "bob", 100)
    with pytest.raises(InvalidStateError):
        ledger.remove_transfer(settled, "anything")
