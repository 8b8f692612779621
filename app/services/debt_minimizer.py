"""
Debt minimizer - reduce balanced nets plus side transfers to settling payments.

Algorithm:
1. Start from each player's net (winners positive, losers negative)
2. Consolidate direct transfers into one directed edge per pair
3. Apply edges: A paid B outside the pot, so A is owed more and B owes less
4. Greedy two-pointer sweep over debtors and creditors in player order

The sweep emits at most n - 1 debts for n non-zero balances.
"""

import logging
from typing import Dict, List, Tuple

from app.core.errors import SettlementInvariantError
from app.models.session import Debt, DirectTransfer, Player

logger = logging.getLogger(__name__)

Edge = Tuple[str, str]


def consolidate_transfers(transfers: List[DirectTransfer]) -> Dict[Edge, int]:
    """
    Net all transfers into a directed pairwise matrix.

    A->B of x against an existing B->A of y leaves A->B x-y (x >= y, dropped
    when equal) or B->A y-x; otherwise A->B amounts accumulate.
    """
    matrix: Dict[Edge, int] = {}

    for transfer in transfers:
        key = (transfer.from_player_id, transfer.to_player_id)
        reverse_key = (transfer.to_player_id, transfer.from_player_id)
        amount = transfer.amount_cents

        if reverse_key in matrix:
            existing = matrix[reverse_key]
            if amount >= existing:
                del matrix[reverse_key]
                if amount > existing:
                    matrix[key] = amount - existing
            else:
                matrix[reverse_key] = existing - amount
        else:
            matrix[key] = matrix.get(key, 0) + amount

    return matrix


def adjust_balances(players: List[Player], matrix: Dict[Edge, int]) -> Dict[str, int]:
    """Player nets shifted by consolidated transfers, in player order."""
    balances = {p.player_id: p.net_cents for p in players}
    for (from_id, to_id), amount in matrix.items():
        balances[from_id] = balances.get(from_id, 0) + amount
        balances[to_id] = balances.get(to_id, 0) - amount
    return balances


def settle_balances(balances: Dict[str, int]) -> List[Debt]:
    """Greedy two-pointer matching of debtors against creditors."""
    if sum(balances.values()) != 0:
        raise SettlementInvariantError(
            f"Balances must sum to zero, got {sum(balances.values())}"
        )

    debtors = [[pid, -amount] for pid, amount in balances.items() if amount < 0]
    creditors = [[pid, amount] for pid, amount in balances.items() if amount > 0]

    debts: List[Debt] = []
    debtor_idx = 0
    creditor_idx = 0

    while debtor_idx < len(debtors) and creditor_idx < len(creditors):
        debtor = debtors[debtor_idx]
        creditor = creditors[creditor_idx]

        amount = min(debtor[1], creditor[1])
        if amount > 0:
            debts.append(Debt(
                from_player_id=debtor[0],
                to_player_id=creditor[0],
                amount_cents=amount,
            ))

        debtor[1] -= amount
        creditor[1] -= amount

        if debtor[1] == 0:
            debtor_idx += 1
        if creditor[1] == 0:
            creditor_idx += 1

    owed = sum(amount for amount in balances.values() if amount > 0)
    if sum(d.amount_cents for d in debts) != owed:
        raise SettlementInvariantError("Debts do not cover creditor balances")
    return debts


def minimize_debts(players: List[Player], transfers: List[DirectTransfer]) -> List[Debt]:
    """Minimum-count settling payments for balanced players, net of transfers."""
    matrix = consolidate_transfers(transfers)
    logger.debug("Transfer matrix after consolidation: %s", matrix)

    balances = adjust_balances(players, matrix)
    logger.debug("Adjusted balances: %s", balances)

    return settle_balances(balances)
