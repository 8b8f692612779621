"""
Balancer - turns reported cash-outs into nets that sum to exactly zero.

Algorithm:
1. net = cash_out - buy_in for every player
2. diff = sum(buy_in) - sum(cash_out)
3. diff == 0: the house balanced, nets stand as they are
4. diff != 0: hand the imbalance to winners using the requested policy
   - MAX_WINNER: the single biggest winner absorbs all of it
   - PROPORTIONAL: winners share it by winnings (largest remainder method)

All arithmetic is integer or exact rational; no floats.
"""

import logging
import math
from fractions import Fraction
from typing import Dict, List, Mapping

from app.core.errors import (
    InvalidArgumentError,
    MissingCashOutError,
    SettlementInvariantError,
)
from app.models.session import BalanceMode, Player

logger = logging.getLogger(__name__)


def calculate_diff(players: List[Player], cash_outs: Mapping[str, int]) -> int:
    """sum(buy_in) - sum(cash_outs.values()). Positive means chips went missing."""
    return sum(p.buy_in_cents for p in players) - sum(cash_outs.values())


def apply_cash_outs(
    players: List[Player],
    cash_outs: Mapping[str, int],
    strict: bool = True,
) -> List[Player]:
    """
    Copy players with cash_out_cents and raw net_cents filled in.

    strict=True (settlement): every player needs an entry and no entry may
    reference an unknown player. strict=False (preview): missing entries
    count as 0 and unknown ids are ignored.
    """
    for player_id, amount in cash_outs.items():
        if amount < 0:
            raise InvalidArgumentError(
                f"Cash-out must be non-negative: {player_id}={amount}"
            )

    if strict:
        known = {p.player_id for p in players}
        unknown = [pid for pid in cash_outs if pid not in known]
        if unknown:
            raise InvalidArgumentError(
                f"Cash-out for unknown player: {', '.join(sorted(unknown))}"
            )

    result = []
    for player in players:
        if player.player_id in cash_outs:
            cash_out = cash_outs[player.player_id]
        elif strict:
            raise MissingCashOutError(player.player_id, player.name)
        else:
            cash_out = 0
        result.append(
            player.model_copy(update={
                "cash_out_cents": cash_out,
                "net_cents": cash_out - player.buy_in_cents,
            })
        )
    return result


def max_winner_adjustments(players: List[Player], diff: int) -> Dict[str, int]:
    """Whole diff to the player with the largest net; ties go to the first one."""
    if not players:
        raise SettlementInvariantError("No players to absorb the difference")

    # max() returns the first maximal element in input order
    winner = max(players, key=lambda p: p.net_cents)
    return {winner.player_id: diff}


def largest_remainder_adjustments(winners: List[Player], diff: int) -> Dict[str, int]:
    """
    Split diff across winners in proportion to their winnings.

    quota_i = net_i / total * diff, base_i = floor(quota_i) (ceil when diff < 0).
    The |k| = |diff - sum(base)| leftover units go one each to the winners
    with the largest remainders (smallest when diff < 0), ties in input order.
    """
    total = sum(w.net_cents for w in winners)
    if total <= 0:
        raise SettlementInvariantError("Proportional split needs positive winnings")

    quotas = [Fraction(w.net_cents * diff, total) for w in winners]
    if diff >= 0:
        bases = [math.floor(q) for q in quotas]
    else:
        bases = [math.ceil(q) for q in quotas]
    remainders = [q - b for q, b in zip(quotas, bases)]

    leftover = diff - sum(bases)
    step = 1 if diff >= 0 else -1
    order = sorted(
        range(len(winners)),
        key=lambda i: -remainders[i] if diff >= 0 else remainders[i],
    )

    adjustments = {w.player_id: b for w, b in zip(winners, bases)}
    for idx in order[:abs(leftover)]:
        adjustments[winners[idx].player_id] += step

    distributed = sum(adjustments.values())
    if distributed != diff:
        raise SettlementInvariantError(
            f"Largest remainder method failed: expected {diff}, got {distributed}"
        )
    return adjustments


def proportional_adjustments(players: List[Player], diff: int) -> Dict[str, int]:
    winners = [p for p in players if p.net_cents > 0]
    if not winners:
        # Nobody won: fall back to the max winner over everyone
        return max_winner_adjustments(players, diff)
    return largest_remainder_adjustments(winners, diff)


def balance(
    players: List[Player],
    cash_outs: Mapping[str, int],
    mode: BalanceMode = BalanceMode.MAX_WINNER,
    strict: bool = True,
) -> List[Player]:
    """
    Return new players whose net_cents sum to exactly zero.

    Raises MissingCashOutError (strict) if a player has no cash-out.
    """
    with_nets = apply_cash_outs(players, cash_outs, strict=strict)

    total_buy_in = sum(p.buy_in_cents for p in with_nets)
    total_cash_out = sum(p.cash_out_cents for p in with_nets)
    diff = total_buy_in - total_cash_out
    logger.info(
        "Settlement diff: %s (buy-in: %s, cash-out: %s, mode: %s)",
        diff, total_buy_in, total_cash_out, BalanceMode(mode).value,
    )

    if diff == 0:
        return with_nets

    if BalanceMode(mode) == BalanceMode.PROPORTIONAL:
        adjustments = proportional_adjustments(with_nets, diff)
    else:
        adjustments = max_winner_adjustments(with_nets, diff)

    balanced = [
        p.model_copy(update={"net_cents": p.net_cents + adjustments[p.player_id]})
        if p.player_id in adjustments else p
        for p in with_nets
    ]

    if sum(p.net_cents for p in balanced) != 0:
        raise SettlementInvariantError("Balanced nets do not sum to zero")
    return balanced
