"""
Settlement resolution shared by every format.

Pairwise formats (Nassau, Match Play) hand in bilateral outcomes, which are
netted per player pair into a single transfer that still itemizes each
contributing bet. Pool formats (Skins, Wolf) hand in per-player net
contributions, which are matched largest debtor to largest creditor.

All arithmetic happens in integer cents so the result is exactly zero-sum.
"""

from __future__ import annotations

import math
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from wager.logic.types import BreakdownItem, Settlement

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

CENT = Decimal("0.01")
CENTS_PER_UNIT = 100


def to_cents(amount: Decimal | Fraction | int) -> int:
    """Convert a money amount to whole cents, rounding half away from zero."""
    if isinstance(amount, Decimal):
        return int((amount * CENTS_PER_UNIT).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    value = Fraction(amount) * CENTS_PER_UNIT
    rounded = math.floor(abs(value) + Fraction(1, 2))
    return rounded if value >= 0 else -rounded


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / CENTS_PER_UNIT).quantize(CENT)


def split_cents(total: int, recipients: Iterable[str]) -> dict[str, int]:
    """
    Split whole cents evenly, rounding each share down.

    The leftover cents go one each to the first recipients, so callers pass
    recipients in seat order.
    """
    ordered = list(recipients)
    if not ordered:
        return {}
    share, remainder = divmod(total, len(ordered))
    return {pid: share + (1 if i < remainder else 0) for i, pid in enumerate(ordered)}


class BilateralOutcome(BaseModel):
    """Resolved result of one bet between two players.

    Positive ``amount_a_owes_b`` means player_a pays, negative means player_b pays.
    """

    model_config = ConfigDict(frozen=True)

    player_a: str
    player_b: str
    amount_a_owes_b: Decimal
    label: str


def resolve_pairwise(outcomes: Iterable[BilateralOutcome]) -> list[Settlement]:
    """
    Net bilateral outcomes into one transfer per player pair.

    Every outcome keeps its own breakdown line, pushes included, so the
    caller can show "Front 9: -$5, Front Press #1: $10" under one transfer.
    Pairs that net to zero produce no transfer.
    """
    orientation: dict[frozenset[str], tuple[str, str]] = {}
    lines: dict[frozenset[str], list[tuple[str, int]]] = defaultdict(list)

    for outcome in outcomes:
        key = frozenset((outcome.player_a, outcome.player_b))
        first, _ = orientation.setdefault(key, (outcome.player_a, outcome.player_b))
        cents = to_cents(outcome.amount_a_owes_b)
        if outcome.player_a != first:
            cents = -cents
        lines[key].append((outcome.label, cents))

    settlements: list[Settlement] = []
    for key, (first, second) in orientation.items():
        pair_lines = lines[key]
        net = sum(cents for _, cents in pair_lines)
        if net == 0:
            continue
        payer, payee, sign = (first, second, 1) if net > 0 else (second, first, -1)
        settlements.append(
            Settlement(
                from_player=payer,
                to_player=payee,
                amount=from_cents(abs(net)),
                breakdown=tuple(BreakdownItem(label=label, amount=from_cents(sign * cents)) for label, cents in pair_lines),
            )
        )
    return settlements


def resolve_pool(
    contributions: Mapping[str, Decimal | Fraction],
    label: str,
    sources: Mapping[str, str] | None = None,
) -> list[Settlement]:
    """
    Turn per-player net results into the fewest transfers.

    ``contributions`` maps player id to net winnings (negative = owes) and
    must be ordered by seat; seat order breaks every tie. Amounts are rounded
    to cents first and any rounding remainder is absorbed by the largest
    balance so the transfers stay zero-sum.

    ``sources`` describes what each player's balance came from (skins won,
    points scored). When given, every breakdown line names the payer's and
    the payee's source, e.g. "Skins: 1 vs 3".
    """
    rank = {pid: i for i, pid in enumerate(contributions)}
    balances = {pid: to_cents(value) for pid, value in contributions.items()}

    residual = sum(balances.values())
    if residual and balances:
        largest = max(balances, key=lambda pid: (abs(balances[pid]), -rank[pid]))
        balances[largest] -= residual

    debtors = {pid: -cents for pid, cents in balances.items() if cents < 0}
    creditors = {pid: cents for pid, cents in balances.items() if cents > 0}

    settlements: list[Settlement] = []
    while debtors and creditors:
        debtor = max(debtors, key=lambda pid: (debtors[pid], -rank[pid]))
        creditor = max(creditors, key=lambda pid: (creditors[pid], -rank[pid]))
        cents = min(debtors[debtor], creditors[creditor])
        amount = from_cents(cents)
        line = label if sources is None else f"{label}: {sources[debtor]} vs {sources[creditor]}"
        settlements.append(
            Settlement(
                from_player=debtor,
                to_player=creditor,
                amount=amount,
                breakdown=(BreakdownItem(label=line, amount=amount),),
            )
        )
        debtors[debtor] -= cents
        creditors[creditor] -= cents
        if debtors[debtor] == 0:
            del debtors[debtor]
        if creditors[creditor] == 0:
            del creditors[creditor]
    return settlements


def net_owed(settlements: Iterable[Settlement]) -> dict[str, Decimal]:
    """Amount each player owes minus the amount owed to them (negative = collects)."""
    totals: dict[str, Decimal] = defaultdict(Decimal)
    for s in settlements:
        totals[s.from_player] += s.amount
        totals[s.to_player] -= s.amount
    return dict(totals)
