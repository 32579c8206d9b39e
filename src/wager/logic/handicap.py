"""
Handicap stroke allocation.

The higher-handicap player in a pairing receives strokes equal to the
handicap difference (80% of it in partial mode), one per hole, starting
with the hardest holes. Hole difficulty comes from the course stroke index
when one is supplied; otherwise par is used as a coarse proxy, with lower
par treated as harder and ties broken by hole number.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, NamedTuple

from wager.logic.enums import HandicapMode

if TYPE_CHECKING:
    from collections.abc import Sequence

    from wager.logic.state import Player

PARTIAL_ALLOWANCE = Decimal("0.8")

StrokeTable = dict[int, int]


class StrokeAllocation(NamedTuple):
    """Strokes given to each player of a pairing on one hole."""

    strokes_to_a: int
    strokes_to_b: int


def strokes_received(handicap: float, opponent_handicap: float, mode: HandicapMode) -> int:
    """
    Total strokes a player receives against an opponent for the round.

    Returns 0 for the lower (or equal) handicap and in scratch mode.
    Rounds half up, so a 2.5 difference gives 3 strokes.
    """
    if mode == HandicapMode.NONE:
        return 0
    diff = Decimal(str(handicap)) - Decimal(str(opponent_handicap))
    if diff <= 0:
        return 0
    if mode == HandicapMode.PARTIAL:
        diff *= PARTIAL_ALLOWANCE
    return int(diff.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def hole_difficulty_order(
    hole_pars: Sequence[int],
    stroke_index: Sequence[int] | None = None,
) -> list[int]:
    """Hole numbers ordered hardest first."""
    holes = range(1, len(hole_pars) + 1)
    if stroke_index is not None:
        return sorted(holes, key=lambda hole: (stroke_index[hole - 1], hole))
    return sorted(holes, key=lambda hole: (hole_pars[hole - 1], hole))


def allocate_strokes_to_holes(
    strokes: int,
    hole_pars: Sequence[int],
    stroke_index: Sequence[int] | None = None,
) -> StrokeTable:
    """
    Spread a stroke allotment over the round.

    One stroke per hole hardest first; allotments larger than the number
    of holes wrap around and give a second stroke on the hardest holes.
    """
    table: StrokeTable = dict.fromkeys(range(1, len(hole_pars) + 1), 0)
    if strokes <= 0 or not table:
        return table

    order = hole_difficulty_order(hole_pars, stroke_index)
    for i in range(strokes):
        table[order[i % len(order)]] += 1
    return table


def match_stroke_tables(  # noqa: PLR0913
    handicap_a: float,
    handicap_b: float,
    mode: HandicapMode,
    hole_pars: Sequence[int],
    stroke_index: Sequence[int] | None = None,
) -> tuple[StrokeTable, StrokeTable]:
    """Per-hole strokes for both players of a pairing; only the higher handicap gets any."""
    return (
        allocate_strokes_to_holes(strokes_received(handicap_a, handicap_b, mode), hole_pars, stroke_index),
        allocate_strokes_to_holes(strokes_received(handicap_b, handicap_a, mode), hole_pars, stroke_index),
    )


def allocate_strokes(  # noqa: PLR0913
    handicap_a: float,
    handicap_b: float,
    hole: int,
    hole_pars: Sequence[int],
    mode: HandicapMode,
    stroke_index: Sequence[int] | None = None,
) -> StrokeAllocation:
    """
    Strokes each player of a pairing receives on a single hole.

    Symmetric: swapping the handicaps swaps the result.
    """
    table_a, table_b = match_stroke_tables(handicap_a, handicap_b, mode, hole_pars, stroke_index)
    return StrokeAllocation(strokes_to_a=table_a.get(hole, 0), strokes_to_b=table_b.get(hole, 0))


def field_stroke_tables(
    players: Sequence[Player],
    mode: HandicapMode,
    hole_pars: Sequence[int],
    stroke_index: Sequence[int] | None = None,
) -> dict[str, StrokeTable]:
    """
    Per-hole strokes for a group, played "off the low".

    Every player is paired against the lowest handicap in the group, so the
    best player gets no strokes and everyone else gets the difference.
    """
    if not players:
        return {}
    low = min(p.handicap for p in players)
    return {
        p.id: allocate_strokes_to_holes(strokes_received(p.handicap, low, mode), hole_pars, stroke_index)
        for p in players
    }


def net_score(gross: int, strokes: int) -> int:
    """Gross minus handicap strokes, never below zero."""
    return max(gross - strokes, 0)
