"""
Wolf scoring for exactly four players.

The wolf rotates each hole and declares before the hole is scored:
partner (wolf + one player vs. the other two, 1x), solo (wolf alone vs.
three, 2x) or blind (solo declared before any score is known, 3x).
Best net per side decides the hole. Every member of the winning side
gains the multiplier and the losing side gives up the same total, split
evenly, so each hole is zero sum. Points are kept as exact fractions.
"""

from __future__ import annotations

from fractions import Fraction
from typing import TYPE_CHECKING

import structlog

from wager.logic.enums import WOLF_MULTIPLIERS, WolfChoiceType, WolfOutcome
from wager.logic.exceptions import DuplicateWolfChoiceError, InvalidWolfChoiceError
from wager.logic.handicap import StrokeTable, field_stroke_tables, net_score
from wager.logic.settings import WolfSettings
from wager.logic.settlement import resolve_pool
from wager.logic.types import PlayerPoints, WolfHoleResult, WolfLiveStatus

if TYPE_CHECKING:
    from wager.logic.state import GameSnapshot, ScoreLedger, WolfChoice
    from wager.logic.types import Settlement

logger = structlog.get_logger()

SETTLEMENT_LABEL = "Wolf points"
LAST_PLACE_HOLES = (17, 18)
FULL_ROUND_HOLES = 18


def _wolf_settings(snapshot: GameSnapshot) -> WolfSettings:
    settings = snapshot.settings
    if not isinstance(settings, WolfSettings):
        raise ValueError(f"expected wolf settings, got {settings.type.value}")
    return settings


def wolf_rotation(snapshot: GameSnapshot) -> tuple[str, ...]:
    """Wolf order from settings, falling back to seat order."""
    settings = _wolf_settings(snapshot)
    if settings.wolf_order:
        return settings.wolf_order
    return tuple(p.id for p in snapshot.ordered_players)


def wolf_for_hole(
    rotation: tuple[str, ...],
    hole: int,
    point_totals: dict[str, Fraction] | None = None,
) -> str:
    """
    Player who is wolf on a hole.

    Rotates through the order one hole at a time. When point totals are
    given, holes 17 and 18 go to the player in last place; ties go to the
    player earliest in the rotation.
    """
    if point_totals is not None and hole in LAST_PLACE_HOLES:
        return min(rotation, key=lambda pid: (point_totals.get(pid, Fraction(0)), rotation.index(pid)))
    return rotation[(hole - 1) % len(rotation)]


def _uses_last_place(settings: WolfSettings) -> bool:
    return settings.last_place_wolf_finish and settings.num_holes == FULL_ROUND_HOLES


def hole_points(
    outcome: WolfOutcome,
    multiplier: int,
    wolf_side: tuple[str, ...],
    field_side: tuple[str, ...],
) -> dict[str, Fraction]:
    """Point movement for one hole; the values always sum to zero."""
    points = dict.fromkeys((*wolf_side, *field_side), Fraction(0))
    if outcome == WolfOutcome.PUSH:
        return points
    winners, losers = (wolf_side, field_side) if outcome == WolfOutcome.WOLF else (field_side, wolf_side)
    total = multiplier * len(winners)
    for pid in winners:
        points[pid] = Fraction(multiplier)
    for pid in losers:
        points[pid] = -Fraction(total, len(losers))
    return points


def _score_hole(
    hole: int,
    choice: WolfChoice,
    player_ids: list[str],
    ledger: ScoreLedger,
    tables: dict[str, StrokeTable],
) -> WolfHoleResult:
    wolf_side = (choice.wolf_id,) if choice.partner_id is None else (choice.wolf_id, choice.partner_id)
    field_side = tuple(pid for pid in player_ids if pid not in wolf_side)
    nets = {pid: net_score(ledger.get(pid, hole) or 0, tables[pid].get(hole, 0)) for pid in player_ids}
    wolf_best = min(nets[pid] for pid in wolf_side)
    field_best = min(nets[pid] for pid in field_side)

    if wolf_best < field_best:
        outcome = WolfOutcome.WOLF
    elif field_best < wolf_best:
        outcome = WolfOutcome.FIELD
    else:
        outcome = WolfOutcome.PUSH

    multiplier = WOLF_MULTIPLIERS[choice.choice]
    return WolfHoleResult(
        hole=hole,
        wolf_id=choice.wolf_id,
        choice=choice.choice,
        partner_id=choice.partner_id,
        wolf_side=wolf_side,
        field_side=field_side,
        wolf_best_net=wolf_best,
        field_best_net=field_best,
        outcome=outcome,
        multiplier=multiplier,
        points=hole_points(outcome, multiplier, wolf_side, field_side),
    )


def compute_status(snapshot: GameSnapshot) -> WolfLiveStatus:
    """
    Score holes in order until one is missing its declaration or a score.

    A missing declaration sets needs_wolf_choice and lists the players the
    current wolf may pick as partner.
    """
    settings = _wolf_settings(snapshot)
    players = snapshot.ordered_players
    player_ids = [p.id for p in players]
    rotation = wolf_rotation(snapshot)
    ledger = snapshot.ledger()
    tables = field_stroke_tables(players, settings.handicap_mode, settings.pars, settings.hole_handicap_ratings)
    choices = {(c.hole, c.wolf_id): c for c in snapshot.wolf_choices}
    last_place = _uses_last_place(settings)

    totals = dict.fromkeys(player_ids, Fraction(0))
    results: list[WolfHoleResult] = []
    current_wolf: str | None = None
    needs_choice = False
    partners: tuple[str, ...] = ()

    for hole in settings.holes:
        wolf = wolf_for_hole(rotation, hole, totals if last_place else None)
        current_wolf = wolf
        choice = choices.get((hole, wolf))
        if choice is None:
            needs_choice = snapshot.is_open
            partners = tuple(pid for pid in player_ids if pid != wolf) if needs_choice else ()
            break
        if not ledger.has_all(player_ids, hole):
            break
        result = _score_hole(hole, choice, player_ids, ledger, tables)
        for pid, delta in result.points.items():
            totals[pid] += delta
        results.append(result)
    else:
        current_wolf = None

    return WolfLiveStatus(
        hole_results=tuple(results),
        point_totals=tuple(PlayerPoints(player_id=pid, points=totals[pid]) for pid in player_ids),
        wolf_rotation=rotation,
        current_wolf_id=current_wolf,
        current_hole=ledger.highest_hole,
        is_round_complete=len(results) == settings.num_holes,
        needs_wolf_choice=needs_choice,
        available_partners=partners,
    )


def _totals_before(snapshot: GameSnapshot, hole: int) -> dict[str, Fraction]:
    totals = {p.id: Fraction(0) for p in snapshot.players}
    for result in compute_status(snapshot).hole_results:
        if result.hole >= hole:
            break
        for pid, delta in result.points.items():
            totals[pid] += delta
    return totals


def record_wolf_choice(snapshot: GameSnapshot, choice: WolfChoice) -> WolfChoice:
    """
    Check a wolf declaration against the rotation and declaration rules.

    Returns the choice unchanged when it is valid. Raises
    DuplicateWolfChoiceError when the hole already has a declaration and
    InvalidWolfChoiceError for every other violation.
    """
    settings = _wolf_settings(snapshot)
    if not snapshot.is_open:
        raise InvalidWolfChoiceError("round is no longer in progress")
    if choice.hole not in settings.holes:
        raise InvalidWolfChoiceError(f"hole {choice.hole} is not part of a {settings.num_holes}-hole round")
    if any(c.hole == choice.hole for c in snapshot.wolf_choices):
        raise DuplicateWolfChoiceError(f"wolf has already declared on hole {choice.hole}")

    rotation = wolf_rotation(snapshot)
    totals = _totals_before(snapshot, choice.hole) if _uses_last_place(settings) else None
    expected = wolf_for_hole(rotation, choice.hole, totals)
    if choice.wolf_id != expected:
        raise InvalidWolfChoiceError(f"player {choice.wolf_id} is not the wolf on hole {choice.hole}")

    player_ids = {p.id for p in snapshot.players}
    if choice.choice == WolfChoiceType.PARTNER:
        if choice.partner_id is None:
            raise InvalidWolfChoiceError("a partner choice must name the partner")
        if choice.partner_id == choice.wolf_id or choice.partner_id not in player_ids:
            raise InvalidWolfChoiceError(f"player {choice.partner_id} cannot partner the wolf")
    elif choice.partner_id is not None:
        raise InvalidWolfChoiceError(f"a {choice.choice.value} wolf cannot name a partner")

    if choice.choice == WolfChoiceType.BLIND:
        if not settings.blind_wolf:
            raise InvalidWolfChoiceError("blind wolf is not enabled for this game")
        if snapshot.ledger().has_any(player_ids, choice.hole):
            raise InvalidWolfChoiceError(f"blind wolf must be declared before any score on hole {choice.hole}")

    logger.debug("wolf choice accepted", hole=choice.hole, wolf_id=choice.wolf_id, choice=choice.choice.value)
    return choice


def _format_points(points: Fraction) -> str:
    if points.denominator == 1:
        return f"{points.numerator:+d}"
    return f"{float(points):+.2f}"


def compute_settlements(snapshot: GameSnapshot) -> list[Settlement]:
    """Convert point totals to money and settle the group as a pool."""
    settings = _wolf_settings(snapshot)
    status = compute_status(snapshot)
    value = Fraction(settings.point_value)
    contributions = {p.player_id: p.points * value for p in status.point_totals}
    sources = {p.player_id: _format_points(p.points) for p in status.point_totals}
    settlements = resolve_pool(contributions, SETTLEMENT_LABEL, sources)
    logger.debug("wolf settled", holes_scored=len(status.hole_results), transfers=len(settlements))
    return settlements
