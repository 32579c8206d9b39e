"""
Match play scoring, singles round robin or one 2v2 best-ball match.

A match is won hole by hole. Once a side leads by more holes than remain
it is closed out and later holes no longer count. A side that leads by
exactly the holes remaining is dormie.
"""

from __future__ import annotations

from decimal import Decimal
from itertools import combinations
from typing import TYPE_CHECKING

import structlog

from wager.logic.enums import BetRegion, MatchState, MatchType
from wager.logic.handicap import StrokeTable, field_stroke_tables, match_stroke_tables, net_score
from wager.logic.settings import MatchPlaySettings
from wager.logic.settlement import BilateralOutcome, resolve_pairwise
from wager.logic.standings import HoleTally
from wager.logic.types import MatchPlayLiveStatus, MatchPlayMatchStatus

if TYPE_CHECKING:
    from wager.logic.state import GameSnapshot, ScoreLedger
    from wager.logic.types import Settlement

logger = structlog.get_logger()

TEAM_SPLIT = 2  # each loser pays each winner half the stake


def _match_play_settings(snapshot: GameSnapshot) -> MatchPlaySettings:
    settings = snapshot.settings
    if not isinstance(settings, MatchPlaySettings):
        raise ValueError(f"expected match play settings, got {settings.type.value}")
    return settings


def _pairings(snapshot: GameSnapshot, settings: MatchPlaySettings) -> list[tuple[tuple[str, ...], tuple[str, ...]]]:
    if settings.match_type == MatchType.TEAMS:
        return [(settings.team_a, settings.team_b)]
    return [((a.id,), (b.id,)) for a, b in combinations(snapshot.ordered_players, 2)]


def _stroke_tables(
    snapshot: GameSnapshot,
    settings: MatchPlaySettings,
    side_a: tuple[str, ...],
    side_b: tuple[str, ...],
) -> dict[str, StrokeTable]:
    """Singles give strokes head to head; teams play off the low handicap of the four."""
    if settings.match_type == MatchType.TEAMS:
        members = [p for p in snapshot.ordered_players if p.id in (*side_a, *side_b)]
        return field_stroke_tables(members, settings.handicap_mode, settings.pars, settings.hole_handicap_ratings)

    player_a = snapshot.player(side_a[0])
    player_b = snapshot.player(side_b[0])
    if player_a is None or player_b is None:
        raise ValueError("match refers to a player who is not in the game")
    table_a, table_b = match_stroke_tables(
        player_a.handicap,
        player_b.handicap,
        settings.handicap_mode,
        settings.pars,
        settings.hole_handicap_ratings,
    )
    return {player_a.id: table_a, player_b.id: table_b}


def _best_net(side: tuple[str, ...], hole: int, ledger: ScoreLedger, tables: dict[str, StrokeTable]) -> int | None:
    """Lowest net among side members who have scored the hole."""
    nets = []
    for pid in side:
        gross = ledger.get(pid, hole)
        if gross is not None:
            nets.append(net_score(gross, tables[pid].get(hole, 0)))
    return min(nets) if nets else None


def _side_name(snapshot: GameSnapshot, side: tuple[str, ...]) -> str:
    if len(side) == 1:
        player = snapshot.player(side[0])
        return player.name if player is not None else side[0]
    # teams read as "Alice & Bob"
    names = []
    for pid in side:
        player = snapshot.player(pid)
        names.append(player.short_name if player is not None else pid)
    return " & ".join(names)


def match_state(margin: int, holes_remaining: int, *, closed_out: bool, ended_early: bool) -> MatchState:
    if closed_out or holes_remaining == 0 or ended_early:
        return MatchState.DECIDED
    if margin > 0 and margin == holes_remaining:
        return MatchState.DORMIE
    return MatchState.IN_PROGRESS


def status_text(  # noqa: PLR0911
    leader_name: str | None,
    margin: int,
    holes_remaining: int,
    state: MatchState,
    *,
    closed_out: bool,
) -> str:
    """Human-readable standing, e.g. "Alice 2 UP, 5 to play" or "Alice wins 3&2"."""
    if state == MatchState.DECIDED:
        if leader_name is None:
            return "Halved"
        if closed_out:
            return f"{leader_name} wins {margin}&{holes_remaining}"
        return f"{leader_name} wins {margin} UP"
    if leader_name is None:
        return f"All Square, {holes_remaining} to play"
    if state == MatchState.DORMIE:
        return f"{leader_name} dormie {margin} UP"
    return f"{leader_name} {margin} UP, {holes_remaining} to play"


def _match_status(
    snapshot: GameSnapshot,
    settings: MatchPlaySettings,
    side_a: tuple[str, ...],
    side_b: tuple[str, ...],
    ledger: ScoreLedger,
) -> MatchPlayMatchStatus:
    tables = _stroke_tables(snapshot, settings, side_a, side_b)
    tally = HoleTally(side_a=side_a[0], side_b=side_b[0])
    closed_out = False

    for hole in settings.holes:
        best_a = _best_net(side_a, hole, ledger, tables)
        best_b = _best_net(side_b, hole, ledger, tables)
        if best_a is None or best_b is None:
            continue
        tally.record(hole, best_a, best_b)
        if tally.margin > settings.num_holes - tally.holes_played:
            closed_out = True
            break

    holes_remaining = settings.num_holes - tally.holes_played
    state = match_state(tally.margin, holes_remaining, closed_out=closed_out, ended_early=snapshot.ended_early)
    leader = tally.leader
    if leader is None:
        leader_name = None
    else:
        leader_name = _side_name(snapshot, side_a if leader == side_a[0] else side_b)

    return MatchPlayMatchStatus(
        player_a=side_a[0],
        player_b=side_b[0],
        side_a=side_a,
        side_b=side_b,
        hole_results=tuple(tally.results),
        leader_id=leader,
        margin=tally.margin,
        holes_played=tally.holes_played,
        holes_remaining=holes_remaining,
        state=state,
        is_dormie=state == MatchState.DORMIE,
        is_complete=state == MatchState.DECIDED,
        closed_out=closed_out,
        status_text=status_text(leader_name, tally.margin, holes_remaining, state, closed_out=closed_out),
    )


def compute_status(snapshot: GameSnapshot) -> MatchPlayLiveStatus:
    settings = _match_play_settings(snapshot)
    ledger = snapshot.ledger()
    matches = tuple(
        _match_status(snapshot, settings, side_a, side_b, ledger) for side_a, side_b in _pairings(snapshot, settings)
    )
    return MatchPlayLiveStatus(
        match_type=settings.match_type,
        matches=matches,
        current_hole=ledger.highest_hole,
        is_round_complete=bool(matches) and all(m.is_complete for m in matches),
    )


def _match_stake(snapshot: GameSnapshot, settings: MatchPlaySettings, player_a: str, player_b: str) -> Decimal:
    key = {player_a, player_b}
    for bet in snapshot.parent_bets():
        if bet.region == BetRegion.MATCH and {bet.player_a, bet.player_b} == key:
            return bet.amount
    return settings.total_bet


def _result_label(match: MatchPlayMatchStatus) -> str:
    if match.closed_out:
        return f"Match Play: {match.margin}&{match.holes_remaining}"
    return f"Match Play: {match.margin} UP"


def compute_settlements(snapshot: GameSnapshot) -> list[Settlement]:
    """
    Settle each match on its current standing.

    The leading side collects the stake; an all-square match moves nothing.
    In team play the stake is split so each loser pays each winner half.
    """
    settings = _match_play_settings(snapshot)
    status = compute_status(snapshot)

    outcomes: list[BilateralOutcome] = []
    for match in status.matches:
        if match.leader_id is None:
            continue
        stake = _match_stake(snapshot, settings, match.player_a, match.player_b)
        winners, losers = (match.side_a, match.side_b) if match.leader_id == match.player_a else (match.side_b, match.side_a)
        if len(winners) > 1:
            stake = stake / Decimal(TEAM_SPLIT)
        label = _result_label(match)
        outcomes.extend(
            BilateralOutcome(player_a=loser, player_b=winner, amount_a_owes_b=stake, label=label)
            for loser in losers
            for winner in winners
        )

    settlements = resolve_pairwise(outcomes)
    logger.debug("match play settled", matches=len(status.matches), transfers=len(settlements))
    return settlements
