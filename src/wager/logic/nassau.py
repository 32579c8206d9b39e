"""
Nassau scoring: three match-play bets per player pair.

- Front 9 (holes 1-9), Back 9 (holes 10-18), Overall (holes 1-18)
- Lower net score wins the hole, equal nets halve it
- Regions always play out every hole; there is no early closeout
- A player who is down can press: a fresh 1-vs-1 bet over the remaining
  holes of the same region, tracked and settled on its own

9-hole rounds carry the front region only.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from itertools import combinations
from typing import TYPE_CHECKING

import structlog

from wager.logic.enums import BetRegion, RegionPhase
from wager.logic.exceptions import DuplicatePressError, InvalidPressError
from wager.logic.handicap import StrokeTable, match_stroke_tables, net_score
from wager.logic.settings import FRONT_NINE_HOLES, NassauSettings
from wager.logic.settlement import BilateralOutcome, resolve_pairwise
from wager.logic.standings import HoleTally
from wager.logic.state import ParentBet, Press
from wager.logic.types import (
    NassauLiveStatus,
    NassauMatchStatus,
    PressStatus,
    RegionStatus,
    SuggestedPress,
)

if TYPE_CHECKING:
    from wager.logic.state import GameSnapshot, Player, ScoreLedger
    from wager.logic.types import Settlement

logger = structlog.get_logger()

# holes down before a press is suggested
PRESS_TRIGGER_MARGIN = 2

NASSAU_REGIONS = (BetRegion.FRONT, BetRegion.BACK, BetRegion.OVERALL)

REGION_LABELS = {
    BetRegion.FRONT: "Front 9",
    BetRegion.BACK: "Back 9",
    BetRegion.OVERALL: "Overall 18",
}
NINE_HOLE_LABEL = "Match"
PRESS_LABELS = {
    BetRegion.FRONT: "Front Press",
    BetRegion.BACK: "Back Press",
    BetRegion.OVERALL: "Overall Press",
}
REASON_SUFFIX = {
    BetRegion.FRONT: "on front 9",
    BetRegion.BACK: "on back 9",
    BetRegion.OVERALL: "overall",
}


def _nassau_settings(snapshot: GameSnapshot) -> NassauSettings:
    settings = snapshot.settings
    if not isinstance(settings, NassauSettings):
        raise ValueError(f"expected nassau settings, got {settings.type.value}")
    return settings


def active_regions(settings: NassauSettings) -> tuple[BetRegion, ...]:
    if settings.num_holes == FRONT_NINE_HOLES:
        return (BetRegion.FRONT,)
    return NASSAU_REGIONS


def region_holes(region: BetRegion, num_holes: int) -> tuple[int, ...]:
    """Holes covered by a Nassau region."""
    if region == BetRegion.FRONT:
        return tuple(range(1, FRONT_NINE_HOLES + 1))
    if num_holes == FRONT_NINE_HOLES:
        return ()
    if region == BetRegion.BACK:
        return tuple(range(FRONT_NINE_HOLES + 1, num_holes + 1))
    if region == BetRegion.OVERALL:
        return tuple(range(1, num_holes + 1))
    raise InvalidPressError(f"{region.value} is not a nassau region")


@dataclass(frozen=True)
class _Pairing:
    """Two players and their per-hole stroke allowances against each other."""

    player_a: str
    player_b: str
    strokes_a: StrokeTable
    strokes_b: StrokeTable

    @property
    def key(self) -> frozenset[str]:
        return frozenset((self.player_a, self.player_b))

    def tally(self, holes: tuple[int, ...], ledger: ScoreLedger) -> HoleTally:
        """Score every hole in the window that both players have completed."""
        tally = HoleTally(side_a=self.player_a, side_b=self.player_b)
        for hole in holes:
            gross_a = ledger.get(self.player_a, hole)
            gross_b = ledger.get(self.player_b, hole)
            if gross_a is None or gross_b is None:
                continue
            tally.record(
                hole,
                net_score(gross_a, self.strokes_a.get(hole, 0)),
                net_score(gross_b, self.strokes_b.get(hole, 0)),
            )
        return tally

    def next_open_hole(self, holes: tuple[int, ...], ledger: ScoreLedger) -> int | None:
        return next((h for h in holes if not ledger.has_all((self.player_a, self.player_b), h)), None)


def _pairing(settings: NassauSettings, player_a: Player, player_b: Player) -> _Pairing:
    strokes_a, strokes_b = match_stroke_tables(
        player_a.handicap,
        player_b.handicap,
        settings.handicap_mode,
        settings.pars,
        settings.hole_handicap_ratings,
    )
    return _Pairing(player_a=player_a.id, player_b=player_b.id, strokes_a=strokes_a, strokes_b=strokes_b)


def _bet_window(bet: ParentBet | Press, num_holes: int) -> tuple[int, ...]:
    holes = region_holes(bet.region, num_holes)
    if isinstance(bet, Press):
        return tuple(h for h in holes if h >= bet.start_hole)
    return holes


def _region_phase(tally: HoleTally, holes_total: int, *, ended_early: bool) -> RegionPhase:
    if ended_early or tally.holes_played == holes_total:
        return RegionPhase.COMPLETE
    if tally.holes_played == 0:
        return RegionPhase.NOT_STARTED
    return RegionPhase.IN_PROGRESS


def _bets_for_pair(snapshot: GameSnapshot, key: frozenset[str]) -> tuple[dict[BetRegion, ParentBet], list[Press]]:
    parents: dict[BetRegion, ParentBet] = {}
    presses: list[Press] = []
    for bet in snapshot.bets:
        if frozenset((bet.player_a, bet.player_b)) != key:
            continue
        if isinstance(bet, ParentBet):
            parents.setdefault(bet.region, bet)
        else:
            presses.append(bet)
    return parents, presses


def _region_status(
    bet: ParentBet,
    pairing: _Pairing,
    ledger: ScoreLedger,
    num_holes: int,
    *,
    ended_early: bool,
) -> RegionStatus:
    holes = _bet_window(bet, num_holes)
    tally = pairing.tally(holes, ledger)
    phase = _region_phase(tally, len(holes), ended_early=ended_early)
    return RegionStatus(
        bet_id=bet.id,
        region=bet.region,
        phase=phase,
        leader_id=tally.leader,
        margin=tally.margin,
        holes_played=tally.holes_played,
        holes_total=len(holes),
        is_complete=phase == RegionPhase.COMPLETE,
        hole_results=tuple(tally.results),
    )


def _press_statuses(
    presses: list[Press],
    pairing: _Pairing,
    ledger: ScoreLedger,
    num_holes: int,
    *,
    ended_early: bool,
) -> list[PressStatus]:
    counters: dict[BetRegion, int] = {}
    statuses: list[PressStatus] = []
    for press in presses:
        counters[press.region] = counters.get(press.region, 0) + 1
        holes = _bet_window(press, num_holes)
        tally = pairing.tally(holes, ledger)
        statuses.append(
            PressStatus(
                bet_id=press.id,
                parent_id=press.parent_id,
                region=press.region,
                label=f"{PRESS_LABELS[press.region]} #{counters[press.region]}",
                start_hole=press.start_hole,
                end_hole=holes[-1] if holes else press.start_hole,
                amount=press.amount,
                leader_id=tally.leader,
                margin=tally.margin,
                holes_played=tally.holes_played,
                is_complete=ended_early or tally.holes_played == len(holes),
                margin_at_press=press.margin_at_press,
                initiated_by=press.initiated_by,
            )
        )
    return statuses


def validate_presses(snapshot: GameSnapshot) -> None:
    """Reject presses whose parent is missing or whose region or players differ from it."""
    seen: set[tuple[str, BetRegion, frozenset[str]]] = set()
    for press in snapshot.presses():
        parent = snapshot.bet(press.parent_id)
        if parent is None:
            raise InvalidPressError(f"press {press.id} refers to unknown bet {press.parent_id}")
        if parent.region != press.region:
            raise InvalidPressError(f"press {press.id} region {press.region.value} does not match its parent")
        if frozenset((parent.player_a, parent.player_b)) != frozenset((press.player_a, press.player_b)):
            raise InvalidPressError(f"press {press.id} players do not match its parent")
        if press.dedupe_key in seen:
            raise DuplicatePressError(f"bet {press.parent_id} has already been pressed")
        seen.add(press.dedupe_key)


def compute_status(snapshot: GameSnapshot, trigger_margin: int = PRESS_TRIGGER_MARGIN) -> NassauLiveStatus:
    """
    Calculate live standings for every player pair.

    Handles any roster size as round-robin pairs; a pair is only scored
    once its front-nine parent bet exists.
    """
    settings = _nassau_settings(snapshot)
    ledger = snapshot.ledger()
    regions = active_regions(settings)

    matches: list[NassauMatchStatus] = []
    suggestions: list[SuggestedPress] = []

    for player_a, player_b in combinations(snapshot.ordered_players, 2):
        pairing = _pairing(settings, player_a, player_b)
        parents, presses = _bets_for_pair(snapshot, pairing.key)
        if BetRegion.FRONT not in parents:
            continue

        region_statuses = {
            region: _region_status(
                parents[region], pairing, ledger, settings.num_holes, ended_early=snapshot.ended_early
            )
            for region in regions
            if region in parents
        }
        press_statuses = _press_statuses(
            presses, pairing, ledger, settings.num_holes, ended_early=snapshot.ended_early
        )

        matches.append(
            NassauMatchStatus(
                player_a=player_a.id,
                player_b=player_b.id,
                front=region_statuses[BetRegion.FRONT],
                back=region_statuses.get(BetRegion.BACK),
                overall=region_statuses.get(BetRegion.OVERALL),
                presses=tuple(press_statuses),
            )
        )

        if settings.auto_press and snapshot.is_open:
            suggestions.extend(
                _suggest_presses(
                    settings,
                    pairing,
                    ledger,
                    list(region_statuses.values()),
                    press_statuses,
                    presses,
                    trigger_margin,
                )
            )

    is_round_complete = bool(matches) and all(
        region.is_complete for match in matches for region in match.regions
    )
    return NassauLiveStatus(
        matches=tuple(matches),
        current_hole=ledger.highest_hole,
        is_round_complete=is_round_complete,
        suggested_presses=tuple(suggestions),
    )


def _suggest_presses(  # noqa: PLR0913
    settings: NassauSettings,
    pairing: _Pairing,
    ledger: ScoreLedger,
    region_statuses: list[RegionStatus],
    press_statuses: list[PressStatus],
    presses: list[Press],
    trigger_margin: int,
) -> list[SuggestedPress]:
    """
    Report every bet the trailing player may press.

    Parents and presses alike qualify once they are trigger_margin down,
    still open, not yet pressed, and the pair's region press limit allows it.
    """
    candidates: list[tuple[str, BetRegion, str | None, int, bool, int, str]] = [
        (r.bet_id, r.region, r.leader_id, r.margin, r.is_complete, 1, REASON_SUFFIX[r.region])
        for r in region_statuses
    ]
    candidates.extend(
        (p.bet_id, p.region, p.leader_id, p.margin, p.is_complete, p.start_hole, f"on {p.label}")
        for p in press_statuses
    )

    suggestions: list[SuggestedPress] = []
    for bet_id, region, leader_id, margin, is_complete, start_hole, suffix in candidates:
        if leader_id is None or margin < trigger_margin or is_complete:
            continue
        if any(p.parent_id == bet_id for p in presses):
            continue
        region_count = sum(1 for p in presses if p.region == region)
        if settings.press_limit and region_count >= settings.press_limit:
            continue
        window = tuple(h for h in region_holes(region, settings.num_holes) if h >= start_hole)
        next_hole = pairing.next_open_hole(window, ledger)
        if next_hole is None:
            continue
        trailing = pairing.player_b if leader_id == pairing.player_a else pairing.player_a
        suggestions.append(
            SuggestedPress(
                player_a=pairing.player_a,
                player_b=pairing.player_b,
                region=region,
                parent_bet_id=bet_id,
                trailing_player_id=trailing,
                start_hole=next_hole,
                margin=margin,
                reason=f"{margin} down {suffix}",
            )
        )
    return suggestions


def create_press(  # noqa: PLR0913
    snapshot: GameSnapshot,
    parent_bet_id: str,
    press_id: str,
    *,
    initiated_by: str | None = None,
    start_hole: int | None = None,
    amount: Decimal | None = None,
) -> Press:
    """
    Build a press on top of a parent bet or an earlier press.

    The press inherits the parent's region and players, starts at the first
    hole neither player has finished (unless start_hole is given), and
    records the parent's margin at that moment. Raises DuplicatePressError
    when the parent was already pressed, InvalidPressError otherwise.
    """
    settings = snapshot.settings
    if not isinstance(settings, NassauSettings):
        raise InvalidPressError("presses are only available in nassau games")
    if not snapshot.is_open:
        raise InvalidPressError("round is no longer in progress")

    parent = snapshot.bet(parent_bet_id)
    if parent is None:
        raise InvalidPressError(f"bet {parent_bet_id} not found")
    if parent.region not in active_regions(settings):
        raise InvalidPressError(f"{parent.region.value} cannot be pressed in this game")
    if snapshot.bet(press_id) is not None:
        raise DuplicatePressError(f"bet id {press_id} already exists")

    key = frozenset((parent.player_a, parent.player_b))
    dedupe_key = (parent.id, parent.region, key)
    if any(p.dedupe_key == dedupe_key for p in snapshot.presses()):
        raise DuplicatePressError(f"bet {parent.id} has already been pressed")

    region_count = sum(
        1
        for p in snapshot.presses()
        if p.region == parent.region and frozenset((p.player_a, p.player_b)) == key
    )
    if settings.press_limit and region_count >= settings.press_limit:
        raise InvalidPressError(f"press limit of {settings.press_limit} reached on {REGION_LABELS[parent.region]}")

    if initiated_by is not None and initiated_by not in key:
        raise InvalidPressError(f"player {initiated_by} is not part of bet {parent.id}")

    player_a = snapshot.player(parent.player_a)
    player_b = snapshot.player(parent.player_b)
    if player_a is None or player_b is None:
        raise InvalidPressError(f"bet {parent.id} refers to a player who is not in the game")

    pairing = _pairing(settings, player_a, player_b)
    ledger = snapshot.ledger()
    window = _bet_window(parent, settings.num_holes)
    tally = pairing.tally(window, ledger)
    if tally.holes_played == len(window):
        raise InvalidPressError(f"{REGION_LABELS[parent.region]} is already complete")

    if start_hole is None:
        start_hole = pairing.next_open_hole(window, ledger)
    if start_hole is None or start_hole not in window:
        raise InvalidPressError(f"hole {start_hole} is outside the pressed bet")

    press = Press(
        id=press_id,
        parent_id=parent.id,
        region=parent.region,
        player_a=parent.player_a,
        player_b=parent.player_b,
        amount=parent.amount if amount is None else amount,
        start_hole=start_hole,
        margin_at_press=tally.margin,
        initiated_by=initiated_by,
    )
    logger.debug("press created", press_id=press.id, parent_id=parent.id, start_hole=start_hole)
    return press


def _outcome(player_a: str, player_b: str, leader_id: str | None, amount: Decimal, label: str) -> BilateralOutcome:
    if leader_id == player_a:
        owed = -amount
    elif leader_id == player_b:
        owed = amount
    else:
        owed = Decimal(0)
    return BilateralOutcome(player_a=player_a, player_b=player_b, amount_a_owes_b=owed, label=label)


def compute_settlements(snapshot: GameSnapshot) -> list[Settlement]:
    """
    Settle every parent bet and press.

    Each bet is resolved on its own; the resolver then nets them into one
    transfer per pair while listing every bet as a breakdown line.
    """
    settings = _nassau_settings(snapshot)
    status = compute_status(snapshot)
    nine_holes = settings.num_holes == FRONT_NINE_HOLES

    outcomes: list[BilateralOutcome] = []
    for match in status.matches:
        for region in match.regions:
            bet = snapshot.bet(region.bet_id)
            if bet is None:
                raise ValueError(f"bet {region.bet_id} missing from snapshot")
            label = NINE_HOLE_LABEL if nine_holes else REGION_LABELS[region.region]
            outcomes.append(_outcome(match.player_a, match.player_b, region.leader_id, bet.amount, label))
        outcomes.extend(
            _outcome(match.player_a, match.player_b, press.leader_id, press.amount, press.label)
            for press in match.presses
        )
    return resolve_pairwise(outcomes)
