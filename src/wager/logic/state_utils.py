"""
Immutable snapshot update utilities using Pydantic model_copy.

These functions never mutate the input snapshot. They validate the
requested change and return a new GameSnapshot with it applied.
"""

from __future__ import annotations

from itertools import combinations
from typing import TYPE_CHECKING

from wager.logic.enums import BetRegion, MatchType, RoundPhase
from wager.logic.exceptions import InvalidScoreError, LateJoinError
from wager.logic.settings import FRONT_NINE_HOLES, MatchPlaySettings, NassauSettings
from wager.logic.state import ParentBet, Player, Score

if TYPE_CHECKING:
    from decimal import Decimal

    from wager.logic.settings import GameSettings
    from wager.logic.state import GameSnapshot, Press, WolfChoice

# late joiners are accepted until a score exists on this hole
LATE_JOIN_CUTOFF_HOLE = 2


def bet_id(region: BetRegion, player_a: str, player_b: str) -> str:
    """Deterministic id for a parent bet."""
    return f"{region.value}:{player_a}:{player_b}"


def _pair_bets(settings: GameSettings, player_a: str, player_b: str) -> tuple[ParentBet, ...]:
    stakes: list[tuple[BetRegion, Decimal]] = []
    if isinstance(settings, NassauSettings):
        stakes.append((BetRegion.FRONT, settings.front_bet))
        if settings.num_holes != FRONT_NINE_HOLES:
            stakes.append((BetRegion.BACK, settings.back_bet))
            stakes.append((BetRegion.OVERALL, settings.overall_bet))
    elif isinstance(settings, MatchPlaySettings):
        stakes.append((BetRegion.MATCH, settings.total_bet))
    return tuple(
        ParentBet(id=bet_id(region, player_a, player_b), region=region, player_a=player_a, player_b=player_b, amount=amount)
        for region, amount in stakes
    )


def create_parent_bets(settings: GameSettings, players: tuple[Player, ...]) -> tuple[ParentBet, ...]:
    """
    Build the bets a game starts with.

    Nassau gets front, back and overall bets for every pair (front only on
    9 holes). Singles match play gets one match bet per pair and team match
    play a single bet between the team anchors. Skins and Wolf are pool
    games and start without bets.

    Args:
        settings: Game settings
        players: Roster in seat order

    Returns:
        Tuple of parent bets

    """
    if isinstance(settings, MatchPlaySettings) and settings.match_type == MatchType.TEAMS:
        if not settings.team_a or not settings.team_b:
            return ()
        return _pair_bets(settings, settings.team_a[0], settings.team_b[0])
    if not isinstance(settings, (NassauSettings, MatchPlaySettings)):
        return ()
    ordered = sorted(players, key=lambda p: p.position)
    bets: list[ParentBet] = []
    for player_a, player_b in combinations(ordered, 2):
        bets.extend(_pair_bets(settings, player_a.id, player_b.id))
    return tuple(bets)


def record_score(
    snapshot: GameSnapshot,
    player_id: str,
    hole: int,
    strokes: int,
) -> GameSnapshot:
    """
    Return new snapshot with a score entered or corrected.

    An existing score for the same player and hole is replaced.

    Args:
        snapshot: Current snapshot
        player_id: Player who played the hole
        hole: Hole number (1-based)
        strokes: Gross strokes

    Returns:
        New GameSnapshot with the score recorded

    Raises:
        InvalidScoreError: If the round is closed, or the player, hole or strokes are invalid

    """
    if not snapshot.is_open:
        raise InvalidScoreError(f"round is {snapshot.phase.value}, scores can no longer change")
    if snapshot.player(player_id) is None:
        raise InvalidScoreError(f"player {player_id} is not in the game")
    if hole not in snapshot.settings.holes:
        raise InvalidScoreError(f"hole {hole} is not part of a {snapshot.settings.num_holes}-hole round")
    if strokes < 1:
        raise InvalidScoreError(f"strokes must be at least 1, got {strokes}")

    kept = tuple(s for s in snapshot.scores if not (s.player_id == player_id and s.hole == hole))
    score = Score(player_id=player_id, hole=hole, strokes=strokes)
    return snapshot.model_copy(update={"scores": (*kept, score)})


def _close_round(snapshot: GameSnapshot, phase: RoundPhase) -> GameSnapshot:
    if not snapshot.is_open:
        raise ValueError(f"cannot move a {snapshot.phase.value} round to {phase.value}")
    return snapshot.model_copy(update={"phase": phase})


def end_round_early(snapshot: GameSnapshot) -> GameSnapshot:
    """Return new snapshot with the round stopped; open bets settle on their current standing."""
    return _close_round(snapshot, RoundPhase.ENDED_EARLY)


def complete_round(snapshot: GameSnapshot) -> GameSnapshot:
    return _close_round(snapshot, RoundPhase.COMPLETED)


def add_late_player(
    snapshot: GameSnapshot,
    player_id: str,
    name: str,
    handicap: float = 0.0,
    account_id: str | None = None,
) -> GameSnapshot:
    """
    Return new snapshot with a player added after tee-off.

    Only Nassau and singles match play accept late joiners, and only until
    a score exists on hole 2. The player takes the next seat and gets parent
    bets against everyone already in the game.

    Raises:
        LateJoinError: If the format, phase or scores do not allow joining

    """
    settings = snapshot.settings
    singles = isinstance(settings, MatchPlaySettings) and settings.match_type == MatchType.SINGLES
    if not (isinstance(settings, NassauSettings) or singles):
        raise LateJoinError(f"{settings.type.value} games do not accept late players")
    if not snapshot.is_open:
        raise LateJoinError("round is no longer in progress")
    if snapshot.player(player_id) is not None:
        raise LateJoinError(f"player {player_id} is already in the game")
    if any(s.hole >= LATE_JOIN_CUTOFF_HOLE for s in snapshot.scores):
        raise LateJoinError(f"players can only join before hole {LATE_JOIN_CUTOFF_HOLE} is scored")

    position = max((p.position for p in snapshot.players), default=0) + 1
    player = Player(id=player_id, name=name, handicap=handicap, position=position, account_id=account_id)
    new_bets: list[ParentBet] = []
    for existing in snapshot.ordered_players:
        new_bets.extend(_pair_bets(settings, existing.id, player_id))
    return snapshot.model_copy(
        update={
            "players": (*snapshot.players, player),
            "bets": (*snapshot.bets, *new_bets),
        }
    )


def append_bet(snapshot: GameSnapshot, bet: ParentBet | Press) -> GameSnapshot:
    return snapshot.model_copy(update={"bets": (*snapshot.bets, bet)})


def append_wolf_choice(snapshot: GameSnapshot, choice: WolfChoice) -> GameSnapshot:
    return snapshot.model_copy(update={"wolf_choices": (*snapshot.wolf_choices, choice)})
