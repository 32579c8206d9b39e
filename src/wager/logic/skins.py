"""
Skins scoring: one prize per hole for the single lowest net score.

Ties carry the skin forward, so the next hole is worth 1 + carryover skins.
With carryovers disabled a tied hole is voided instead. A tie left on the
final hole is either split among the tied players or forfeited.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from wager.logic.handicap import field_stroke_tables, net_score
from wager.logic.settings import SkinsSettings
from wager.logic.settlement import CENT, from_cents, resolve_pool, split_cents, to_cents
from wager.logic.types import PlayerSkins, SkinsHoleResult, SkinsLiveStatus

if TYPE_CHECKING:
    from wager.logic.state import GameSnapshot
    from wager.logic.types import Settlement

logger = structlog.get_logger()

SETTLEMENT_LABEL = "Skins"


def _skins_settings(snapshot: GameSnapshot) -> SkinsSettings:
    settings = snapshot.settings
    if not isinstance(settings, SkinsSettings):
        raise ValueError(f"expected skins settings, got {settings.type.value}")
    return settings


def compute_status(snapshot: GameSnapshot) -> SkinsLiveStatus:  # noqa: PLR0915
    """
    Walk the holes in order and award skins.

    Processing stops at the first hole some player has not scored, so a
    carryover never skips a hole.
    """
    settings = _skins_settings(snapshot)
    players = snapshot.ordered_players
    player_ids = [p.id for p in players]
    ledger = snapshot.ledger()
    tables = field_stroke_tables(players, settings.handicap_mode, settings.pars, settings.hole_handicap_ratings)

    skins_won = dict.fromkeys(player_ids, 0)
    winnings = dict.fromkeys(player_ids, Decimal(0))
    results: list[SkinsHoleResult] = []
    carryover = 0
    forfeited = Decimal(0)
    final_leaders: list[str] = []

    for hole in settings.holes:
        if not player_ids or not ledger.has_all(player_ids, hole):
            break
        nets = {pid: net_score(ledger.get(pid, hole) or 0, tables[pid].get(hole, 0)) for pid in player_ids}
        low = min(nets.values())
        leaders = [pid for pid in player_ids if nets[pid] == low]
        at_stake = 1 + carryover
        value = settings.skin_value * at_stake
        final_leaders = leaders

        if len(leaders) == 1:
            winner = leaders[0]
            skins_won[winner] += at_stake
            winnings[winner] += value
            carryover = 0
            results.append(
                SkinsHoleResult(
                    hole=hole,
                    winner_id=winner,
                    skins_at_stake=at_stake,
                    value_at_stake=value,
                    is_tied=False,
                    net_scores=nets,
                )
            )
            continue

        voided = not settings.allow_carryovers
        if voided:
            forfeited += value
            carryover = 0
        else:
            carryover = at_stake
        results.append(
            SkinsHoleResult(
                hole=hole,
                winner_id=None,
                skins_at_stake=at_stake,
                value_at_stake=value,
                is_tied=True,
                is_voided=voided,
                net_scores=nets,
            )
        )

    is_round_complete = len(results) == settings.num_holes
    round_over = is_round_complete or snapshot.ended_early

    # a tie on the last hole played has nowhere left to carry; a voided tie is already forfeited
    if round_over and results and results[-1].is_tied and not results[-1].is_voided:
        last = results[-1]
        if settings.split_final_ties:
            shares = split_cents(to_cents(last.value_at_stake), final_leaders)
            for pid, cents in shares.items():
                winnings[pid] += from_cents(cents)
            results[-1] = last.model_copy(update={"split_between": tuple(final_leaders)})
        else:
            forfeited += last.value_at_stake
        carryover = 0

    total_value_awarded = sum(winnings.values(), Decimal(0))
    return SkinsLiveStatus(
        hole_results=tuple(results),
        players=tuple(
            PlayerSkins(player_id=pid, skins_won=skins_won[pid], winnings=winnings[pid]) for pid in player_ids
        ),
        carryover=carryover,
        carryover_value=settings.skin_value * carryover,
        current_hole=ledger.highest_hole,
        is_round_complete=is_round_complete,
        total_skins_awarded=sum(skins_won.values()),
        total_value_awarded=total_value_awarded,
        forfeited_value=forfeited,
        total_skins_available=settings.num_holes,
    )


def _skins_count(winnings: Decimal, skin_value: Decimal) -> str:
    """Winnings expressed in skins; a split final tie shows as a fraction of a skin."""
    return f"{(winnings / skin_value).quantize(CENT).normalize():f}"


def compute_settlements(snapshot: GameSnapshot) -> list[Settlement]:
    """
    Settle skins as a pool.

    Every player pays every other player the full value of each skin that
    player won, so a player's net is n * winnings - total winnings. Split
    final ties count as fractional skins.
    """
    settings = _skins_settings(snapshot)
    status = compute_status(snapshot)
    if settings.skin_value == 0:
        return []

    player_ids = [p.id for p in snapshot.ordered_players]
    winnings = {p.player_id: p.winnings for p in status.players}
    field_size = len(player_ids)
    total = status.total_value_awarded

    contributions = {pid: field_size * winnings[pid] - total for pid in player_ids}
    sources = {pid: _skins_count(winnings[pid], settings.skin_value) for pid in player_ids}
    settlements = resolve_pool(contributions, SETTLEMENT_LABEL, sources)
    logger.debug(
        "skins settled",
        awarded=str(total),
        forfeited=str(status.forfeited_value),
        transfers=len(settlements),
    )
    return settlements
