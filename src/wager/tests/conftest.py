from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from shared.settings import EngineSettings
from wager.logic.enums import WolfChoiceType
from wager.logic.service import GameStatusFacade
from wager.logic.settings import MatchPlaySettings, NassauSettings, SkinsSettings, WolfSettings
from wager.logic.state import GameSnapshot, Player, Score, WolfChoice
from wager.logic.state_utils import create_parent_bets

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from wager.logic.settings import GameSettings


# ============================================================================
# Test Snapshot Builder Helpers
# ============================================================================

PLAYER_NAMES = ("Alice", "Bob", "Carol", "Dave", "Erin", "Frank")


def create_player(
    position: int = 1,
    player_id: str | None = None,
    *,
    name: str | None = None,
    handicap: float = 0.0,
) -> Player:
    """Create a Player with sensible defaults for testing."""
    default_name = PLAYER_NAMES[position - 1] if position <= len(PLAYER_NAMES) else f"Player{position}"
    return Player(
        id=player_id if player_id is not None else f"p{position}",
        name=name if name is not None else default_name,
        handicap=handicap,
        position=position,
    )


def create_players(count: int, handicaps: Sequence[float] | None = None) -> tuple[Player, ...]:
    """Create players p1..pN seated in order."""
    return tuple(
        create_player(i + 1, handicap=handicaps[i] if handicaps is not None else 0.0) for i in range(count)
    )


def scores_for(player_id: str, strokes_by_hole: Sequence[int], start_hole: int = 1) -> tuple[Score, ...]:
    """Consecutive hole scores for one player."""
    return tuple(
        Score(player_id=player_id, hole=start_hole + i, strokes=strokes) for i, strokes in enumerate(strokes_by_hole)
    )


def hole_scores(hole: int, strokes: dict[str, int]) -> tuple[Score, ...]:
    """Every player's score on one hole."""
    return tuple(Score(player_id=pid, hole=hole, strokes=s) for pid, s in strokes.items())


def create_snapshot(
    settings: GameSettings,
    players: Sequence[Player],
    *,
    scores: Iterable[Score] = (),
    with_bets: bool = True,
    wolf_choices: Iterable[WolfChoice] = (),
) -> GameSnapshot:
    """Create a GameSnapshot; parent bets are generated from settings unless disabled."""
    players = tuple(players)
    return GameSnapshot(
        settings=settings,
        players=players,
        scores=tuple(scores),
        bets=create_parent_bets(settings, players) if with_bets else (),
        wolf_choices=tuple(wolf_choices),
    )


def nassau_settings(**overrides: object) -> NassauSettings:
    return NassauSettings(**{"handicap_mode": "none", **overrides})


def skins_settings(**overrides: object) -> SkinsSettings:
    return SkinsSettings(**{"handicap_mode": "none", **overrides})


def match_play_settings(**overrides: object) -> MatchPlaySettings:
    return MatchPlaySettings(**{"handicap_mode": "none", **overrides})


def wolf_settings(**overrides: object) -> WolfSettings:
    return WolfSettings(**{"handicap_mode": "none", **overrides})


def wolf_choice(
    hole: int,
    wolf_id: str,
    choice: WolfChoiceType = WolfChoiceType.SOLO,
    partner_id: str | None = None,
) -> WolfChoice:
    return WolfChoice(hole=hole, wolf_id=wolf_id, choice=choice, partner_id=partner_id)


def money(value: str | int) -> Decimal:
    return Decimal(value).quantize(Decimal("0.01"))


@pytest.fixture
def facade() -> GameStatusFacade:
    return GameStatusFacade(EngineSettings(press_trigger_margin=2))
