"""
Pydantic models for computed live status and settlement results.

These are projections recomputed from a GameSnapshot on every call;
nothing here is stored by the engine.
"""

from decimal import Decimal
from fractions import Fraction
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from wager.logic.enums import (
    BetRegion,
    GameFormat,
    MatchState,
    MatchType,
    RegionPhase,
    WolfChoiceType,
    WolfOutcome,
)

# ---------------------------------------------------------------------------
# Settlement
# ---------------------------------------------------------------------------


class BreakdownItem(BaseModel):
    """One contributing line of a settlement.

    Positive amounts add to what the paying player owes, negative amounts
    are lines the paying player won.
    """

    model_config = ConfigDict(frozen=True)

    label: str
    amount: Decimal


class Settlement(BaseModel):
    """A single pairwise transfer produced at round end."""

    model_config = ConfigDict(frozen=True)

    from_player: str
    to_player: str
    amount: Decimal = Field(gt=0)
    breakdown: tuple[BreakdownItem, ...] = ()


# ---------------------------------------------------------------------------
# Shared hole-by-hole results
# ---------------------------------------------------------------------------


class HoleResult(BaseModel):
    """Outcome of one hole between two sides; winner_id is None when halved."""

    model_config = ConfigDict(frozen=True)

    hole: int
    winner_id: str | None
    net_a: int
    net_b: int


# ---------------------------------------------------------------------------
# Nassau
# ---------------------------------------------------------------------------


class RegionStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    bet_id: str
    region: BetRegion
    phase: RegionPhase
    leader_id: str | None
    margin: int
    holes_played: int
    holes_total: int
    is_complete: bool
    hole_results: tuple[HoleResult, ...] = ()


class PressStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    bet_id: str
    parent_id: str
    region: BetRegion
    label: str
    start_hole: int
    end_hole: int
    amount: Decimal
    leader_id: str | None
    margin: int
    holes_played: int
    is_complete: bool
    margin_at_press: int
    initiated_by: str | None = None


class SuggestedPress(BaseModel):
    """Advisory only: the engine never creates a press on its own."""

    model_config = ConfigDict(frozen=True)

    player_a: str
    player_b: str
    region: BetRegion
    parent_bet_id: str
    trailing_player_id: str
    start_hole: int
    margin: int
    reason: str


class NassauMatchStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_a: str
    player_b: str
    front: RegionStatus
    back: RegionStatus | None = None  # None on 9-hole rounds
    overall: RegionStatus | None = None
    presses: tuple[PressStatus, ...] = ()

    @property
    def regions(self) -> tuple[RegionStatus, ...]:
        return tuple(r for r in (self.front, self.back, self.overall) if r is not None)


class NassauLiveStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    format: Literal[GameFormat.NASSAU] = GameFormat.NASSAU
    matches: tuple[NassauMatchStatus, ...]
    current_hole: int
    is_round_complete: bool
    suggested_presses: tuple[SuggestedPress, ...] = ()


# ---------------------------------------------------------------------------
# Skins
# ---------------------------------------------------------------------------


class SkinsHoleResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    hole: int
    winner_id: str | None
    skins_at_stake: int
    value_at_stake: Decimal
    is_tied: bool
    is_voided: bool = False  # tie with carryovers disabled
    split_between: tuple[str, ...] = ()  # final-hole split recipients
    net_scores: dict[str, int]


class PlayerSkins(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    skins_won: int
    winnings: Decimal


class SkinsLiveStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    format: Literal[GameFormat.SKINS] = GameFormat.SKINS
    hole_results: tuple[SkinsHoleResult, ...]
    players: tuple[PlayerSkins, ...]
    carryover: int
    carryover_value: Decimal
    current_hole: int
    is_round_complete: bool
    total_skins_awarded: int
    total_value_awarded: Decimal
    forfeited_value: Decimal
    total_skins_available: int


# ---------------------------------------------------------------------------
# Match play
# ---------------------------------------------------------------------------


class MatchPlayMatchStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_a: str  # side anchor: the player, or the first team member
    player_b: str
    side_a: tuple[str, ...]
    side_b: tuple[str, ...]
    hole_results: tuple[HoleResult, ...]
    leader_id: str | None
    margin: int
    holes_played: int
    holes_remaining: int
    state: MatchState
    is_dormie: bool
    is_complete: bool
    closed_out: bool
    status_text: str


class MatchPlayLiveStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    format: Literal[GameFormat.MATCH_PLAY] = GameFormat.MATCH_PLAY
    match_type: MatchType
    matches: tuple[MatchPlayMatchStatus, ...]
    current_hole: int
    is_round_complete: bool


# ---------------------------------------------------------------------------
# Wolf
# ---------------------------------------------------------------------------


class WolfHoleResult(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    hole: int
    wolf_id: str
    choice: WolfChoiceType
    partner_id: str | None
    wolf_side: tuple[str, ...]
    field_side: tuple[str, ...]
    wolf_best_net: int
    field_best_net: int
    outcome: WolfOutcome
    multiplier: int
    points: dict[str, Fraction]


class PlayerPoints(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    player_id: str
    points: Fraction


class WolfLiveStatus(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    format: Literal[GameFormat.WOLF] = GameFormat.WOLF
    hole_results: tuple[WolfHoleResult, ...]
    point_totals: tuple[PlayerPoints, ...]
    wolf_rotation: tuple[str, ...]
    current_wolf_id: str | None
    current_hole: int
    is_round_complete: bool
    needs_wolf_choice: bool
    available_partners: tuple[str, ...] = ()


LiveStatus = Annotated[
    NassauLiveStatus | SkinsLiveStatus | MatchPlayLiveStatus | WolfLiveStatus,
    Field(discriminator="format"),
]
