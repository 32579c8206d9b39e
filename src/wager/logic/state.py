"""
Snapshot models for a wagering round.

Every record is a frozen Pydantic model. The engine reads a GameSnapshot
and never mutates it; state_utils returns new snapshots instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from wager.logic.enums import BetKind, BetRegion, RoundPhase, WolfChoiceType
from wager.logic.settings import GameSettings

if TYPE_CHECKING:
    from collections.abc import Iterable


class Player(BaseModel):
    """A participant in one game (not a global user)."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    handicap: float = 0.0  # captured at game creation
    position: int = Field(ge=1)
    account_id: str | None = None  # None for guests

    @property
    def short_name(self) -> str:
        return self.name.split(" ")[0] if self.name else self.id


class Score(BaseModel):
    """Gross strokes for one player on one hole."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    hole: int = Field(ge=1)
    strokes: int = Field(ge=1)


class ParentBet(BaseModel):
    """A wager created at game start between two players or team anchors."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[BetKind.PARENT] = BetKind.PARENT
    id: str
    region: BetRegion
    player_a: str
    player_b: str
    amount: Decimal = Field(ge=0)


class Press(BaseModel):
    """A derivative wager started mid-round on top of a parent bet or another press."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[BetKind.PRESS] = BetKind.PRESS
    id: str
    parent_id: str
    region: BetRegion
    player_a: str
    player_b: str
    amount: Decimal = Field(ge=0)
    start_hole: int = Field(ge=1)
    margin_at_press: int = 0
    initiated_by: str | None = None

    @property
    def dedupe_key(self) -> tuple[str, BetRegion, frozenset[str]]:
        return (self.parent_id, self.region, frozenset((self.player_a, self.player_b)))


Bet = Annotated[ParentBet | Press, Field(discriminator="kind")]


class WolfChoice(BaseModel):
    """The wolf's declaration for one hole."""

    model_config = ConfigDict(frozen=True)

    hole: int = Field(ge=1)
    wolf_id: str
    choice: WolfChoiceType
    partner_id: str | None = None


class GameSnapshot(BaseModel):
    """Everything the engine needs to compute status or settlements."""

    model_config = ConfigDict(frozen=True)

    settings: GameSettings
    players: tuple[Player, ...]
    scores: tuple[Score, ...] = ()
    bets: tuple[Bet, ...] = ()
    wolf_choices: tuple[WolfChoice, ...] = ()
    phase: RoundPhase = RoundPhase.IN_PROGRESS

    @property
    def ended_early(self) -> bool:
        return self.phase == RoundPhase.ENDED_EARLY

    @property
    def is_open(self) -> bool:
        return self.phase == RoundPhase.IN_PROGRESS

    @property
    def ordered_players(self) -> tuple[Player, ...]:
        return tuple(sorted(self.players, key=lambda p: p.position))

    def player(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def ledger(self) -> ScoreLedger:
        return ScoreLedger.from_scores(self.scores)

    def parent_bets(self) -> tuple[ParentBet, ...]:
        return tuple(b for b in self.bets if isinstance(b, ParentBet))

    def presses(self) -> tuple[Press, ...]:
        return tuple(b for b in self.bets if isinstance(b, Press))

    def bet(self, bet_id: str) -> ParentBet | Press | None:
        return next((b for b in self.bets if b.id == bet_id), None)


@dataclass(frozen=True)
class ScoreLedger:
    """
    Read-only (player, hole) -> strokes lookup.

    Later records for the same key overwrite earlier ones, matching the
    overwrite-on-correction rule for score entry.
    """

    strokes: dict[tuple[str, int], int] = field(default_factory=dict)

    @classmethod
    def from_scores(cls, scores: Iterable[Score]) -> ScoreLedger:
        return cls(strokes={(s.player_id, s.hole): s.strokes for s in scores})

    def get(self, player_id: str, hole: int) -> int | None:
        return self.strokes.get((player_id, hole))

    def has_all(self, player_ids: Iterable[str], hole: int) -> bool:
        return all((pid, hole) in self.strokes for pid in player_ids)

    def has_any(self, player_ids: Iterable[str], hole: int) -> bool:
        return any((pid, hole) in self.strokes for pid in player_ids)

    @property
    def is_empty(self) -> bool:
        return not self.strokes

    @property
    def highest_hole(self) -> int:
        """Highest hole with any score entered, 0 when nothing is scored."""
        return max((hole for _, hole in self.strokes), default=0)
