"""Per-format game settings and roster validation."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from wager.logic.enums import GameFormat, HandicapMode, MatchType
from wager.logic.exceptions import InvalidSettingsError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from wager.logic.state import Player

DEFAULT_PAR = 4
MIN_PAR = 3
MAX_PAR = 6
FRONT_NINE_HOLES = 9
MIN_PLAYERS = 2
WOLF_PLAYERS = 4
TEAM_SIZE = 2


class _RoundSettings(BaseModel):
    """Fields shared by every format."""

    model_config = ConfigDict(frozen=True)

    num_holes: Literal[9, 18] = 18
    hole_pars: tuple[int, ...] | None = None
    hole_handicap_ratings: tuple[int, ...] | None = None  # stroke index, 1 = hardest
    handicap_mode: HandicapMode = HandicapMode.FULL

    @property
    def pars(self) -> tuple[int, ...]:
        """Par per hole, defaulting to all par 4s."""
        if self.hole_pars is None:
            return (DEFAULT_PAR,) * self.num_holes
        return self.hole_pars

    @property
    def holes(self) -> range:
        return range(1, self.num_holes + 1)


class NassauSettings(_RoundSettings):
    type: Literal[GameFormat.NASSAU] = GameFormat.NASSAU

    front_bet: Decimal = Field(default=Decimal(5), ge=0)
    back_bet: Decimal = Field(default=Decimal(5), ge=0)
    overall_bet: Decimal = Field(default=Decimal(5), ge=0)
    auto_press: bool = True
    press_limit: int = Field(default=0, ge=0)  # 0 = unlimited


class SkinsSettings(_RoundSettings):
    type: Literal[GameFormat.SKINS] = GameFormat.SKINS

    skin_value: Decimal = Field(default=Decimal(1), ge=0)
    allow_carryovers: bool = True
    split_final_ties: bool = False


class MatchPlaySettings(_RoundSettings):
    type: Literal[GameFormat.MATCH_PLAY] = GameFormat.MATCH_PLAY

    total_bet: Decimal = Field(default=Decimal(10), ge=0)
    match_type: MatchType = MatchType.SINGLES
    team_a: tuple[str, ...] = ()
    team_b: tuple[str, ...] = ()


class WolfSettings(_RoundSettings):
    type: Literal[GameFormat.WOLF] = GameFormat.WOLF

    point_value: Decimal = Field(default=Decimal(1), ge=0)
    blind_wolf: bool = False
    wolf_order: tuple[str, ...] = ()  # player ids; empty = seat order
    last_place_wolf_finish: bool = False  # holes 17-18 go to the player in last place


GameSettings = Annotated[
    NassauSettings | SkinsSettings | MatchPlaySettings | WolfSettings,
    Field(discriminator="type"),
]


def validate_settings(settings: GameSettings, players: Sequence[Player]) -> None:
    """Validate settings against the roster before any computation.

    Collects every problem and raises a single InvalidSettingsError so the
    caller can show all of them at once.
    """
    errors: list[str] = []
    player_ids = [p.id for p in players]

    errors.extend(_validate_course(settings))

    if len(players) < MIN_PLAYERS:
        errors.append(f"at least {MIN_PLAYERS} players are required, got {len(players)}")
    if len(set(player_ids)) != len(player_ids):
        errors.append("player ids must be unique")

    if isinstance(settings, WolfSettings):
        errors.extend(_validate_wolf(settings, player_ids))
    elif isinstance(settings, MatchPlaySettings) and settings.match_type == MatchType.TEAMS:
        errors.extend(_validate_teams(settings, player_ids))

    if errors:
        raise InvalidSettingsError("; ".join(errors))


def _validate_course(settings: GameSettings) -> list[str]:
    errors: list[str] = []
    if settings.hole_pars is not None:
        if len(settings.hole_pars) != settings.num_holes:
            errors.append(f"hole_pars has {len(settings.hole_pars)} entries but num_holes={settings.num_holes}")
        bad_pars = [par for par in settings.hole_pars if not MIN_PAR <= par <= MAX_PAR]
        if bad_pars:
            errors.append(f"hole_pars must be between {MIN_PAR} and {MAX_PAR}, got {bad_pars}")
    ratings = settings.hole_handicap_ratings
    if ratings is not None and sorted(ratings) != list(settings.holes):
        errors.append(f"hole_handicap_ratings must be a permutation of 1..{settings.num_holes}")
    return errors


def _validate_wolf(settings: WolfSettings, player_ids: list[str]) -> list[str]:
    errors: list[str] = []
    if len(player_ids) != WOLF_PLAYERS:
        errors.append(f"wolf requires exactly {WOLF_PLAYERS} players, got {len(player_ids)}")
    if settings.wolf_order and sorted(settings.wolf_order) != sorted(player_ids):
        errors.append("wolf_order must list every player exactly once")
    return errors


def _validate_teams(settings: MatchPlaySettings, player_ids: list[str]) -> list[str]:
    errors: list[str] = []
    if len(settings.team_a) != TEAM_SIZE or len(settings.team_b) != TEAM_SIZE:
        errors.append(f"team match play requires two teams of {TEAM_SIZE}")
    if set(settings.team_a) & set(settings.team_b):
        errors.append("a player cannot be on both teams")
    unknown = [pid for pid in (*settings.team_a, *settings.team_b) if pid not in player_ids]
    if unknown:
        errors.append(f"team members are not in the game: {unknown}")
    return errors
