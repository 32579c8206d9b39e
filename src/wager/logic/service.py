"""
Wagering service entry points.

Every call takes a complete GameSnapshot and is a pure function of it:
the same snapshot always yields the same status and settlements.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import structlog

from shared.logging import snapshot_context
from shared.settings import EngineSettings
from wager.logic import match_play, nassau, skins, state_utils, wolf
from wager.logic.exceptions import InvalidSettingsError, WagerRuleError
from wager.logic.settings import MatchPlaySettings, NassauSettings, SkinsSettings, WolfSettings, validate_settings

if TYPE_CHECKING:
    from wager.logic.state import GameSnapshot, WolfChoice
    from wager.logic.types import LiveStatus, Settlement

logger = structlog.get_logger()

PRESS_ID_PREFIX = "press"


class WagerService(ABC):
    """Abstract interface for wagering computations."""

    @abstractmethod
    def compute_status(self, snapshot: GameSnapshot) -> LiveStatus:
        """Return the live standing for the snapshot's format."""
        ...

    @abstractmethod
    def compute_settlements(self, snapshot: GameSnapshot) -> list[Settlement]:
        """
        Return the zero-sum transfers for the snapshot.

        Bets still open are settled on their current standing.
        """
        ...

    @abstractmethod
    def create_press(
        self,
        snapshot: GameSnapshot,
        parent_bet_id: str,
        *,
        initiated_by: str | None = None,
        start_hole: int | None = None,
    ) -> GameSnapshot:
        """Return a new snapshot with a press added on top of an existing bet."""
        ...

    @abstractmethod
    def record_wolf_choice(self, snapshot: GameSnapshot, choice: WolfChoice) -> GameSnapshot:
        """Return a new snapshot with the wolf's declaration for a hole."""
        ...


class GameStatusFacade(WagerService):
    """
    Dispatches to the engine for the snapshot's format.

    Settings are validated before every computation, so a malformed game
    raises InvalidSettingsError instead of producing a partial result.
    """

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self._settings = settings or EngineSettings()

    def _validate(self, snapshot: GameSnapshot) -> None:
        try:
            validate_settings(snapshot.settings, snapshot.players)
            if isinstance(snapshot.settings, NassauSettings):
                nassau.validate_presses(snapshot)
        except WagerRuleError as e:
            logger.warning("snapshot rejected", code=e.code, reason=e.reason)
            raise

    def compute_status(self, snapshot: GameSnapshot) -> LiveStatus:
        with snapshot_context(snapshot):
            self._validate(snapshot)
            settings = snapshot.settings
            if isinstance(settings, NassauSettings):
                return nassau.compute_status(snapshot, trigger_margin=self._settings.press_trigger_margin)
            if isinstance(settings, SkinsSettings):
                return skins.compute_status(snapshot)
            if isinstance(settings, MatchPlaySettings):
                return match_play.compute_status(snapshot)
            if isinstance(settings, WolfSettings):
                return wolf.compute_status(snapshot)
            raise InvalidSettingsError(f"unsupported game type: {settings!r}")

    def compute_settlements(self, snapshot: GameSnapshot) -> list[Settlement]:
        with snapshot_context(snapshot):
            self._validate(snapshot)
            settings = snapshot.settings
            if isinstance(settings, NassauSettings):
                settlements = nassau.compute_settlements(snapshot)
            elif isinstance(settings, SkinsSettings):
                settlements = skins.compute_settlements(snapshot)
            elif isinstance(settings, MatchPlaySettings):
                settlements = match_play.compute_settlements(snapshot)
            elif isinstance(settings, WolfSettings):
                settlements = wolf.compute_settlements(snapshot)
            else:
                raise InvalidSettingsError(f"unsupported game type: {settings!r}")

            logger.info(
                "settlements computed",
                transfers=len(settlements),
                total=sum((s.amount for s in settlements), start=0),
            )
            return settlements

    def create_press(
        self,
        snapshot: GameSnapshot,
        parent_bet_id: str,
        *,
        initiated_by: str | None = None,
        start_hole: int | None = None,
    ) -> GameSnapshot:
        with snapshot_context(snapshot):
            self._validate(snapshot)
            press_id = f"{PRESS_ID_PREFIX}:{parent_bet_id}"
            try:
                press = nassau.create_press(
                    snapshot,
                    parent_bet_id,
                    press_id,
                    initiated_by=initiated_by,
                    start_hole=start_hole,
                )
            except WagerRuleError as e:
                logger.warning("press rejected", parent_bet_id=parent_bet_id, code=e.code, reason=e.reason)
                raise
            logger.info("press created", press_id=press.id, start_hole=press.start_hole, margin=press.margin_at_press)
            return state_utils.append_bet(snapshot, press)

    def record_wolf_choice(self, snapshot: GameSnapshot, choice: WolfChoice) -> GameSnapshot:
        with snapshot_context(snapshot):
            self._validate(snapshot)
            try:
                accepted = wolf.record_wolf_choice(snapshot, choice)
            except WagerRuleError as e:
                logger.warning("wolf choice rejected", hole=choice.hole, code=e.code, reason=e.reason)
                raise
            return state_utils.append_wolf_choice(snapshot, accepted)

    def record_score(self, snapshot: GameSnapshot, player_id: str, hole: int, strokes: int) -> GameSnapshot:
        try:
            return state_utils.record_score(snapshot, player_id, hole, strokes)
        except WagerRuleError as e:
            logger.warning("score rejected", player_id=player_id, hole=hole, code=e.code, reason=e.reason)
            raise

    def add_late_player(
        self,
        snapshot: GameSnapshot,
        player_id: str,
        name: str,
        handicap: float = 0.0,
    ) -> GameSnapshot:
        try:
            updated = state_utils.add_late_player(snapshot, player_id, name, handicap)
        except WagerRuleError as e:
            logger.warning("late join rejected", player_id=player_id, code=e.code, reason=e.reason)
            raise
        logger.info("late player added", player_id=player_id, bets_added=len(updated.bets) - len(snapshot.bets))
        return updated
