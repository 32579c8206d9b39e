"""Tests for GameStatusFacade dispatch, validation and logging."""

import logging
from decimal import Decimal

import pytest

from shared.settings import EngineSettings
from wager.logic.enums import BetRegion, GameFormat, WagerErrorCode, WolfChoiceType
from wager.logic.exceptions import DuplicatePressError, InvalidSettingsError, InvalidWolfChoiceError, LateJoinError
from wager.logic.service import GameStatusFacade
from wager.logic.state import Press
from wager.logic.state_utils import append_bet
from wager.logic.types import MatchPlayLiveStatus, NassauLiveStatus, SkinsLiveStatus, WolfLiveStatus
from wager.tests.conftest import (
    create_players,
    create_snapshot,
    match_play_settings,
    nassau_settings,
    scores_for,
    skins_settings,
    wolf_choice,
    wolf_settings,
)


def _trailing_nassau():
    scores = (*scores_for("p1", [4, 4, 4, 4]), *scores_for("p2", [3, 4, 4, 4]))
    return create_snapshot(nassau_settings(), create_players(2), scores=scores)


class TestDispatch:
    def test_each_format_returns_its_status(self, facade):
        assert isinstance(facade.compute_status(create_snapshot(nassau_settings(), create_players(2))), NassauLiveStatus)
        assert isinstance(facade.compute_status(create_snapshot(skins_settings(), create_players(3))), SkinsLiveStatus)
        assert isinstance(
            facade.compute_status(create_snapshot(match_play_settings(), create_players(2))), MatchPlayLiveStatus
        )
        assert isinstance(facade.compute_status(create_snapshot(wolf_settings(), create_players(4))), WolfLiveStatus)

    def test_status_carries_format_tag(self, facade):
        status = facade.compute_status(create_snapshot(skins_settings(), create_players(2)))
        assert status.format == GameFormat.SKINS

    def test_empty_snapshots_settle_to_nothing(self, facade):
        for settings, count in (
            (nassau_settings(), 2),
            (skins_settings(), 3),
            (match_play_settings(), 2),
            (wolf_settings(), 4),
        ):
            assert facade.compute_settlements(create_snapshot(settings, create_players(count))) == []


class TestValidation:
    def test_invalid_settings_are_rejected_before_computing(self, facade):
        snapshot = create_snapshot(wolf_settings(), create_players(3))
        with pytest.raises(InvalidSettingsError, match="exactly 4 players") as exc_info:
            facade.compute_status(snapshot)

        assert exc_info.value.code == WagerErrorCode.INVALID_SETTINGS

    def test_duplicate_presses_in_snapshot_are_rejected(self, facade):
        snapshot = facade.create_press(_trailing_nassau(), "front:p1:p2")
        twin = Press(
            id="press-twin",
            parent_id="front:p1:p2",
            region=BetRegion.FRONT,
            player_a="p2",
            player_b="p1",
            amount=Decimal(5),
            start_hole=6,
        )
        with pytest.raises(DuplicatePressError):
            facade.compute_settlements(append_bet(snapshot, twin))

    def test_rejection_is_logged(self, facade, caplog):
        snapshot = create_snapshot(wolf_settings(), create_players(3))
        with caplog.at_level(logging.WARNING, logger="wager.logic.service"), pytest.raises(InvalidSettingsError):
            facade.compute_settlements(snapshot)

        warning_records = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warning_records) == 1
        assert warning_records[0].msg["event"] == "snapshot rejected"
        assert warning_records[0].msg["code"] == WagerErrorCode.INVALID_SETTINGS
        assert warning_records[0].msg["game_type"] == GameFormat.WOLF
        assert warning_records[0].msg["players"] == 3


class TestCreatePress:
    def test_returns_new_snapshot_with_press(self, facade):
        snapshot = _trailing_nassau()
        updated = facade.create_press(snapshot, "front:p1:p2", initiated_by="p1")

        assert len(updated.bets) == len(snapshot.bets) + 1
        press = updated.bet("press:front:p1:p2")
        assert isinstance(press, Press)
        assert press.start_hole == 5
        assert press.initiated_by == "p1"

    def test_second_press_on_same_bet(self, facade, caplog, log_events):
        snapshot = facade.create_press(_trailing_nassau(), "front:p1:p2")
        with caplog.at_level(logging.WARNING), pytest.raises(DuplicatePressError) as exc_info:
            facade.create_press(snapshot, "front:p1:p2")

        assert exc_info.value.code == WagerErrorCode.DUPLICATE_PRESS
        assert log_events(logging.WARNING) == ["press rejected"]

    def test_trigger_margin_comes_from_engine_settings(self):
        scores = (*scores_for("p1", [4]), *scores_for("p2", [3]))
        snapshot = create_snapshot(nassau_settings(), create_players(2), scores=scores)

        eager = GameStatusFacade(EngineSettings(press_trigger_margin=1)).compute_status(snapshot)
        default = GameStatusFacade(EngineSettings(press_trigger_margin=2)).compute_status(snapshot)

        assert isinstance(eager, NassauLiveStatus)
        assert isinstance(default, NassauLiveStatus)
        assert len(eager.suggested_presses) == 2
        assert default.suggested_presses == ()


class TestRecordWolfChoice:
    def test_returns_new_snapshot_with_choice(self, facade):
        snapshot = create_snapshot(wolf_settings(), create_players(4))
        updated = facade.record_wolf_choice(snapshot, wolf_choice(1, "p1", WolfChoiceType.PARTNER, "p4"))

        assert updated.wolf_choices[0].partner_id == "p4"
        assert snapshot.wolf_choices == ()

    def test_rejected_choice(self, facade):
        snapshot = create_snapshot(wolf_settings(), create_players(4))
        with pytest.raises(InvalidWolfChoiceError) as exc_info:
            facade.record_wolf_choice(snapshot, wolf_choice(1, "p3"))

        assert exc_info.value.code == WagerErrorCode.INVALID_WOLF_CHOICE


class TestScoresAndRoster:
    def test_record_score(self, facade):
        snapshot = facade.record_score(create_snapshot(skins_settings(), create_players(2)), "p2", 3, 5)
        assert snapshot.ledger().get("p2", 3) == 5

    def test_add_late_player(self, facade):
        snapshot = facade.add_late_player(create_snapshot(nassau_settings(), create_players(2)), "p3", "Carol")

        status = facade.compute_status(snapshot)
        assert isinstance(status, NassauLiveStatus)
        assert len(status.matches) == 3

    def test_late_join_rejection_is_typed(self, facade):
        snapshot = create_snapshot(wolf_settings(), create_players(4))
        with pytest.raises(LateJoinError) as exc_info:
            facade.add_late_player(snapshot, "p5", "Erin")

        assert exc_info.value.code == WagerErrorCode.LATE_JOIN_REJECTED
