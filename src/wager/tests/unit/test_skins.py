"""Tests for skins carryovers, final-hole ties and pool settlement."""

from decimal import Decimal

from wager.logic import skins
from wager.logic.enums import RoundPhase
from wager.logic.settlement import net_owed
from wager.tests.conftest import create_players, create_snapshot, hole_scores, money, skins_settings


def _game(holes, **settings):
    """holes is a list of {player_id: strokes} dicts, one per hole starting at 1."""
    scores = [score for number, strokes in enumerate(holes, start=1) for score in hole_scores(number, strokes)]
    return create_snapshot(skins_settings(**settings), create_players(4), scores=scores)


def _all(p1, p2, p3, p4):
    return {"p1": p1, "p2": p2, "p3": p3, "p4": p4}


class TestSkinsStatus:
    def test_tie_carries_to_next_hole(self):
        snapshot = _game([_all(3, 3, 4, 5), _all(4, 4, 3, 4)], skin_value=Decimal(2))
        status = skins.compute_status(snapshot)

        first, second = status.hole_results
        assert first.is_tied is True
        assert first.winner_id is None
        assert second.winner_id == "p3"
        assert second.skins_at_stake == 2
        assert second.value_at_stake == Decimal(4)

        p3 = next(p for p in status.players if p.player_id == "p3")
        assert p3.skins_won == 2
        assert p3.winnings == Decimal(4)
        assert status.carryover == 0

    def test_open_carryover_is_reported(self):
        status = skins.compute_status(_game([_all(3, 3, 4, 5)]))

        assert status.carryover == 1
        assert status.carryover_value == Decimal(1)
        assert status.total_skins_awarded == 0
        assert status.forfeited_value == 0

    def test_carryover_compounds(self):
        snapshot = _game([_all(4, 4, 5, 5), _all(4, 4, 4, 5), _all(5, 5, 5, 4)])
        status = skins.compute_status(snapshot)

        assert status.hole_results[-1].skins_at_stake == 3
        assert status.total_skins_awarded == 3

    def test_ties_are_voided_without_carryovers(self):
        snapshot = _game([_all(3, 3, 4, 5), _all(4, 4, 3, 4)], skin_value=Decimal(2), allow_carryovers=False)
        status = skins.compute_status(snapshot)

        assert status.hole_results[0].is_voided is True
        assert status.hole_results[1].skins_at_stake == 1
        assert status.forfeited_value == Decimal(2)
        assert status.total_value_awarded == Decimal(2)

    def test_stops_at_first_incomplete_hole(self):
        snapshot = _game([_all(3, 4, 4, 4), {"p1": 4, "p2": 3}, _all(4, 4, 4, 3)])
        status = skins.compute_status(snapshot)

        assert [r.hole for r in status.hole_results] == [1]
        assert status.current_hole == 3

    def test_empty_snapshot(self):
        status = skins.compute_status(_game([]))

        assert status.hole_results == ()
        assert status.total_value_awarded == 0
        assert status.is_round_complete is False
        assert status.total_skins_available == 18


class TestFinalHoleTies:
    def _nine_holes(self, **settings):
        holes = [_all(3, 4, 4, 4)] * 7 + [_all(4, 3, 3, 4), _all(4, 3, 3, 3)]
        return _game(holes, num_holes=9, **settings)

    def test_unresolved_carryover_is_forfeited(self):
        status = skins.compute_status(self._nine_holes())

        assert status.is_round_complete is True
        assert status.forfeited_value == Decimal(2)
        assert status.total_value_awarded == Decimal(7)
        assert status.carryover == 0

    def test_split_among_players_tied_on_final_hole(self):
        status = skins.compute_status(self._nine_holes(split_final_ties=True))

        winnings = {p.player_id: p.winnings for p in status.players}
        # $2 across three players: 66 cents each plus one leftover cent to the lowest seats
        assert winnings == {"p1": Decimal(7), "p2": money("0.67"), "p3": money("0.67"), "p4": money("0.66")}
        assert status.hole_results[-1].split_between == ("p2", "p3", "p4")
        assert status.forfeited_value == 0
        assert status.total_value_awarded == Decimal(9)

    def test_round_ended_early_on_a_tie(self):
        snapshot = _game([_all(3, 4, 4, 4), _all(3, 3, 4, 4)]).model_copy(update={"phase": RoundPhase.ENDED_EARLY})
        status = skins.compute_status(snapshot)

        assert status.forfeited_value == Decimal(1)
        assert status.carryover == 0

    def test_voided_final_tie_is_not_split(self):
        status = skins.compute_status(self._nine_holes(split_final_ties=True, allow_carryovers=False))

        winnings = {p.player_id: p.winnings for p in status.players}
        assert winnings == {"p1": Decimal(7), "p2": Decimal(0), "p3": Decimal(0), "p4": Decimal(0)}
        assert status.hole_results[-1].is_voided is True
        assert status.hole_results[-1].split_between == ()
        assert status.forfeited_value == Decimal(2)

    def test_value_is_conserved(self):
        for split in (False, True):
            for carry in (False, True):
                status = skins.compute_status(self._nine_holes(split_final_ties=split, allow_carryovers=carry))
                assert status.total_value_awarded + status.forfeited_value == Decimal(9)


class TestSkinsSettlements:
    def test_every_opponent_pays_each_skin_in_full(self):
        snapshot = _game([_all(3, 3, 4, 5), _all(4, 4, 3, 4)], skin_value=Decimal(2))
        settlements = skins.compute_settlements(snapshot)

        # p3 won 2 skins worth ; each of the three others owes the full 
        assert {(s.from_player, s.to_player, s.amount) for s in settlements} == {
            ("p1", "p3", money(4)),
            ("p2", "p3", money(4)),
            ("p4", "p3", money(4)),
        }

    def test_two_player_sweep_pays_full_skin_value(self):
        players = create_players(2)
        scores = [s for hole in range(1, 10) for s in hole_scores(hole, {"p1": 3, "p2": 4})]
        snapshot = create_snapshot(skins_settings(num_holes=9, skin_value=Decimal(2)), players, scores=scores)
        balances = net_owed(skins.compute_settlements(snapshot))

        assert balances == {"p2": money(18), "p1": money(-18)}

    def test_breakdown_names_skins_won_by_each_side(self):
        snapshot = _game([_all(3, 4, 4, 4), _all(4, 3, 4, 4), _all(3, 4, 4, 4), _all(3, 4, 4, 4)])
        settlements = skins.compute_settlements(snapshot)
        lines = {(s.from_player, s.to_player): [(item.label, item.amount) for item in s.breakdown] for s in settlements}

        # p1 nets 4*3 - 4 = , p2 nets 4*1 - 4 = /tmp/p.pl, p3 and p4 owe  each
        assert lines == {
            ("p3", "p1"): [("Skins: 0 vs 3", money(4))],
            ("p4", "p1"): [("Skins: 0 vs 3", money(4))],
        }

    def test_settlements_are_zero_sum(self):
        holes = [_all(3, 4, 4, 4)] * 7 + [_all(4, 3, 3, 4), _all(4, 3, 3, 3)]
        snapshot = _game(holes, num_holes=9, split_final_ties=True)
        settlements = skins.compute_settlements(snapshot)
        balances = net_owed(settlements)

        # p1 won ; the  split gives p2 and p3 67 cents and p4 66 cents
        assert sum(balances.values()) == 0
        assert balances["p1"] == money(-19)
        assert balances["p4"] == money("6.36")
        assert {item.label for s in settlements for item in s.breakdown} == {
            "Skins: 0.67 vs 7",
            "Skins: 0.66 vs 7",
        }

    def test_no_skins_no_transfers(self):
        assert skins.compute_settlements(_game([_all(4, 4, 4, 4)])) == []

    def test_free_skins_produce_no_transfers(self):
        assert skins.compute_settlements(_game([_all(3, 4, 4, 4)], skin_value=Decimal(0))) == []
