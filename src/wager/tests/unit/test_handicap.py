"""Tests for handicap stroke allocation."""

from wager.logic.enums import HandicapMode
from wager.logic.handicap import (
    allocate_strokes,
    allocate_strokes_to_holes,
    field_stroke_tables,
    hole_difficulty_order,
    match_stroke_tables,
    net_score,
    strokes_received,
)
from wager.tests.conftest import create_player

NINE_PARS = (4, 4, 3, 5, 4, 3, 4, 5, 4)
EIGHTEEN_PARS = (4,) * 18


class TestStrokesReceived:
    def test_full_mode_gives_whole_difference(self):
        assert strokes_received(18, 10, HandicapMode.FULL) == 8

    def test_lower_handicap_gets_nothing(self):
        assert strokes_received(10, 18, HandicapMode.FULL) == 0

    def test_equal_handicaps_get_nothing(self):
        assert strokes_received(12, 12, HandicapMode.FULL) == 0

    def test_scratch_mode_gives_nothing(self):
        assert strokes_received(30, 0, HandicapMode.NONE) == 0

    def test_partial_mode_takes_eighty_percent(self):
        # 8 * 0.8 = 6.4
        assert strokes_received(18, 10, HandicapMode.PARTIAL) == 6

    def test_partial_mode_rounds_half_up(self):
        # 10 * 0.8 = 8.0, 5 * 0.8 = 4.0, 3.125 * 0.8 = 2.5
        assert strokes_received(20, 10, HandicapMode.PARTIAL) == 8
        assert strokes_received(5, 0, HandicapMode.PARTIAL) == 4
        assert strokes_received(3.125, 0, HandicapMode.PARTIAL) == 3

    def test_fractional_difference_rounds_half_up(self):
        assert strokes_received(12.5, 10, HandicapMode.FULL) == 3
        assert strokes_received(12.4, 10, HandicapMode.FULL) == 2


class TestHoleDifficultyOrder:
    def test_par_proxy_puts_short_holes_first(self):
        assert hole_difficulty_order(NINE_PARS) == [3, 6, 1, 2, 5, 7, 9, 4, 8]

    def test_equal_pars_fall_back_to_hole_number(self):
        assert hole_difficulty_order((4, 4, 4)) == [1, 2, 3]

    def test_stroke_index_overrides_par(self):
        stroke_index = (5, 1, 9, 3, 7, 2, 8, 4, 6)
        assert hole_difficulty_order(NINE_PARS, stroke_index)[:3] == [2, 6, 4]


class TestAllocateStrokesToHoles:
    def test_zero_strokes_gives_empty_allocation(self):
        table = allocate_strokes_to_holes(0, EIGHTEEN_PARS)
        assert sum(table.values()) == 0
        assert set(table) == set(range(1, 19))

    def test_one_stroke_per_hole_hardest_first(self):
        table = allocate_strokes_to_holes(2, NINE_PARS)
        assert table[3] == 1
        assert table[6] == 1
        assert sum(table.values()) == 2

    def test_allotment_above_hole_count_wraps(self):
        table = allocate_strokes_to_holes(20, EIGHTEEN_PARS)
        assert table[1] == 2
        assert table[2] == 2
        assert table[3] == 1
        assert sum(table.values()) == 20


class TestAllocateStrokes:
    def test_higher_handicap_receives_strokes(self):
        # 18 strokes over 18 holes: one per hole
        allocation = allocate_strokes(18, 0, 7, EIGHTEEN_PARS, HandicapMode.FULL)
        assert allocation.strokes_to_a == 1
        assert allocation.strokes_to_b == 0

    def test_swapping_players_swaps_result(self):
        for hole in range(1, 19):
            forward = allocate_strokes(14, 6, hole, EIGHTEEN_PARS, HandicapMode.FULL)
            reverse = allocate_strokes(6, 14, hole, EIGHTEEN_PARS, HandicapMode.FULL)
            assert forward.strokes_to_a == reverse.strokes_to_b
            assert forward.strokes_to_b == reverse.strokes_to_a

    def test_match_tables_total_the_difference(self):
        table_a, table_b = match_stroke_tables(9, 15, HandicapMode.FULL, EIGHTEEN_PARS)
        assert sum(table_a.values()) == 0
        assert sum(table_b.values()) == 6


class TestFieldStrokeTables:
    def test_plays_off_the_low(self):
        players = (
            create_player(1, handicap=4),
            create_player(2, handicap=10),
            create_player(3, handicap=7),
        )
        tables = field_stroke_tables(players, HandicapMode.FULL, EIGHTEEN_PARS)
        assert sum(tables["p1"].values()) == 0
        assert sum(tables["p2"].values()) == 6
        assert sum(tables["p3"].values()) == 3

    def test_empty_group(self):
        assert field_stroke_tables((), HandicapMode.FULL, EIGHTEEN_PARS) == {}


class TestNetScore:
    def test_subtracts_strokes(self):
        assert net_score(5, 1) == 4

    def test_never_below_zero(self):
        assert net_score(1, 3) == 0
