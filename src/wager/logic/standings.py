"""Hole-by-hole margin tracking shared by the match-play style formats."""

from dataclasses import dataclass, field

from wager.logic.types import HoleResult


def hole_winner(net_a: int, net_b: int, side_a: str, side_b: str) -> str | None:
    """Lower net takes the hole; equal nets halve it."""
    if net_a < net_b:
        return side_a
    if net_b < net_a:
        return side_b
    return None


@dataclass
class HoleTally:
    """
    Running holes-won count between two sides.

    Halved holes count as played but move nothing.
    """

    side_a: str
    side_b: str
    wins_a: int = 0
    wins_b: int = 0
    results: list[HoleResult] = field(default_factory=list)

    def record(self, hole: int, net_a: int, net_b: int) -> HoleResult:
        winner = hole_winner(net_a, net_b, self.side_a, self.side_b)
        if winner == self.side_a:
            self.wins_a += 1
        elif winner == self.side_b:
            self.wins_b += 1
        result = HoleResult(hole=hole, winner_id=winner, net_a=net_a, net_b=net_b)
        self.results.append(result)
        return result

    @property
    def holes_played(self) -> int:
        return len(self.results)

    @property
    def margin(self) -> int:
        return abs(self.wins_a - self.wins_b)

    @property
    def leader(self) -> str | None:
        """Side currently ahead, None when all square."""
        if self.wins_a > self.wins_b:
            return self.side_a
        if self.wins_b > self.wins_a:
            return self.side_b
        return None
