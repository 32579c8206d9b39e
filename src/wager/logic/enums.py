"""
String enum definitions for golf wagering concepts.
"""

from enum import Enum


class GameFormat(str, Enum):
    """Wagering format carried as the settings type tag."""

    NASSAU = "nassau"
    SKINS = "skins"
    MATCH_PLAY = "match_play"
    WOLF = "wolf"


class HandicapMode(str, Enum):
    """How much of a handicap difference is given as strokes."""

    NONE = "none"
    FULL = "full"
    PARTIAL = "partial"  # 80% of the difference


class BetRegion(str, Enum):
    """Holes a bet covers."""

    FRONT = "front"
    BACK = "back"
    OVERALL = "overall"
    MATCH = "match"  # match play, full round


class BetKind(str, Enum):
    """Discriminator for bet records."""

    PARENT = "parent"
    PRESS = "press"


class RoundPhase(str, Enum):
    """Lifecycle of a round as supplied by the caller."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ENDED_EARLY = "ended_early"


class RegionPhase(str, Enum):
    """Progress of a single Nassau region between two players."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class MatchType(str, Enum):
    """Match play pairing style."""

    SINGLES = "singles"
    TEAMS = "teams"


class MatchState(str, Enum):
    """Progress of a match play match."""

    IN_PROGRESS = "in_progress"
    DORMIE = "dormie"
    DECIDED = "decided"


class WolfChoiceType(str, Enum):
    """Declaration made by the wolf on a hole."""

    PARTNER = "partner"
    SOLO = "solo"
    BLIND = "blind"


class WolfOutcome(str, Enum):
    """Which side took a wolf hole."""

    WOLF = "wolf"
    FIELD = "field"
    PUSH = "push"


# point multiplier applied to a wolf hole for each declaration
WOLF_MULTIPLIERS: dict[WolfChoiceType, int] = {
    WolfChoiceType.PARTNER: 1,
    WolfChoiceType.SOLO: 2,
    WolfChoiceType.BLIND: 3,
}


class WagerErrorCode(str, Enum):
    """Error codes attached to rejected operations."""

    INVALID_SETTINGS = "invalid_settings"
    INVALID_SCORE = "invalid_score"
    INVALID_PRESS = "invalid_press"
    DUPLICATE_PRESS = "duplicate_press"
    INVALID_WOLF_CHOICE = "invalid_wolf_choice"
    DUPLICATE_WOLF_CHOICE = "duplicate_wolf_choice"
    LATE_JOIN_REJECTED = "late_join_rejected"
