"""Typed domain exceptions for wagering rule violations.

All domain-level rule violations use subclasses of WagerRuleError
rather than raw ValueError. Callers catch WagerRuleError at their
boundary and surface ``reason`` to the user; nothing raised here is
fatal to the process.
"""

from wager.logic.enums import WagerErrorCode


class WagerRuleError(Exception):
    """Base exception for wagering rule violations.

    Attributes:
        reason: Human-readable explanation of why the operation was rejected.

    """

    code: WagerErrorCode = WagerErrorCode.INVALID_SETTINGS

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class InvalidSettingsError(WagerRuleError):
    """Game settings or roster are malformed and cannot be computed on."""

    code = WagerErrorCode.INVALID_SETTINGS


class InvalidScoreError(WagerRuleError):
    """Score entry refers to an unknown player or hole, or the round is closed."""

    code = WagerErrorCode.INVALID_SCORE


class InvalidPressError(WagerRuleError):
    """Press cannot be created (unknown parent, limit reached, region complete, etc.)."""

    code = WagerErrorCode.INVALID_PRESS


class DuplicatePressError(InvalidPressError):
    """A press with the same parent, region and player pair already exists."""

    code = WagerErrorCode.DUPLICATE_PRESS


class InvalidWolfChoiceError(WagerRuleError):
    """Wolf declaration breaks the rotation or partner rules."""

    code = WagerErrorCode.INVALID_WOLF_CHOICE


class DuplicateWolfChoiceError(InvalidWolfChoiceError):
    """The wolf already declared for this hole."""

    code = WagerErrorCode.DUPLICATE_WOLF_CHOICE


class LateJoinError(WagerRuleError):
    """Player cannot be added to a running game."""

    code = WagerErrorCode.LATE_JOIN_REJECTED
