from __future__ import annotations


class PokerError(Exception):
    """Base class for every error raised by the round engine."""


class RoundSetupError(PokerError, ValueError):
    """Round cannot start: bad seat count, bad config or unusable player."""


class EmptyDeckError(PokerError, RuntimeError):
    """A card was requested from an empty deck."""


class InvariantViolation(PokerError, RuntimeError):
    """Ledger or state-machine consistency was broken. Not recoverable."""


class DuplicateCardError(InvariantViolation):
    pass


class InsufficientBalanceError(InvariantViolation):
    pass
