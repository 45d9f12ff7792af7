from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .cards import Card
from .errors import InsufficientBalanceError, RoundSetupError


class ActionType(str, Enum):
    ANTE = "ANTE"
    CALL = "CALL"
    BET = "BET"
    RAISE = "RAISE"
    CHECK = "CHECK"
    ALL_IN = "ALL_IN"
    FOLD = "FOLD"
    REPLACE = "REPLACE"
    WIN = "WIN"
    LOSE = "LOSE"


# Actions whose amount is the player's running total for the round.
STAKE_ACTIONS = frozenset({ActionType.ANTE, ActionType.BET, ActionType.RAISE, ActionType.ALL_IN})


class Variant(str, Enum):
    FIVE_CARD_DRAW = "five_card_draw"
    SEVEN_CARD_STUD = "seven_card_stud"
    TEXAS_HOLDEM = "texas_holdem"


# (min, max) seated players; the upper bound keeps every variant inside 52 cards.
SEAT_LIMITS: Dict[Variant, Tuple[int, int]] = {
    Variant.FIVE_CARD_DRAW: (2, 10),
    Variant.SEVEN_CARD_STUD: (2, 7),
    Variant.TEXAS_HOLDEM: (2, 10),
}


@dataclass(frozen=True)
class Action:
    """One player decision.

    ``amount`` on ANTE/BET/RAISE/ALL_IN is the player's total stake for the
    round after the action, never the increment. CALL carries no amount; the
    ledger resolves it to the current call amount.
    """

    type: ActionType
    amount: Optional[int] = None
    cards: Tuple[Card, ...] = ()

    def __post_init__(self) -> None:
        needs_amount = self.type in STAKE_ACTIONS or self.type in (ActionType.WIN, ActionType.LOSE)
        if needs_amount and (self.amount is None or self.amount < 0):
            raise ValueError(f"{self.type.value} requires a non-negative amount")
        if not needs_amount and self.amount is not None:
            raise ValueError(f"{self.type.value} does not carry an amount")

    @classmethod
    def ante(cls, total: int) -> "Action":
        return cls(ActionType.ANTE, total)

    @classmethod
    def bet(cls, total: int) -> "Action":
        return cls(ActionType.BET, total)

    @classmethod
    def raise_to(cls, total: int) -> "Action":
        return cls(ActionType.RAISE, total)

    @classmethod
    def all_in(cls, total: int) -> "Action":
        return cls(ActionType.ALL_IN, total)

    @classmethod
    def replace(cls, cards: List[Card]) -> "Action":
        return cls(ActionType.REPLACE, cards=tuple(cards))

    def __str__(self) -> str:
        if self.amount is not None:
            return f"{self.type.value}({self.amount})"
        if self.cards:
            return f"{self.type.value}({' '.join(card.label for card in self.cards)})"
        return self.type.value


@dataclass(frozen=True)
class Turn:
    round_id: str
    player_id: str
    action: Action
    phase: int
    hand: Tuple[Card, ...] = ()
    turn_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class Player:
    """A seated player. Balance and cards change only through the four mutators."""

    def __init__(self, balance: int, player_id: Optional[str] = None, name: Optional[str] = None) -> None:
        if balance < 0:
            raise ValueError("Balance cannot be negative")
        self.player_id = player_id or uuid.uuid4().hex
        self.name = name or self.player_id
        self._balance = balance
        self._hand: List[Card] = []

    @property
    def balance(self) -> int:
        return self._balance

    @property
    def hand(self) -> Tuple[Card, ...]:
        return tuple(self._hand)

    @property
    def up_cards(self) -> List[Card]:
        return [card for card in self._hand if card.face_up]

    def bet(self, amount: int) -> None:
        if amount < 0:
            raise InsufficientBalanceError(f"Negative bet {amount} for player {self.name}")
        if amount > self._balance:
            raise InsufficientBalanceError(
                f"Player {self.name} cannot bet {amount} with a balance of {self._balance}"
            )
        self._balance -= amount

    def win(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("Winnings cannot be negative")
        self._balance += amount

    def obtain_card(self, card: Card) -> None:
        self._hand.append(card)

    def return_cards(self) -> List[Card]:
        cards, self._hand = self._hand, []
        return cards

    def __repr__(self) -> str:
        return f"Player(name={self.name!r}, balance={self._balance}, hand={[c.label for c in self._hand]})"


@dataclass
class TableConfig:
    variant: str = Variant.TEXAS_HOLDEM.value
    seats: int = 6
    starting_balance: int = 1_000
    raise_limit: int = 100
    minimum_bet: int = 10
    move_time_ms: int = 15_000

    def validate(self) -> Variant:
        try:
            variant = Variant(self.variant)
        except ValueError:
            raise RoundSetupError(f"Unknown variant: {self.variant}") from None
        low, high = SEAT_LIMITS[variant]
        if not low <= self.seats <= high:
            raise RoundSetupError(f"{variant.value} seats {low}-{high} players, not {self.seats}")
        if self.raise_limit <= 0:
            raise RoundSetupError("raise_limit must be positive")
        if self.minimum_bet <= 0:
            raise RoundSetupError("minimum_bet must be positive")
        if self.starting_balance <= 0:
            raise RoundSetupError("starting_balance must be positive")
        return variant
