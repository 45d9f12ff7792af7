from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Iterable, List, Optional

from .errors import DuplicateCardError, EmptyDeckError

RANKS = "23456789TJQKA"
SUITS = "cshd"


class Rank(IntEnum):
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    @property
    def symbol(self) -> str:
        return RANKS[self.value - 2]

    @classmethod
    def from_symbol(cls, symbol: str) -> "Rank":
        idx = RANKS.find(symbol.upper()) if len(symbol) == 1 else -1
        if idx < 0:
            raise ValueError(f"Invalid rank: {symbol}")
        return cls(idx + 2)


class Suit(Enum):
    CLUBS = "c"
    SPADES = "s"
    HEARTS = "h"
    DIAMONDS = "d"

    @property
    def symbol(self) -> str:
        return self.value


@dataclass(frozen=True)
class Card:
    rank: Rank
    suit: Suit
    # Visibility is table state, not identity.
    face_up: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.rank, Rank):
            raise ValueError(f"Invalid rank: {self.rank}")
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Invalid suit: {self.suit}")

    def __lt__(self, other: "Card") -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.sort_key < other.sort_key

    @property
    def sort_key(self) -> tuple:
        return (int(self.rank), SUITS.index(self.suit.value))

    @property
    def label(self) -> str:
        return f"{self.rank.symbol}{self.suit.symbol}"

    def __str__(self) -> str:
        return self.label


def parse_label(label: str) -> Card:
    if len(label) != 2:
        raise ValueError(f"Invalid card label: {label}")
    rank = Rank.from_symbol(label[0])
    try:
        suit = Suit(label[1].lower())
    except ValueError:
        raise ValueError(f"Invalid suit: {label[1]}") from None
    return Card(rank, suit)


def parse_cards(labels: Iterable[str]) -> List[Card]:
    return [parse_label(label) for label in labels]


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]


def reveal(card: Card) -> Card:
    return replace(card, face_up=True)


def full_deck() -> List[Card]:
    return [Card(rank, suit) for rank in Rank for suit in Suit]


class Deck:
    """The 52-card pool for one table.

    Cards leave the pool through ``deal`` and must come back through
    ``return_card`` once the round is over. Players, the community pile and
    the deck always partition the 52 cards; the deck only guards against a
    card coming back twice.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)
        self._cards: List[Card] = full_deck()

    def deal(self, face_up: bool = False) -> Card:
        if not self._cards:
            raise EmptyDeckError("There are no cards remaining in the deck")
        idx = self._draw_index()
        # swap-remove keeps dealing O(1); order inside the pool is irrelevant
        self._cards[idx], self._cards[-1] = self._cards[-1], self._cards[idx]
        card = self._cards.pop()
        return replace(card, face_up=face_up)

    def _draw_index(self) -> int:
        return self._rng.randrange(len(self._cards))

    def return_card(self, card: Card) -> None:
        if card in self._cards:
            raise DuplicateCardError(f"Card {card.label} returned to deck is already in the deck")
        self._cards.append(replace(card, face_up=False))

    def size(self) -> int:
        return len(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card: object) -> bool:
        return card in self._cards

    def remaining(self) -> List[Card]:
        return list(self._cards)
