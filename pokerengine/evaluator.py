from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .cards import Card, Rank, Suit

WHEEL = {Rank.ACE, Rank.TWO, Rank.THREE, Rank.FOUR, Rank.FIVE}

K = TypeVar("K", bound=Hashable)


class HandCategory(IntEnum):
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9


_DISPLAY_NAMES = {
    HandCategory.HIGH_CARD: "HighCard",
    HandCategory.ONE_PAIR: "OnePair",
    HandCategory.TWO_PAIR: "TwoPair",
    HandCategory.THREE_OF_A_KIND: "ThreeOfAKind",
    HandCategory.STRAIGHT: "Straight",
    HandCategory.FLUSH: "Flush",
    HandCategory.FULL_HOUSE: "FullHouse",
    HandCategory.FOUR_OF_A_KIND: "FourOfAKind",
    HandCategory.STRAIGHT_FLUSH: "StraightFlush",
    HandCategory.ROYAL_FLUSH: "RoyalFlush",
}


@dataclass(frozen=True, order=True)
class HandRank:
    """Category plus the rank(s) that identify it, e.g. FullHouse(Six, Eight).

    Ordering is category first, then the rank tuple lexicographically.
    Equal values are ties; kickers are deliberately not part of the value.
    """

    category: HandCategory
    ranks: Tuple[Rank, ...] = ()

    def describe(self) -> str:
        return self.category.name.lower()

    def __str__(self) -> str:
        name = _DISPLAY_NAMES[self.category]
        if not self.ranks:
            return name
        inner = ", ".join(rank.name.capitalize() for rank in self.ranks)
        return f"{name}({inner})"


def rank_hand(cards: Sequence[Card]) -> HandRank:
    """Classify 1-7 cards. Straights and flushes need at least five cards."""
    if not cards:
        raise ValueError("Cannot rank an empty hand")
    if len(cards) > 7:
        raise ValueError(f"Cannot rank {len(cards)} cards; at most 7 are supported")

    ordered = sorted(cards)

    flush_suit = _flush_suit(ordered)
    if flush_suit is not None:
        suited = [card for card in ordered if card.suit == flush_suit]
        straight_flush_high = _straight_high(suited)
        if straight_flush_high == Rank.ACE:
            return HandRank(HandCategory.ROYAL_FLUSH)
        if straight_flush_high is not None:
            return HandRank(HandCategory.STRAIGHT_FLUSH, (straight_flush_high,))

    counts = Counter(card.rank for card in ordered)
    groups = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
    top_rank, top_count = groups[0]
    second = groups[1] if len(groups) > 1 else None

    if top_count == 4:
        return HandRank(HandCategory.FOUR_OF_A_KIND, (top_rank,))
    if top_count == 3 and second is not None and second[1] >= 2:
        # a second set of trips counts as the pair
        return HandRank(HandCategory.FULL_HOUSE, (top_rank, second[0]))
    if flush_suit is not None:
        high = max(card.rank for card in ordered if card.suit == flush_suit)
        return HandRank(HandCategory.FLUSH, (high,))
    straight_high = _straight_high(ordered)
    if straight_high is not None:
        return HandRank(HandCategory.STRAIGHT, (straight_high,))
    if top_count == 3:
        return HandRank(HandCategory.THREE_OF_A_KIND, (top_rank,))
    if top_count == 2 and second is not None and second[1] == 2:
        return HandRank(HandCategory.TWO_PAIR, (top_rank, second[0]))
    if top_count == 2:
        return HandRank(HandCategory.ONE_PAIR, (top_rank,))
    return HandRank(HandCategory.HIGH_CARD, (ordered[-1].rank,))


def _flush_suit(cards: Iterable[Card]) -> Optional[Suit]:
    suits = Counter(card.suit for card in cards)
    for suit, count in suits.items():
        if count >= 5:
            return suit
    return None


def _straight_high(cards: Iterable[Card]) -> Optional[Rank]:
    ranks = {card.rank for card in cards}
    for high in range(Rank.ACE, Rank.FIVE, -1):
        if all(Rank(value) in ranks for value in range(high - 4, high + 1)):
            return Rank(high)
    # Ace sorts high, so A-2-3-4-5 has to be looked for on its own.
    if WHEEL.issubset(ranks):
        return Rank.FIVE
    return None


def compare_hands(first: Sequence[Card], second: Sequence[Card]) -> int:
    a, b = rank_hand(first), rank_hand(second)
    return (a > b) - (a < b)


def group_ties(ranked: Sequence[Tuple[K, HandRank]]) -> List[List[K]]:
    """Group keys by equal HandRank, best group first.

    Keys keep their input order inside a group, so callers that pass players
    in seat order get seat-ordered groups.
    """
    by_rank: Dict[HandRank, List[K]] = {}
    for key, hand_rank in ranked:
        by_rank.setdefault(hand_rank, []).append(key)
    return [by_rank[hand_rank] for hand_rank in sorted(by_rank, reverse=True)]
