"""Poker round engine: cards, hand ranking, pot ledger and variant controllers."""

from .betting import BettingRound, RoundContext
from .cards import RANKS, SUITS, Card, Deck, Rank, Suit, parse_cards, parse_label
from .errors import (
    DuplicateCardError,
    EmptyDeckError,
    InsufficientBalanceError,
    InvariantViolation,
    PokerError,
    RoundSetupError,
)
from .evaluator import HandCategory, HandRank, compare_hands, group_ties, rank_hand
from .game import RoundController, RoundResult
from .inputs import ConsoleInput, PassiveInput, PlayerInput, ScriptedInput
from .models import Action, ActionType, Player, TableConfig, Turn, Variant
from .pot import Pot
from .records import JsonLinesRecorder, MemoryRecorder, NullRecorder, RoundRecorder
from .variants import FiveCardDraw, SevenCardStud, TexasHoldem, create_controller

__all__ = [
    "BettingRound",
    "RoundContext",
    "RANKS",
    "SUITS",
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "parse_cards",
    "parse_label",
    "DuplicateCardError",
    "EmptyDeckError",
    "InsufficientBalanceError",
    "InvariantViolation",
    "PokerError",
    "RoundSetupError",
    "HandCategory",
    "HandRank",
    "compare_hands",
    "group_ties",
    "rank_hand",
    "RoundController",
    "RoundResult",
    "ConsoleInput",
    "PassiveInput",
    "PlayerInput",
    "ScriptedInput",
    "Action",
    "ActionType",
    "Player",
    "TableConfig",
    "Turn",
    "Variant",
    "Pot",
    "JsonLinesRecorder",
    "MemoryRecorder",
    "NullRecorder",
    "RoundRecorder",
    "FiveCardDraw",
    "SevenCardStud",
    "TexasHoldem",
    "create_controller",
]
