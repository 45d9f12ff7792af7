from __future__ import annotations

from collections import deque
from typing import Deque, Iterable, List, Optional, Sequence

from pokerengine.betting import RoundContext
from pokerengine.cards import Card, Deck, parse_cards
from pokerengine.inputs import PlayerInput, ScriptedInput
from pokerengine.models import Action, ActionType, Player, Turn
from pokerengine.pot import Pot
from pokerengine.records import MemoryRecorder


class RiggedDeck(Deck):
    """Deals ``labels`` first, in order, then falls back to the seeded shuffle."""

    def __init__(self, labels: Iterable[str] = (), seed: int = 0) -> None:
        super().__init__(seed)
        self.queue: Deque[Card] = deque(parse_cards(labels))

    def _draw_index(self) -> int:
        if self.queue:
            return self.remaining().index(self.queue.popleft())
        return super()._draw_index()


def make_players(*balances: int) -> List[Player]:
    """Players P0, P1, ... with ids p0, p1, ... in seat order."""
    return [Player(balance, player_id=f"p{idx}", name=f"P{idx}") for idx, balance in enumerate(balances)]


def make_context(
    players: Sequence[Player],
    player_input: Optional[PlayerInput] = None,
    dealer: int = 0,
) -> RoundContext:
    return RoundContext(
        round_id="R-test",
        players=list(players),
        deck=Deck(seed=1),
        pot=Pot(player.player_id for player in players),
        player_input=player_input or ScriptedInput(),
        recorder=MemoryRecorder(),
        dealer=dealer,
    )


def stake(pot: Pot, player_id: str, total: int, phase: int = 1) -> None:
    pot.add_turn(Turn("R-test", player_id, Action.ante(total), phase))


def fold(pot: Pot, player_id: str, phase: int = 1) -> None:
    pot.add_turn(Turn("R-test", player_id, Action(ActionType.FOLD), phase))


def total_balance(players: Iterable[Player]) -> int:
    return sum(player.balance for player in players)


def assert_deck_partition(deck: Deck, players: Iterable[Player], community: Sequence[Card] = ()) -> None:
    held = [card for player in players for card in player.hand] + list(community)
    everything = deck.remaining() + held
    assert len(everything) == 52
    assert len(set(everything)) == 52
