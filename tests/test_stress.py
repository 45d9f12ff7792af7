import random
from typing import List, Sequence

import pytest

from pokerengine.cards import Card
from pokerengine.inputs import SilentDisplay
from pokerengine.models import SEAT_LIMITS, ActionType, Player, TableConfig, Variant
from pokerengine.records import MemoryRecorder
from pokerengine.variants import create_controller

from .helpers import RiggedDeck, make_players, total_balance


class RandomInput(SilentDisplay):
    """Picks any offered option; keeps raises, all-ins and folds in the mix."""

    def __init__(self, seed: int) -> None:
        self.rng = random.Random(seed)

    def request_action(self, player: Player, options: Sequence[ActionType]) -> ActionType:
        return self.rng.choice(list(options))

    def request_raise_amount(self, player: Player, limit: int) -> int:
        return self.rng.randint(1, limit)

    def request_replace_cards(self, player: Player) -> List[Card]:
        hand = list(player.hand)
        return self.rng.sample(hand, self.rng.randint(0, len(hand)))


@pytest.mark.parametrize("variant", list(Variant))
def test_random_play_conserves_chips_and_cards(variant):
    seats = SEAT_LIMITS[variant][1] if variant != Variant.FIVE_CARD_DRAW else 6
    recorder = MemoryRecorder()
    controller = create_controller(
        TableConfig(variant=variant.value, seats=seats, raise_limit=25, minimum_bet=5),
        player_input=RandomInput(seed=seats),
        deck=RiggedDeck(seed=1_234),
        recorder=recorder,
    )
    players = make_players(*[random.Random(idx).randint(20, 300) for idx in range(seats)])
    starting_total = total_balance(players)
    rounds_played = 0

    for number in range(300):
        seated = [player for player in players if player.balance > 0]
        if len(seated) < 2:
            break
        controller.round_id = f"R-{number:05d}"
        balances_before = {player.player_id: player.balance for player in seated}

        result = controller.play_round(seated)
        rounds_played += 1

        assert total_balance(players) == starting_total
        assert sum(result.payouts.values()) == sum(result.stakes.values())
        assert len(controller.deck) == 52
        for player in seated:
            assert player.balance == balances_before[player.player_id] + result.net(player.player_id)
            assert player.balance >= 0

    assert rounds_played >= 1
    assert len(recorder.rounds) == rounds_played
    # every round stores exactly one settlement turn per player who staked anything
    for round_id, summary in recorder.rounds:
        settled = [
            turn
            for turn in recorder.turns_for(round_id)
            if turn.action.type in (ActionType.WIN, ActionType.LOSE)
        ]
        staked = [player_id for player_id, amount in summary["stakes"].items() if amount > 0]
        assert sorted(turn.player_id for turn in settled) == sorted(staked)
