from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence, Set, Tuple

from .cards import Card
from .errors import InvariantViolation
from .models import STAKE_ACTIONS, Action, ActionType, Turn

# Pot is the stake ledger for a single round. Everything it knows is derived
# from the ordered turn log; stakes are cached as turns are appended.


class Pot:
    def __init__(self, player_ids: Iterable[str] = ()) -> None:
        self._history: List[Turn] = []
        self._stakes: Dict[str, int] = {}
        self._folded: Set[str] = set()
        self.clear(player_ids)

    def clear(self, player_ids: Iterable[str]) -> None:
        """Forget the previous round and seat ``player_ids`` with zero stake."""
        self._history = []
        self._stakes = {}
        self._folded = set()
        for player_id in player_ids:
            if player_id in self._stakes:
                raise InvariantViolation(f"Player {player_id} seated twice in the pot")
            self._stakes[player_id] = 0

    # Ledger ----------------------------------------------------------

    @property
    def history(self) -> Tuple[Turn, ...]:
        return tuple(self._history)

    @property
    def player_ids(self) -> List[str]:
        return list(self._stakes)

    def add_turn(self, turn: Turn) -> None:
        player_id = turn.player_id
        if player_id not in self._stakes:
            raise InvariantViolation(f"Player {player_id} is not part of this pot")
        action = turn.action
        bookkeeping = action.type in (ActionType.WIN, ActionType.LOSE)
        if player_id in self._folded and not bookkeeping:
            raise InvariantViolation(f"Player {player_id} acted ({action}) after folding")

        stake = self._stakes[player_id]
        if action.type in STAKE_ACTIONS:
            assert action.amount is not None
            if action.amount <= stake:
                raise InvariantViolation(
                    f"{action} for player {player_id} does not exceed their stake of {stake}"
                )
            self._stakes[player_id] = action.amount
        elif action.type == ActionType.CALL:
            call_amount = self.get_call_amount()
            if call_amount <= stake:
                raise InvariantViolation(f"Player {player_id} has nothing to call")
            self._stakes[player_id] = call_amount
        elif action.type == ActionType.FOLD:
            self._folded.add(player_id)

        self._history.append(turn)

    def get_call_amount(self) -> int:
        return max(self._stakes.values(), default=0)

    def get_player_stake(self, player_id: str) -> int:
        try:
            return self._stakes[player_id]
        except KeyError:
            raise InvariantViolation(f"Cannot find stake for player {player_id}") from None

    def get_total_stake(self) -> int:
        return sum(self._stakes.values())

    def player_has_folded(self, player_id: str) -> bool:
        if player_id not in self._stakes:
            raise InvariantViolation(f"Player {player_id} is not part of this pot")
        return player_id in self._folded

    def number_of_players_folded(self) -> int:
        return len(self._folded)

    def stakes(self) -> Dict[str, int]:
        return dict(self._stakes)

    # Settlement ------------------------------------------------------

    def divide_winnings(self, ranked_groups: Sequence[Sequence[str]]) -> Dict[str, int]:
        """Split the pot across side-pot tiers.

        ``ranked_groups`` lists groups of tied player ids, best group first;
        folded players go last. Each distinct stake level is a tier: everyone
        staked at or above it pays the increment into that tier's sub-pot,
        which goes to the best group with a member still eligible for it
        (not folded, staked at least the tier). Tied members split evenly and
        odd chips go one each to the earliest-listed members.

        Returns the gross amount paid to every seated player (0 for losers).
        """
        listed = [player_id for group in ranked_groups for player_id in group]
        unknown = [player_id for player_id in listed if player_id not in self._stakes]
        if unknown:
            raise InvariantViolation(f"Ranked players not in pot: {unknown}")
        if len(set(listed)) != len(listed):
            raise InvariantViolation("A player appears in more than one ranking group")

        payouts: Dict[str, int] = {player_id: 0 for player_id in self._stakes}
        previous = 0
        for level in sorted({stake for stake in self._stakes.values() if stake > 0}):
            increment = level - previous
            previous = level
            contributors = [player_id for player_id, stake in self._stakes.items() if stake >= level]
            winners = self._tier_winners(ranked_groups, level)
            if not winners:
                # Only folded players reached this tier; hand it back.
                for player_id in contributors:
                    payouts[player_id] += increment
                continue
            share, remainder = divmod(increment * len(contributors), len(winners))
            for idx, player_id in enumerate(winners):
                payouts[player_id] += share + (1 if idx < remainder else 0)

        distributed = sum(payouts.values())
        if distributed != self.get_total_stake():
            raise InvariantViolation(
                f"Distributed {distributed} but players staked {self.get_total_stake()}"
            )
        return payouts

    def _tier_winners(self, ranked_groups: Sequence[Sequence[str]], level: int) -> List[str]:
        for group in ranked_groups:
            eligible = [
                player_id
                for player_id in group
                if player_id not in self._folded and self._stakes[player_id] >= level
            ]
            if eligible:
                return eligible
        return []

    def settle(
        self,
        round_id: str,
        payouts: Mapping[str, int],
        phase: int,
        hands: Mapping[str, Sequence[Card]],
    ) -> List[Turn]:
        """Append WIN/LOSE bookkeeping turns for a finished division."""
        turns: List[Turn] = []
        for player_id, stake in self._stakes.items():
            payout = payouts.get(player_id, 0)
            if payout > 0:
                action = Action(ActionType.WIN, payout)
            elif stake > 0:
                action = Action(ActionType.LOSE, stake)
            else:
                continue
            turn = Turn(round_id, player_id, action, phase, tuple(hands.get(player_id, ())))
            self.add_turn(turn)
            turns.append(turn)
        return turns
