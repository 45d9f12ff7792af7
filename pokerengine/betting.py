from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .cards import Card, Deck
from .inputs import PlayerInput
from .models import STAKE_ACTIONS, Action, ActionType, Player, Turn
from .pot import Pot
from .records import RoundRecorder

LOGGER = logging.getLogger("poker_engine")

# The betting round only talks to the table through RoundContext; the
# variant controllers own the context and decide where each circuit starts.


@dataclass
class RoundContext:
    # Everything that lives for exactly one round.
    round_id: str
    players: List[Player]
    deck: Deck
    pot: Pot
    player_input: PlayerInput
    recorder: RoundRecorder
    dealer: int = 0
    community: List[Card] = field(default_factory=list)
    phase: int = 0

    def next_phase(self) -> int:
        self.phase += 1
        return self.phase

    def seat_after(self, index: int, offset: int = 1) -> int:
        return (index + offset) % len(self.players)

    def order_from(self, index: int) -> List[int]:
        count = len(self.players)
        return [(index + step) % count for step in range(count)]

    def has_folded(self, index: int) -> bool:
        return self.pot.player_has_folded(self.players[index].player_id)

    def can_act(self, index: int) -> bool:
        return not self.has_folded(index) and self.players[index].balance > 0

    def active_indices(self, start: int = 0) -> List[int]:
        return [idx for idx in self.order_from(start) if not self.has_folded(idx)]

    def hand_over(self) -> bool:
        return self.pot.number_of_players_folded() + 1 >= len(self.players)

    def stake_of(self, index: int) -> int:
        return self.pot.get_player_stake(self.players[index].player_id)

    def commit(self, index: int, action: Action) -> Turn:
        """Record ``action`` for the player at ``index`` and move their chips."""
        player = self.players[index]
        stake = self.pot.get_player_stake(player.player_id)
        if action.type in STAKE_ACTIONS:
            assert action.amount is not None
            debit = action.amount - stake
        elif action.type == ActionType.CALL:
            debit = self.pot.get_call_amount() - stake
        else:
            debit = 0
        turn = Turn(self.round_id, player.player_id, action, self.phase, player.hand)
        self.pot.add_turn(turn)
        if debit:
            player.bet(debit)
        self.recorder.save_turn(turn)
        LOGGER.debug("[round %s] phase %s: %s %s", self.round_id, self.phase, player.name, action)
        return turn


class BettingRound:
    """One circuit of betting starting at ``start_index``.

    The circuit ends when play comes back round to the last raiser (the
    start seat if nobody raises), when every player but one has folded, or
    when no one left could change the pot.
    """

    def __init__(self, ctx: RoundContext, raise_limit: int, phase: int, start_index: int) -> None:
        if raise_limit <= 0:
            raise ValueError("raise_limit must be positive")
        self.ctx = ctx
        self.raise_limit = raise_limit
        self.phase = phase
        self.start_index = start_index % len(ctx.players)

    def run(self) -> None:
        ctx = self.ctx
        ctx.phase = self.phase
        last_raiser = self.start_index
        raised = False
        index = self.start_index
        while True:
            if ctx.hand_over() or self._nobody_can_act():
                return
            if ctx.can_act(index) and self._take_turn(index, raised):
                last_raiser = index
                raised = True
            index = ctx.seat_after(index)
            if index == last_raiser:
                return

    def _nobody_can_act(self) -> bool:
        ctx = self.ctx
        actionable = [idx for idx in range(len(ctx.players)) if ctx.can_act(idx)]
        if not actionable:
            return True
        if len(actionable) == 1:
            return ctx.stake_of(actionable[0]) >= ctx.pot.get_call_amount()
        return False

    def options_for(self, index: int, raised: bool) -> List[ActionType]:
        ctx = self.ctx
        stake = ctx.stake_of(index)
        call_amount = ctx.pot.get_call_amount()
        if not raised and stake == call_amount:
            return [ActionType.CHECK, ActionType.RAISE, ActionType.FOLD]
        if ctx.players[index].balance > call_amount - stake:
            return [ActionType.CALL, ActionType.RAISE, ActionType.FOLD]
        return [ActionType.ALL_IN, ActionType.FOLD]

    # Action handling -------------------------------------------------

    def _take_turn(self, index: int, raised: bool) -> bool:
        """Prompt the player at ``index``; returns True if they raised the call amount."""
        ctx = self.ctx
        player = ctx.players[index]
        self._show_table(player)

        options = self.options_for(index, raised)
        choice = ctx.player_input.request_action(player, options)
        if choice not in options:
            offered = ", ".join(option.value for option in options)
            raise ValueError(f"{player.name} chose {getattr(choice, 'value', choice)}, expected one of: {offered}")

        stake = ctx.stake_of(index)
        call_amount = ctx.pot.get_call_amount()

        if choice == ActionType.RAISE:
            limit = min(self.raise_limit, player.balance - (call_amount - stake))
            increment = ctx.player_input.request_raise_amount(player, limit)
            if isinstance(increment, bool) or not isinstance(increment, int) or not 1 <= increment <= limit:
                raise ValueError(f"Raise of {increment} for {player.name} is outside 1-{limit}")
            ctx.commit(index, Action.raise_to(call_amount + increment))
            return True
        if choice == ActionType.ALL_IN:
            total = stake + player.balance
            ctx.commit(index, Action.all_in(total))
            return total > call_amount

        ctx.commit(index, Action(choice))
        return False

    def _show_table(self, player: Player) -> None:
        ctx = self.ctx
        display = ctx.player_input
        display.display_current_player(player)
        display.display_player_cards(player)
        if ctx.community:
            display.display_community_cards(player, ctx.community)
        others = [other for other in ctx.players if other is not player and other.up_cards]
        if others:
            display.display_up_cards(player, others)
        display.display_pot(ctx.pot.get_total_stake(), ctx.players)
