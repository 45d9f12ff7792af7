from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .betting import BettingRound, RoundContext
from .cards import Deck, cards_to_labels, reveal
from .errors import RoundSetupError
from .evaluator import HandRank, group_ties, rank_hand
from .inputs import PassiveInput, PlayerInput
from .models import SEAT_LIMITS, Action, Player, Variant
from .pot import Pot
from .records import NullRecorder, RoundRecorder

LOGGER = logging.getLogger("poker_engine")

# RoundController runs exactly one round at a time for a fixed list of
# players. Variants only describe their phase sequence in _play; dealing,
# forced bets, betting and settlement live here.


@dataclass
class RoundResult:
    round_id: str
    variant: Variant
    payouts: Dict[str, int] = field(default_factory=dict)
    winners: List[str] = field(default_factory=list)
    hands: Dict[str, HandRank] = field(default_factory=dict)
    stakes: Dict[str, int] = field(default_factory=dict)

    def net(self, player_id: str) -> int:
        return self.payouts.get(player_id, 0) - self.stakes.get(player_id, 0)

    def to_payload(self) -> Dict[str, object]:
        return {
            "variant": self.variant.value,
            "payouts": dict(self.payouts),
            "winners": list(self.winners),
            "hands": {player_id: str(hand) for player_id, hand in self.hands.items()},
            "categories": {player_id: hand.describe() for player_id, hand in self.hands.items()},
            "stakes": dict(self.stakes),
        }


class RoundController:
    variant: Variant

    def __init__(
        self,
        raise_limit: int,
        minimum_bet: int,
        round_id: str = "",
        *,
        player_input: Optional[PlayerInput] = None,
        deck: Optional[Deck] = None,
        recorder: Optional[RoundRecorder] = None,
    ) -> None:
        if raise_limit <= 0:
            raise RoundSetupError("raise_limit must be positive")
        if minimum_bet <= 0:
            raise RoundSetupError("minimum_bet must be positive")
        self.raise_limit = raise_limit
        self.minimum_bet = minimum_bet
        self.round_id = round_id
        self.player_input: PlayerInput = player_input or PassiveInput()
        self.deck = deck or Deck()
        self.recorder: RoundRecorder = recorder or NullRecorder()
        # Advanced before every round, so the first dealer is seat 1.
        self.dealer_position = 0

    # Round lifecycle -------------------------------------------------

    def play_round(self, players: Sequence[Player]) -> RoundResult:
        seated = list(players)
        self._validate(seated)

        self.dealer_position = (self.dealer_position + 1) % len(seated)
        ctx = RoundContext(
            round_id=self.round_id,
            players=seated,
            deck=self.deck,
            pot=Pot(player.player_id for player in seated),
            player_input=self.player_input,
            recorder=self.recorder,
            dealer=self.dealer_position,
        )
        LOGGER.info(
            "[round %s] %s starting with %d players, dealer %s",
            self.round_id,
            self.variant.value,
            len(seated),
            seated[ctx.dealer].name,
        )

        self._play(ctx)
        result = self._showdown(ctx)
        self._collect_cards(ctx)

        LOGGER.info("[round %s] finished, payouts %s", self.round_id, result.payouts)
        return result

    def _play(self, ctx: RoundContext) -> None:
        raise NotImplementedError

    def _validate(self, players: List[Player]) -> None:
        low, high = SEAT_LIMITS[self.variant]
        if not low <= len(players) <= high:
            raise RoundSetupError(f"{self.variant.value} seats {low}-{high} players, got {len(players)}")
        player_ids = [player.player_id for player in players]
        if len(set(player_ids)) != len(player_ids):
            raise RoundSetupError("Player ids must be unique")
        broke = [player.name for player in players if player.balance <= 0]
        if broke:
            raise RoundSetupError(f"Players without chips cannot be seated: {', '.join(broke)}")
        holding = [player.name for player in players if player.hand]
        if holding:
            raise RoundSetupError(f"Players still holding cards: {', '.join(holding)}")

    # Shared phases ---------------------------------------------------

    def _post_blinds(self, ctx: RoundContext) -> None:
        ctx.next_phase()
        for offset, blind in ((1, 1), (2, 2)):
            index = ctx.seat_after(ctx.dealer, offset)
            # a short stack posts what it has
            ctx.commit(index, Action.ante(min(blind, ctx.players[index].balance)))

    def _deal_round(self, ctx: RoundContext, face_up: bool = False) -> None:
        """Deal one card to every unfolded player, starting left of the dealer."""
        if ctx.hand_over():
            return
        for index in ctx.active_indices(ctx.seat_after(ctx.dealer)):
            ctx.players[index].obtain_card(ctx.deck.deal(face_up=face_up))

    def _betting(self, ctx: RoundContext, start_index: int) -> None:
        if ctx.hand_over():
            return
        BettingRound(ctx, self.raise_limit, ctx.next_phase(), start_index).run()

    # Showdown --------------------------------------------------------

    def _showdown(self, ctx: RoundContext) -> RoundResult:
        phase = ctx.next_phase()
        order = ctx.order_from(ctx.seat_after(ctx.dealer))
        contenders = [ctx.players[idx] for idx in order if not ctx.has_folded(idx)]
        folded = [ctx.players[idx] for idx in order if ctx.has_folded(idx)]

        for player in contenders:
            for card in player.return_cards():
                player.obtain_card(reveal(card))

        hands: Dict[str, HandRank] = {
            player.player_id: rank_hand(list(player.hand) + ctx.community) for player in contenders
        }
        groups = group_ties([(player.player_id, hands[player.player_id]) for player in contenders])
        if folded:
            groups.append([player.player_id for player in folded])

        stakes = ctx.pot.stakes()
        payouts = ctx.pot.divide_winnings(groups)
        for player in ctx.players:
            if payouts[player.player_id]:
                player.win(payouts[player.player_id])

        held = {player.player_id: player.hand for player in ctx.players}
        for turn in ctx.pot.settle(ctx.round_id, payouts, phase, held):
            ctx.recorder.save_turn(turn)

        winners = [player for player in contenders if payouts[player.player_id] > 0]
        for player in contenders:
            LOGGER.debug(
                "[round %s] %s shows %s: %s",
                ctx.round_id,
                player.name,
                " ".join(cards_to_labels(player.hand)),
                hands[player.player_id],
            )
        ctx.player_input.announce_winners(winners, ctx.players)

        result = RoundResult(
            round_id=ctx.round_id,
            variant=self.variant,
            payouts=payouts,
            winners=[player.player_id for player in winners],
            hands=hands,
            stakes=stakes,
        )
        ctx.recorder.save_round(ctx.round_id, result.to_payload())
        return result

    def _collect_cards(self, ctx: RoundContext) -> None:
        for player in ctx.players:
            for card in player.return_cards():
                ctx.deck.return_card(card)
        for card in ctx.community:
            ctx.deck.return_card(card)
        ctx.community.clear()
