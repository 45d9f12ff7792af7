from __future__ import annotations

import logging
from typing import Dict, List, Optional, Type

from .betting import RoundContext
from .cards import Deck
from .errors import RoundSetupError
from .evaluator import HandRank, rank_hand
from .game import RoundController
from .inputs import PlayerInput
from .models import Action, ActionType, TableConfig, Variant
from .records import RoundRecorder

LOGGER = logging.getLogger("poker_engine")


class FiveCardDraw(RoundController):
    """Blinds, five down, bet, one draw, bet, showdown."""

    variant = Variant.FIVE_CARD_DRAW
    hand_size = 5

    def _play(self, ctx: RoundContext) -> None:
        self._post_blinds(ctx)
        for _ in range(self.hand_size):
            self._deal_round(ctx)
        self._betting(ctx, ctx.seat_after(ctx.dealer, 3))
        self._draw(ctx)
        self._betting(ctx, ctx.dealer)

    def _draw(self, ctx: RoundContext) -> None:
        if ctx.hand_over():
            return
        ctx.next_phase()
        display = ctx.player_input
        for index in ctx.active_indices(ctx.dealer):
            player = ctx.players[index]
            display.display_current_player(player)
            display.display_player_cards(player)
            chosen = list(display.request_replace_cards(player))
            if len(set(chosen)) != len(chosen) or any(card not in player.hand for card in chosen):
                raise ValueError(f"{player.name} can only replace cards they hold, once each")
            if not chosen:
                ctx.commit(index, Action(ActionType.CHECK))
                continue

            kept = [card for card in player.return_cards() if card not in chosen]
            for card in kept:
                player.obtain_card(card)
            for card in chosen:
                ctx.deck.return_card(card)
            for _ in chosen:
                player.obtain_card(ctx.deck.deal())
            ctx.commit(index, Action.replace(chosen))


class SevenCardStud(RoundController):
    """Two down and one up, bring-in, three more up, one more down."""

    variant = Variant.SEVEN_CARD_STUD

    def _play(self, ctx: RoundContext) -> None:
        self._deal_round(ctx)
        self._deal_round(ctx)
        self._deal_round(ctx, face_up=True)
        bring_in = self._bring_in(ctx)
        self._betting(ctx, ctx.seat_after(bring_in))
        for _ in range(3):
            self._deal_round(ctx, face_up=True)
            self._betting(ctx, self.best_showing(ctx))
        self._deal_round(ctx)
        self._betting(ctx, self.best_showing(ctx))

    def _bring_in(self, ctx: RoundContext) -> int:
        ctx.next_phase()
        lowest: Optional[int] = None
        for index in ctx.active_indices(ctx.seat_after(ctx.dealer)):
            rank = min(card.rank for card in ctx.players[index].up_cards)
            if lowest is None or rank < min(card.rank for card in ctx.players[lowest].up_cards):
                lowest = index
        assert lowest is not None
        player = ctx.players[lowest]
        ctx.commit(lowest, Action.bet(min(self.minimum_bet, player.balance)))
        LOGGER.debug("[round %s] bring-in by %s", ctx.round_id, player.name)
        return lowest

    def best_showing(self, ctx: RoundContext) -> int:
        """Index of the unfolded player whose up cards rank highest; ties go to the earlier seat."""
        best: Optional[int] = None
        best_rank: Optional[HandRank] = None
        for index in ctx.active_indices(ctx.seat_after(ctx.dealer)):
            showing = rank_hand(ctx.players[index].up_cards)
            if best_rank is None or showing > best_rank:
                best, best_rank = index, showing
        assert best is not None
        return best


class TexasHoldem(RoundController):
    """Two hole cards, blinds, then flop, turn and river with a betting round each."""

    variant = Variant.TEXAS_HOLDEM

    def _play(self, ctx: RoundContext) -> None:
        self._deal_round(ctx)
        self._deal_round(ctx)
        self._post_blinds(ctx)
        self._betting(ctx, ctx.seat_after(ctx.dealer, 3))
        for count in (3, 1, 1):
            self._deal_community(ctx, count)
            self._betting(ctx, ctx.dealer)

    def _deal_community(self, ctx: RoundContext, count: int) -> None:
        if ctx.hand_over():
            return
        for _ in range(count):
            ctx.community.append(ctx.deck.deal(face_up=True))
        LOGGER.debug("[round %s] board %s", ctx.round_id, " ".join(card.label for card in ctx.community))


VARIANTS: Dict[Variant, Type[RoundController]] = {
    Variant.FIVE_CARD_DRAW: FiveCardDraw,
    Variant.SEVEN_CARD_STUD: SevenCardStud,
    Variant.TEXAS_HOLDEM: TexasHoldem,
}


def create_controller(
    config: TableConfig,
    round_id: str = "",
    *,
    player_input: Optional[PlayerInput] = None,
    deck: Optional[Deck] = None,
    recorder: Optional[RoundRecorder] = None,
) -> RoundController:
    variant = config.validate()
    controller_cls = VARIANTS.get(variant)
    if controller_cls is None:
        raise RoundSetupError(f"No controller for {variant.value}")
    return controller_cls(
        config.raise_limit,
        config.minimum_bet,
        round_id,
        player_input=player_input,
        deck=deck,
        recorder=recorder,
    )


def variant_names() -> List[str]:
    return [variant.value for variant in VARIANTS]
